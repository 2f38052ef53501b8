# lifejournal/routes/calendar.py
import datetime as dt
import uuid
from fastapi import APIRouter, Depends, Header, HTTPException, Query
from psycopg.rows import dict_row
from lifejournal import db
from lifejournal.crypto import seal
from lifejournal.deps import AUTH_DEP, get_master_key
from lifejournal.models import CalendarEventIn
from lifejournal.records import unseal_rows
from lifejournal.security.auth import AuthPrincipal, resolve_user_id

router = APIRouter(prefix="/api/calendar", tags=["calendar"])

@router.get("/events")
def list_calendar_events(
    start: dt.date | None = Query(default=None),
    end: dt.date | None = Query(default=None),
    principal: AuthPrincipal = Depends(AUTH_DEP),
    master_key: bytes = Depends(get_master_key),
    x_actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
):
    """Calendar events, optionally bounded by date; unreadable titles are left out."""
    user_id = resolve_user_id(principal, x_actor_id)

    sql = """
    select id::text, title_encrypted, event_date, event_time, event_type, source
    from calendar_events
    where user_id = %s
    """
    params: list = [user_id]
    if start:
        sql += " and event_date >= %s"
        params.append(start)
    if end:
        sql += " and event_date <= %s"
        params.append(end)
    sql += " order by event_date asc"

    with db.pool.connection() as conn, conn.cursor(row_factory=dict_row) as cur:
        cur.execute(sql, tuple(params))
        rows = cur.fetchall()

    events = [
        {
            "id": r["id"],
            "title": title,
            "date": r["event_date"],
            "time": r["event_time"],
            "type": r["event_type"],
            "source": r["source"],
        }
        for r, title in unseal_rows(rows, "title_encrypted", master_key, skip_unreadable=True)
    ]
    return {"success": True, "events": events, "count": len(events)}

@router.post("/events")
def add_calendar_event(
    body: CalendarEventIn,
    principal: AuthPrincipal = Depends(AUTH_DEP),
    master_key: bytes = Depends(get_master_key),
    x_actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
):
    user_id = resolve_user_id(principal, x_actor_id)
    if not body.title or not body.date:
        raise HTTPException(status_code=400, detail="Title and date required")
    event_type = body.type or "reminder"

    with db.pool.connection() as conn, conn.cursor(row_factory=dict_row) as cur:
        cur.execute("""
            insert into calendar_events(user_id, title_encrypted, event_date, event_time, event_type, source)
            values (%s, %s, %s, %s, %s, 'manual')
            returning id::text
        """, (user_id, seal(body.title, master_key).to_json(), body.date, body.time, event_type))
        row = cur.fetchone()
        conn.commit()

    return {
        "success": True,
        "event": {"id": row["id"], "title": body.title, "date": body.date,
                  "time": body.time, "type": event_type},
    }

@router.delete("/events/{event_id}")
def delete_calendar_event(
    event_id: uuid.UUID,
    principal: AuthPrincipal = Depends(AUTH_DEP),
    x_actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
):
    user_id = resolve_user_id(principal, x_actor_id)
    with db.pool.connection() as conn, conn.cursor() as cur:
        cur.execute("delete from calendar_events where id = %s and user_id = %s", (str(event_id), user_id))
        conn.commit()
    return {"success": True}
