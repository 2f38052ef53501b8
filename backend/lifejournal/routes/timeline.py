# lifejournal/routes/timeline.py
import datetime as dt
import logging
from fastapi import APIRouter, Depends, Header, HTTPException, Query
from psycopg.rows import dict_row
from lifejournal import db
from lifejournal.crypto import seal
from lifejournal.deps import AUTH_DEP, get_master_key
from lifejournal.models import TimelineEventIn, TimelineEventOut, TimelineOut
from lifejournal.records import unseal_rows
from lifejournal.security.auth import AuthPrincipal, resolve_user_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/timeline", tags=["timeline"])

SQL_RANGE = """
select id::text, event_date, event_type, event_data_encrypted, source_integration
from timeline_events
where user_id = %s and event_date >= %s and event_date <= %s
order by event_date asc
"""

SQL_DAY = """
select id::text, event_date, event_type, event_data_encrypted, source_integration
from timeline_events
where user_id = %s and event_date = %s
order by created_at asc
"""

def week_range(weeks_ago: int = 0, today: dt.date | None = None) -> dict[str, dt.date]:
    """Trailing seven days ending `weeks_ago` weeks before today."""
    end = (today or dt.datetime.now(dt.timezone.utc).date()) - dt.timedelta(weeks=weeks_ago)
    return {"start": end - dt.timedelta(days=7), "end": end}

def _event(row, value) -> TimelineEventOut:
    return TimelineEventOut(
        id=row["id"],
        type=row["event_type"],
        timestamp=row["event_date"],
        data=value,
        source=row["source_integration"],
    )

@router.post("", status_code=201)
def add_event(
    body: TimelineEventIn,
    principal: AuthPrincipal = Depends(AUTH_DEP),
    master_key: bytes = Depends(get_master_key),
    x_actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
):
    user_id = resolve_user_id(principal, x_actor_id)
    try:
        envelope = seal(body.data, master_key)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="event data is not serializable")

    with db.pool.connection() as conn, conn.cursor(row_factory=dict_row) as cur:
        cur.execute("""
            insert into timeline_events(user_id, event_date, event_type, event_data_encrypted, source_integration)
            values (%s, %s, %s, %s, %s)
            returning id::text
        """, (user_id, body.date, body.type, envelope.to_json(), body.source))
        row = cur.fetchone()
        conn.commit()

    return {"success": True, "id": row["id"]}

@router.get("", response_model=TimelineOut)
def list_events(
    start: dt.date | None = Query(default=None),
    end: dt.date | None = Query(default=None),
    principal: AuthPrincipal = Depends(AUTH_DEP),
    master_key: bytes = Depends(get_master_key),
    x_actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
):
    """Events in a date range; unreadable records are returned with `data: null`."""
    user_id = resolve_user_id(principal, x_actor_id)
    date_range = {"start": start, "end": end} if start and end else week_range(0)

    with db.pool.connection() as conn, conn.cursor(row_factory=dict_row) as cur:
        cur.execute(SQL_RANGE, (user_id, date_range["start"], date_range["end"]))
        rows = cur.fetchall()

    events = [_event(r, v) for r, v in unseal_rows(rows, "event_data_encrypted", master_key)]
    return TimelineOut(events=events, count=len(events), dateRange=date_range)

@router.get("/{date}", response_model=TimelineOut)
def day_events(
    date: dt.date,
    principal: AuthPrincipal = Depends(AUTH_DEP),
    master_key: bytes = Depends(get_master_key),
    x_actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
):
    """Events for one day; unreadable records are left out."""
    user_id = resolve_user_id(principal, x_actor_id)

    with db.pool.connection() as conn, conn.cursor(row_factory=dict_row) as cur:
        cur.execute(SQL_DAY, (user_id, date))
        rows = cur.fetchall()

    pairs = unseal_rows(rows, "event_data_encrypted", master_key, skip_unreadable=True)
    events = [_event(r, v) for r, v in pairs]
    return TimelineOut(events=events, count=len(events), date=date)
