# lifejournal/routes/coach.py
"""
Coach memory and chat history. Both are sealed at rest: `coach_context`
holds what the coach remembers about the user, `coach_conversations` the
messages of each chat session.
"""
import uuid
from fastapi import APIRouter, Depends, Header, HTTPException, Query
from psycopg.rows import dict_row
from lifejournal import db
from lifejournal.crypto import seal
from lifejournal.deps import AUTH_DEP, get_master_key
from lifejournal.models import ChatMessageIn
from lifejournal.records import unseal_rows
from lifejournal.security.auth import AuthPrincipal, resolve_user_id

router = APIRouter(prefix="/api/coach", tags=["coach"])

# ---------- context ----------

@router.get("/context")
def list_context(
    principal: AuthPrincipal = Depends(AUTH_DEP),
    master_key: bytes = Depends(get_master_key),
    x_actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
):
    user_id = resolve_user_id(principal, x_actor_id)
    with db.pool.connection() as conn, conn.cursor(row_factory=dict_row) as cur:
        cur.execute("""
            select id::text, context_type, context_encrypted, source, updated_at
            from coach_context
            where user_id = %s
            order by updated_at desc
        """, (user_id,))
        rows = cur.fetchall()

    contexts = [
        {"id": r["id"], "type": r["context_type"], "detail": detail,
         "source": r["source"], "updatedAt": r["updated_at"]}
        for r, detail in unseal_rows(rows, "context_encrypted", master_key, skip_unreadable=True)
    ]
    return {"success": True, "contexts": contexts, "count": len(contexts)}

@router.delete("/context/{context_id}")
def delete_context(
    context_id: uuid.UUID,
    principal: AuthPrincipal = Depends(AUTH_DEP),
    x_actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
):
    user_id = resolve_user_id(principal, x_actor_id)
    with db.pool.connection() as conn, conn.cursor() as cur:
        cur.execute("delete from coach_context where id = %s and user_id = %s", (str(context_id), user_id))
        conn.commit()
    return {"success": True}

# ---------- chat ----------

@router.post("/chat/messages", status_code=201)
def store_chat_message(
    body: ChatMessageIn,
    principal: AuthPrincipal = Depends(AUTH_DEP),
    master_key: bytes = Depends(get_master_key),
    x_actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
):
    """Persist one chat message of a session."""
    user_id = resolve_user_id(principal, x_actor_id)
    try:
        envelope = seal(body.content, master_key)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="message content is not serializable")

    with db.pool.connection() as conn, conn.cursor(row_factory=dict_row) as cur:
        cur.execute("""
            insert into coach_conversations(user_id, session_id, message_encrypted, role)
            values (%s, %s, %s, %s)
            returning id::text
        """, (user_id, body.sessionId, envelope.to_json(), body.role))
        row = cur.fetchone()
        conn.commit()
    return {"success": True, "id": row["id"], "sessionId": body.sessionId}

@router.get("/chat/history")
def chat_history(
    session_id: str | None = Query(default=None, alias="sessionId"),
    principal: AuthPrincipal = Depends(AUTH_DEP),
    master_key: bytes = Depends(get_master_key),
    x_actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
):
    """Messages oldest first, optionally for one session; unreadable messages are left out."""
    user_id = resolve_user_id(principal, x_actor_id)

    sql = """
    select id::text, session_id, role, message_encrypted, created_at
    from coach_conversations
    where user_id = %s
    """
    params: tuple = (user_id,)
    if session_id:
        sql += " and session_id = %s"
        params += (session_id,)
    sql += " order by created_at asc"

    with db.pool.connection() as conn, conn.cursor(row_factory=dict_row) as cur:
        cur.execute(sql, params)
        rows = cur.fetchall()

    messages = [
        {"id": r["id"], "sessionId": r["session_id"], "role": r["role"],
         "content": content, "timestamp": r["created_at"]}
        for r, content in unseal_rows(rows, "message_encrypted", master_key, skip_unreadable=True)
    ]
    return {"success": True, "messages": messages, "count": len(messages)}
