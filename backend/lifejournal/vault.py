# lifejournal/vault.py
"""
Credential vault: integration tokens (OAuth access/refresh tokens, API keys)
sealed with the master key before they reach `user_credentials`.

The stored payload is {"token": ..., "tokenType": ...}; only the envelope JSON
is written to `encrypted_token`.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from psycopg.rows import dict_row

from .crypto import seal, unseal
from .errors import DeserializationError
from .keys import KeyProvider

logger = logging.getLogger(__name__)


def _payload(token: str, token_type: str) -> dict:
    return {"token": token, "tokenType": token_type}


def _token_from(decrypted) -> str:
    # Callers only ever get the token string back
    if not isinstance(decrypted, dict) or not isinstance(decrypted.get("token"), str):
        raise DeserializationError("credential payload has unexpected shape")
    return decrypted["token"]


class CredentialVault:
    """Postgres-backed vault (table `user_credentials`)."""

    def __init__(self, pool, key_provider: KeyProvider):
        self.pool = pool
        self.keys = key_provider

    def store(self, user_id: str, integration: str, token: str, token_type: str = "access") -> None:
        master_key = self.keys.get_master_key()
        envelope = seal(_payload(token, token_type), master_key)

        with self.pool.connection() as conn, conn.cursor() as cur:
            # Upsert; storing again also revives a soft-deleted credential
            cur.execute("""
                insert into user_credentials(user_id, integration, encrypted_token, token_type, updated_at)
                values (%s, %s, %s, %s, now())
                on conflict (user_id, integration) do update
                set encrypted_token = excluded.encrypted_token,
                    token_type      = excluded.token_type,
                    updated_at      = now(),
                    deleted_at      = null
            """, (user_id, integration, envelope.to_json(), token_type))
            conn.commit()
        logger.info("Credential stored user=%s integration=%s", user_id, integration)

    def get(self, user_id: str, integration: str) -> Optional[str]:
        with self.pool.connection() as conn, conn.cursor(row_factory=dict_row) as cur:
            cur.execute("""
                select encrypted_token
                from user_credentials
                where user_id = %s and integration = %s and deleted_at is null
            """, (user_id, integration))
            row = cur.fetchone()
            if not row or not row["encrypted_token"]:
                return None

            master_key = self.keys.get_master_key()
            token = _token_from(unseal(row["encrypted_token"], master_key))

            cur.execute("""
                update user_credentials set last_used = now()
                where user_id = %s and integration = %s
            """, (user_id, integration))
            conn.commit()
        return token

    def delete(self, user_id: str, integration: str) -> None:
        # Soft delete: keep the row for audit, drop the ciphertext
        with self.pool.connection() as conn, conn.cursor() as cur:
            cur.execute("""
                update user_credentials
                set deleted_at = now(), encrypted_token = null
                where user_id = %s and integration = %s
            """, (user_id, integration))
            conn.commit()
        logger.info("Credential deleted user=%s integration=%s", user_id, integration)


class LocalCredentialVault:
    """In-memory vault with the same interface, for development without a DB."""

    def __init__(self, key_provider: KeyProvider):
        self.keys = key_provider
        self._store: dict[str, dict] = {}

    @staticmethod
    def _key(user_id: str, integration: str) -> str:
        return f"{user_id}:{integration}"

    def store(self, user_id: str, integration: str, token: str, token_type: str = "access") -> None:
        envelope = seal(_payload(token, token_type), self.keys.get_master_key())
        self._store[self._key(user_id, integration)] = {
            "encrypted": envelope.to_dict(),
            "token_type": token_type,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }

    def get(self, user_id: str, integration: str) -> Optional[str]:
        stored = self._store.get(self._key(user_id, integration))
        if not stored:
            return None
        return _token_from(unseal(stored["encrypted"], self.keys.get_master_key()))

    def delete(self, user_id: str, integration: str) -> None:
        self._store.pop(self._key(user_id, integration), None)

    def clear(self) -> None:
        self._store.clear()


__all__ = ["CredentialVault", "LocalCredentialVault"]
