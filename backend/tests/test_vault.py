import json
from unittest.mock import MagicMock

import pytest

from lifejournal.crypto import seal, unseal
from lifejournal.errors import AuthenticationError, ConfigurationError, DeserializationError
from lifejournal.keys import KeyProvider
from lifejournal.vault import CredentialVault, LocalCredentialVault

USER = "11111111-1111-1111-1111-111111111111"

@pytest.fixture
def keys():
    return KeyProvider("00" * 32)

@pytest.fixture
def db():
    mock_pool = MagicMock()
    mock_conn = MagicMock()
    mock_cur = MagicMock()
    mock_pool.connection.return_value.__enter__.return_value = mock_conn
    mock_conn.cursor.return_value.__enter__.return_value = mock_cur
    return mock_pool, mock_conn, mock_cur

# ---------- in-memory vault ----------

def test_local_store_and_get(keys):
    vault = LocalCredentialVault(keys)
    vault.store(USER, "google_maps", "ya29.token", "access")
    assert vault.get(USER, "google_maps") == "ya29.token"
    assert vault.get(USER, "amazon") is None

def test_local_token_is_sealed(keys):
    vault = LocalCredentialVault(keys)
    vault.store(USER, "amazon", "secret-token")
    stored = vault._store[f"{USER}:amazon"]
    assert "secret-token" not in json.dumps(stored)
    assert unseal(stored["encrypted"], keys.get_master_key()) == {"token": "secret-token", "tokenType": "access"}

def test_local_delete_and_clear(keys):
    vault = LocalCredentialVault(keys)
    vault.store(USER, "a", "t1")
    vault.store(USER, "b", "t2")
    vault.delete(USER, "a")
    assert vault.get(USER, "a") is None
    vault.clear()
    assert vault.get(USER, "b") is None

def test_local_wrong_key_cannot_read(keys):
    vault = LocalCredentialVault(keys)
    vault.store(USER, "a", "t1")
    vault.keys = KeyProvider("11" * 32)
    with pytest.raises(AuthenticationError):
        vault.get(USER, "a")

def test_misconfigured_key_fails_fast():
    vault = LocalCredentialVault(KeyProvider(None))
    with pytest.raises(ConfigurationError):
        vault.store(USER, "a", "t1")

# ---------- postgres vault ----------

def test_store_writes_envelope_only(keys, db):
    mock_pool, mock_conn, mock_cur = db
    CredentialVault(mock_pool, keys).store(USER, "google_maps", "ya29.token", "refresh")

    sql, params = mock_cur.execute.call_args[0]
    assert "on conflict (user_id, integration)" in sql
    assert params[0] == USER and params[1] == "google_maps" and params[3] == "refresh"
    assert "ya29.token" not in params[2]
    assert unseal(params[2], keys.get_master_key()) == {"token": "ya29.token", "tokenType": "refresh"}
    mock_conn.commit.assert_called_once()

def test_get_unseals_and_touches_last_used(keys, db):
    mock_pool, mock_conn, mock_cur = db
    envelope = seal({"token": "abc", "tokenType": "access"}, keys.get_master_key())
    mock_cur.fetchone.return_value = {"encrypted_token": envelope.to_json()}

    assert CredentialVault(mock_pool, keys).get(USER, "amazon") == "abc"
    assert "last_used" in mock_cur.execute.call_args_list[-1][0][0]
    mock_conn.commit.assert_called_once()

@pytest.mark.parametrize("row", [None, {"encrypted_token": None}])
def test_get_missing_or_deleted(keys, db, row):
    mock_pool, mock_conn, mock_cur = db
    mock_cur.fetchone.return_value = row
    assert CredentialVault(mock_pool, keys).get(USER, "amazon") is None
    mock_conn.commit.assert_not_called()

def test_get_unexpected_payload_shape(keys, db):
    mock_pool, _, mock_cur = db
    mock_cur.fetchone.return_value = {"encrypted_token": seal(["not", "a", "dict"], keys.get_master_key()).to_json()}
    with pytest.raises(DeserializationError):
        CredentialVault(mock_pool, keys).get(USER, "amazon")

def test_delete_is_soft(keys, db):
    mock_pool, mock_conn, mock_cur = db
    CredentialVault(mock_pool, keys).delete(USER, "amazon")
    sql, params = mock_cur.execute.call_args[0]
    assert "deleted_at = now()" in sql and "encrypted_token = null" in sql
    assert params == (USER, "amazon")
    mock_conn.commit.assert_called_once()
