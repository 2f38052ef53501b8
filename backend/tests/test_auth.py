import time

import jwt
import pytest
from fastapi import HTTPException

from lifejournal.security.auth import (
    API_KEY_PRINCIPAL, AuthPrincipal, require_api_key, require_bearer, resolve_user_id,
)

SIGNING_KEY = "test-signing-key-0123456789abcdef0123"
USER = "11111111-1111-1111-1111-111111111111"

def _token(**overrides):
    now = int(time.time())
    claims = {"userId": USER, "email": "me@example.com", "aud": "lifejournal", "iat": now, "exp": now + 600}
    claims.update(overrides)
    claims = {k: v for k, v in claims.items() if v is not None}
    return jwt.encode(claims, SIGNING_KEY, algorithm="HS256")

def test_bearer_with_user_id_claim():
    principal = require_bearer(authorization=f"Bearer {_token()}")
    assert principal.id == USER
    assert principal.email == "me@example.com"

def test_bearer_prefers_sub():
    principal = require_bearer(authorization=f"Bearer {_token(sub='abc')}")
    assert principal.id == "abc"

@pytest.mark.parametrize("header", [
    None,
    "Token abc",
    "Bearer",
    f"Bearer {_token(exp=int(time.time()) - 3600)}",
    f"Bearer {_token(aud='someone-else')}",
    f"Bearer {_token(exp=None)}",
    f"Bearer {_token(userId=None)}",
    "Bearer " + jwt.encode({"userId": USER, "aud": "lifejournal", "exp": int(time.time()) + 600},
                           "another-signing-key-0123456789abcdef", algorithm="HS256"),
])
def test_bearer_rejected(header):
    with pytest.raises(HTTPException) as exc:
        require_bearer(authorization=header)
    assert exc.value.status_code == 401
    assert exc.value.detail == "Unauthorized"

def test_api_key():
    assert require_api_key(x_api_key="test-api-key").id == API_KEY_PRINCIPAL
    with pytest.raises(HTTPException):
        require_api_key(x_api_key="wrong")
    with pytest.raises(HTTPException):
        require_api_key(x_api_key=None)

def test_resolve_user_id_bearer_ignores_actor_header():
    assert resolve_user_id(AuthPrincipal(id=USER), "22222222-2222-2222-2222-222222222222") == USER

def test_resolve_user_id_api_key():
    principal = AuthPrincipal(id=API_KEY_PRINCIPAL)
    assert resolve_user_id(principal, USER.upper()) == USER
    with pytest.raises(HTTPException) as exc:
        resolve_user_id(principal, None)
    assert exc.value.status_code == 400
