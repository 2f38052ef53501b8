# lifejournal/security/auth.py
import os
import uuid
import logging
from dataclasses import dataclass
from typing import Optional
from fastapi import Header, HTTPException
import jwt  # PyJWT

logger = logging.getLogger(__name__)

API_KEY   = os.getenv("API_KEY", "")

JWT_ALG         = os.getenv("JWT_ALG", "HS256")
JWT_SIGNING_KEY = os.getenv("JWT_SIGNING_KEY", "")
JWT_AUDIENCE    = os.getenv("JWT_AUDIENCE", "lifejournal")
ISSUER          = os.getenv("ISSUER", "")

API_KEY_PRINCIPAL = "api-key"

@dataclass
class AuthPrincipal:
    """Represents an authenticated principal."""
    id: str
    subject: Optional[str] = None
    issuer: Optional[str] = None
    email: Optional[str] = None

def _unauth(detail: str):
    logger.warning("Auth failed: %s", detail)
    raise HTTPException(status_code=401, detail="Unauthorized")

def _require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> AuthPrincipal:
    """Simple header-based API key auth (service-to-service calls)."""
    if not API_KEY:
        _unauth("API_KEY not configured")
    if not x_api_key:
        _unauth("Missing X-API-Key header")
    if x_api_key != API_KEY:
        _unauth("Invalid API key")
    return AuthPrincipal(id=API_KEY_PRINCIPAL, subject=API_KEY_PRINCIPAL, issuer="local")

def _require_bearer(authorization: str | None = Header(default=None)) -> AuthPrincipal:
    """Validate a Bearer JWT issued to a journal user."""
    if not authorization:
        _unauth("Missing Authorization header")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        _unauth("Malformed Authorization header")

    token = parts[1]
    try:
        payload = jwt.decode(
            token,
            JWT_SIGNING_KEY,
            algorithms=[JWT_ALG],
            audience=JWT_AUDIENCE,
            issuer=ISSUER or None,
            leeway=30,
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError:
        _unauth("Token expired")
    except jwt.InvalidAudienceError:
        _unauth("Bad audience")
    except jwt.InvalidIssuerError:
        _unauth("Bad issuer")
    except jwt.InvalidSignatureError:
        _unauth("Bad signature")
    except jwt.PyJWTError as e:
        _unauth(f"JWT error: {e}")

    # Mobile tokens carry the user id as 'userId'; standard issuers use 'sub'
    user_id = payload.get("sub") or payload.get("userId")
    if not user_id:
        _unauth("Token has no subject")
    return AuthPrincipal(
        id=str(user_id),
        subject=payload.get("sub"),
        issuer=payload.get("iss"),
        email=payload.get("email"),
    )

require_api_key = _require_api_key
require_bearer  = _require_bearer

def resolve_user_id(principal: AuthPrincipal, x_actor_id: str | None) -> str:
    """
    Resolve the journal user a request acts for.

    Bearer principals act as themselves. API-key callers act on behalf of the
    user named in X-Actor-Id, which must be a UUID.
    """
    if principal.id != API_KEY_PRINCIPAL:
        return principal.id
    if not x_actor_id:
        raise HTTPException(status_code=400, detail="X-Actor-Id header required")
    try:
        return str(uuid.UUID(x_actor_id))
    except ValueError:
        raise HTTPException(status_code=400, detail="invalid X-Actor-Id")

__all__ = ["require_api_key", "require_bearer", "AuthPrincipal", "resolve_user_id"]
