# Re-export security primitives from a single namespace.
from .auth import require_api_key, require_bearer, AuthPrincipal, resolve_user_id

__all__ = ["require_api_key", "require_bearer", "AuthPrincipal", "resolve_user_id"]
