# lifejournal/routes/credentials.py
import logging
from fastapi import APIRouter, Depends, Header, HTTPException
from lifejournal.deps import AUTH_DEP, get_vault
from lifejournal.errors import ConfigurationError, UNREADABLE_ERRORS
from lifejournal.models import CredentialIn, CredentialStatusOut
from lifejournal.security.auth import AuthPrincipal, resolve_user_id
from lifejournal.vault import CredentialVault

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/credentials", tags=["credentials"])

@router.post("")
def store_credential(
    body: CredentialIn,
    principal: AuthPrincipal = Depends(AUTH_DEP),
    vault: CredentialVault = Depends(get_vault),
    x_actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
):
    user_id = resolve_user_id(principal, x_actor_id)
    try:
        vault.store(user_id, body.integration, body.token, body.tokenType)
    except ConfigurationError as e:
        logger.error("Encryption unavailable: %s", e)
        raise HTTPException(status_code=503, detail="Encryption unavailable")
    return {"success": True, "message": f"Credential stored for {body.integration}"}

@router.get("/{integration}", response_model=CredentialStatusOut)
def credential_status(
    integration: str,
    principal: AuthPrincipal = Depends(AUTH_DEP),
    vault: CredentialVault = Depends(get_vault),
    x_actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
):
    """Report whether a usable credential exists; the token itself never leaves the server."""
    user_id = resolve_user_id(principal, x_actor_id)
    try:
        token = vault.get(user_id, integration)
    except ConfigurationError as e:
        logger.error("Encryption unavailable: %s", e)
        raise HTTPException(status_code=503, detail="Encryption unavailable")
    except UNREADABLE_ERRORS as e:
        logger.warning("Unreadable credential user=%s integration=%s: %s",
                       user_id, integration, type(e).__name__)
        token = None
    return {"success": True, "integration": integration, "hasCredential": bool(token)}

@router.delete("/{integration}")
def delete_credential(
    integration: str,
    principal: AuthPrincipal = Depends(AUTH_DEP),
    vault: CredentialVault = Depends(get_vault),
    x_actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
):
    user_id = resolve_user_id(principal, x_actor_id)
    vault.delete(user_id, integration)
    return {"success": True}
