# lifejournal/deps.py
import os
import logging
from fastapi import Depends, HTTPException
from lifejournal.db import pool
from lifejournal.errors import ConfigurationError
from lifejournal.keys import KeyProvider
from lifejournal.security.auth import require_api_key, require_bearer
from lifejournal.vault import CredentialVault

logger = logging.getLogger(__name__)

# Resolve auth mode once and expose the proper dependency for routers.
AUTH_TYPE = os.getenv("AUTH_TYPE", "API_KEY").strip().upper()
if AUTH_TYPE == "API_KEY":
    AUTH_DEP = require_api_key
elif AUTH_TYPE == "BEARER":
    AUTH_DEP = require_bearer
else:
    raise RuntimeError(f"Invalid AUTH_TYPE '{AUTH_TYPE}'. Expected 'API_KEY' or 'BEARER'.")

# Read from the environment once; validated on first use and in the app lifespan.
key_provider = KeyProvider.from_env()

def get_key_provider() -> KeyProvider:
    return key_provider

def get_master_key(keys: KeyProvider = Depends(get_key_provider)) -> bytes:
    """Master key for handlers; a misconfigured key becomes a generic 503."""
    try:
        return keys.get_master_key()
    except ConfigurationError as e:
        logger.error("Encryption unavailable: %s", e)
        raise HTTPException(status_code=503, detail="Encryption unavailable")

def get_vault(keys: KeyProvider = Depends(get_key_provider)) -> CredentialVault:
    return CredentialVault(pool, keys)
