# lifejournal/keys.py
import os
import re
import logging
import secrets
from typing import Optional

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# 32 bytes (256 bit) as hex. Generate with: openssl rand -hex 32
MASTER_KEY_ENV = "ENCRYPTION_MASTER_KEY"
REQUIRED_KEY_LENGTH = 64

_HEX_RE = re.compile(r"[0-9a-fA-F]+")


class KeyProvider:
    """
    Supplies the process-wide master key.

    The raw value is validated on every request for the key until it passes
    once; after that the decoded bytes are reused. Construct with a fabricated
    value in tests, or with `from_env()` in the service.
    """

    def __init__(self, raw_key: Optional[str], env_var: str = MASTER_KEY_ENV):
        self._raw = raw_key
        self._env_var = env_var
        self._key: Optional[bytes] = None

    @classmethod
    def from_env(cls, env_var: str = MASTER_KEY_ENV) -> "KeyProvider":
        return cls(os.getenv(env_var), env_var=env_var)

    def get_master_key(self) -> bytes:
        """Return the 32-byte master key or raise ConfigurationError."""
        if self._key is not None:
            return self._key

        raw = self._raw
        if not raw:
            raise ConfigurationError(f"{self._env_var} is not set in environment variables")
        if len(raw) != REQUIRED_KEY_LENGTH:
            raise ConfigurationError(
                f"{self._env_var} must be {REQUIRED_KEY_LENGTH} hex characters (32 bytes). "
                f"Got {len(raw)} characters."
            )
        # bytes.fromhex() tolerates whitespace, so check the alphabet first
        if not _HEX_RE.fullmatch(raw):
            raise ConfigurationError(f"{self._env_var} must be a valid hexadecimal string")

        self._key = bytes.fromhex(raw)
        return self._key

    def validate_on_startup(self) -> bool:
        try:
            self.get_master_key()
        except ConfigurationError as e:
            logger.error("Encryption key validation failed: %s", e)
            return False
        logger.info("Encryption key validated")
        return True


def generate_master_key() -> str:
    """Fresh operator key: 32 random bytes, hex encoded."""
    return secrets.token_hex(32)


__all__ = ["KeyProvider", "generate_master_key", "MASTER_KEY_ENV", "REQUIRED_KEY_LENGTH"]
