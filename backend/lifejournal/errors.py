# lifejournal/errors.py


class ConfigurationError(RuntimeError):
    """Master key is missing or malformed; encrypted data cannot be handled."""


class EncryptionError(Exception):
    """Base class for failures while unsealing a stored envelope."""


class AuthenticationError(EncryptionError):
    """Authentication tag did not verify (tampered data or wrong key)."""


class DeserializationError(EncryptionError):
    """Decrypted bytes are not the expected serialized structure."""


class EnvelopeFormatError(EncryptionError, ValueError):
    """Stored envelope is not valid: missing fields, bad hex, wrong lengths."""


# Errors that make a single stored record unreadable
UNREADABLE_ERRORS = (AuthenticationError, DeserializationError, EnvelopeFormatError)

__all__ = [
    "ConfigurationError", "EncryptionError", "AuthenticationError",
    "DeserializationError", "EnvelopeFormatError", "UNREADABLE_ERRORS",
]
