# lifejournal/crypto.py
"""
AES-256-GCM envelopes for payloads stored at rest.

A value is serialized to canonical JSON, encrypted under the master key with a
fresh 16-byte nonce, and stored as

    {"encryptedData": "<hex>", "iv": "<hex nonce>", "authTag": "<hex tag>"}

Unsealing verifies the tag and decrypts in one pass; it either returns the
original value or raises, never partial data.
"""
import json
import re
import secrets
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import AuthenticationError, DeserializationError, EnvelopeFormatError

KEY_SIZE = 32
NONCE_SIZE = 16
TAG_SIZE = 16

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


@dataclass(frozen=True)
class SealedEnvelope:
    """Ciphertext + nonce + authentication tag for one encrypted value."""
    ciphertext: bytes = field(repr=False)
    nonce: bytes = field(repr=False)
    tag: bytes = field(repr=False)

    def __post_init__(self):
        if len(self.nonce) != NONCE_SIZE:
            raise EnvelopeFormatError(f"iv must be {NONCE_SIZE} bytes, got {len(self.nonce)}")
        if len(self.tag) != TAG_SIZE:
            raise EnvelopeFormatError(f"authTag must be {TAG_SIZE} bytes, got {len(self.tag)}")

    def to_dict(self) -> dict[str, str]:
        return {
            "encryptedData": self.ciphertext.hex(),
            "iv": self.nonce.hex(),
            "authTag": self.tag.hex(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SealedEnvelope":
        if not isinstance(data, Mapping):
            raise EnvelopeFormatError("envelope must be an object")
        parts = {}
        for name in ("encryptedData", "iv", "authTag"):
            value = data.get(name)
            if not isinstance(value, str):
                raise EnvelopeFormatError(f"envelope field '{name}' is missing or not a string")
            # bytes.fromhex() tolerates whitespace, so check the alphabet first
            if len(value) % 2 or not _HEX_RE.fullmatch(value):
                raise EnvelopeFormatError(f"envelope field '{name}' is not valid hex")
            parts[name] = bytes.fromhex(value)
        return cls(ciphertext=parts["encryptedData"], nonce=parts["iv"], tag=parts["authTag"])

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json(cls, text: str) -> "SealedEnvelope":
        try:
            data = json.loads(text)
        except (TypeError, ValueError):
            raise EnvelopeFormatError("stored envelope is not valid JSON") from None
        return cls.from_dict(data)


EnvelopeLike = Union[SealedEnvelope, Mapping[str, Any], str]


def _cipher(master_key: bytes) -> AESGCM:
    if not isinstance(master_key, (bytes, bytearray)) or len(master_key) != KEY_SIZE:
        raise ValueError(f"master key must be {KEY_SIZE} bytes")
    return AESGCM(bytes(master_key))


def _coerce(envelope: EnvelopeLike) -> SealedEnvelope:
    if isinstance(envelope, SealedEnvelope):
        return envelope
    if isinstance(envelope, str):
        return SealedEnvelope.from_json(envelope)
    return SealedEnvelope.from_dict(envelope)


def _check_keys(value: Any) -> None:
    # json.dumps would turn non-str keys into strings and break the round trip
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError("object keys must be strings")
            _check_keys(v)
    elif isinstance(value, (list, tuple)):
        for v in value:
            _check_keys(v)


def canonical_json(value: Any) -> bytes:
    _check_keys(value)
    # Deterministic text encoding: sorted keys, no whitespace, no NaN/Infinity
    return json.dumps(
        value, separators=(",", ":"), sort_keys=True, ensure_ascii=False, allow_nan=False
    ).encode("utf-8")


def seal_bytes(plaintext: bytes, master_key: bytes) -> SealedEnvelope:
    aes = _cipher(master_key)
    nonce = secrets.token_bytes(NONCE_SIZE)
    # AESGCM appends the 16-byte tag to the ciphertext
    out = aes.encrypt(nonce, bytes(plaintext), None)
    return SealedEnvelope(ciphertext=out[:-TAG_SIZE], nonce=nonce, tag=out[-TAG_SIZE:])


def unseal_bytes(envelope: EnvelopeLike, master_key: bytes) -> bytes:
    aes = _cipher(master_key)
    env = _coerce(envelope)
    try:
        return aes.decrypt(env.nonce, env.ciphertext + env.tag, None)
    except InvalidTag:
        raise AuthenticationError("envelope failed authentication") from None


def seal(value: Any, master_key: bytes) -> SealedEnvelope:
    """
    Encrypt any JSON-serializable value.

    Raises TypeError/ValueError for values JSON cannot represent and for a
    master key that is not 32 bytes.
    """
    return seal_bytes(canonical_json(value), master_key)


def unseal(envelope: EnvelopeLike, master_key: bytes) -> Any:
    """
    Decrypt an envelope back to the value passed to `seal`.

    Accepts a SealedEnvelope, its dict form, or its stored JSON text.
    Raises AuthenticationError, DeserializationError or EnvelopeFormatError.
    """
    plaintext = unseal_bytes(envelope, master_key)
    try:
        return json.loads(plaintext.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        raise DeserializationError("decrypted payload is not valid JSON") from None


def self_check(master_key: bytes) -> bool:
    """Seal and unseal a sample value with the given key."""
    sample = {"message": "test"}
    return unseal(seal(sample, master_key), master_key) == sample


__all__ = [
    "SealedEnvelope", "seal", "unseal", "seal_bytes", "unseal_bytes",
    "canonical_json", "self_check", "KEY_SIZE", "NONCE_SIZE", "TAG_SIZE",
]
