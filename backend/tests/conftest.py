# Test environment must be set before the app modules are imported
import os

os.environ["ENCRYPTION_MASTER_KEY"] = "00" * 32
os.environ["AUTH_TYPE"] = "API_KEY"
os.environ["API_KEY"] = "test-api-key"
os.environ["JWT_SIGNING_KEY"] = "test-signing-key-0123456789abcdef0123"
os.environ["JWT_AUDIENCE"] = "lifejournal"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest

ZERO_KEY_HEX = "00" * 32

@pytest.fixture
def master_key() -> bytes:
    return bytes.fromhex(ZERO_KEY_HEX)

@pytest.fixture
def other_key() -> bytes:
    return bytes.fromhex("11" * 32)
