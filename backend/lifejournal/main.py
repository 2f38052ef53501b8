# lifejournal/main.py
import os
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from . import db
from .crypto import self_check
from .deps import get_key_provider, key_provider
from .keys import KeyProvider
from .errors import ConfigurationError, EncryptionError
from .logging_config import setup_logging
from .routes import router as api_router

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    # Refuse to serve if stored payloads could not be sealed/unsealed safely
    if not key_provider.validate_on_startup():
        raise RuntimeError("ENCRYPTION_MASTER_KEY is misconfigured; refusing to start")
    db.pool.open()
    try:
        yield
    finally:
        db.pool.close()

app = FastAPI(title="lifejournal-backend", lifespan=lifespan)

# ---------- CORS ----------
# Read allowed origins from env; for dev: the Expo web client
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:8081")
origins = [o.strip() for o in CORS_ORIGINS.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,                # explicit origins (no "*")
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "X-API-Key",
        "X-Actor-Id",
    ],
)

# ---------- Health ----------
@app.get("/health")
def health():
    # Simple DB round-trip to prove connectivity and time source
    row = db.qrow("select now()")
    return {"status": "ok", "db_time_utc": row[0].isoformat()}

@app.get("/healthz")
def healthz():
    # Alias commonly used by probes
    return health()

@app.get("/api/test")
def encryption_test(keys: KeyProvider = Depends(get_key_provider)):
    """Seal and unseal a sample value with the configured master key."""
    try:
        working = self_check(keys.get_master_key())
    except ConfigurationError as e:
        logger.error("Encryption self check: %s", e)
        raise HTTPException(status_code=503, detail="Encryption unavailable")
    except EncryptionError as e:
        logger.error("Encryption self check failed: %s", type(e).__name__)
        working = False
    return {"status": "ok", "encryption": "working" if working else "failed"}

app.include_router(api_router)

def run():
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3001")),
        log_level=os.getenv("LOG_LEVEL", "INFO").lower(),
    )

if __name__ == "__main__":
    run()
