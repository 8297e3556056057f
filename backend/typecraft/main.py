"""Main FastAPI application."""

import logging
import re
import shutil
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session

from .database import engine, get_db, init_db, DATABASE_URL
from .api.auth_routes import router as auth_router
from .api.categories import router as categories_router
from .api.practice import router as practice_router
from .api.texts import router as texts_router
from .core.config import settings, ConfigurationError, Environment, DEFAULT_SECRET_KEY
from .core.logging_config import setup_logging
from .middleware.exception_handler import typecraft_exception_handler, unhandled_exception_handler
from .middleware.request_context import RequestContextMiddleware
from .exceptions import TypecraftException

APP_NAME = "Typecraft API"
APP_VERSION = "1.0.0"

# Setup logging first
setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)


def _mask_url(url: str) -> str:
    """Mask password in database URL for safe logging."""
    return re.sub(r'://([^:]+):([^@]+)@', r'://\1:***@', url)


def _validate_database_connection() -> None:
    """Test that the database is reachable. Exits with a clear message on failure."""
    masked = _mask_url(DATABASE_URL)
    logger.info(f"Connecting to database: {masked}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")
    except Exception as e:
        hint = (
            "Check that the directory exists and is writable."
            if DATABASE_URL.startswith("sqlite")
            else "Check DATABASE_URL and that the server is running."
        )
        logger.critical(
            "Database connection failed.\n"
            f"  DATABASE_URL: {masked}\n"
            f"  {hint}\n"
            f"  Error: {e}"
        )
        raise SystemExit(1)


def _pdftotext_available() -> bool:
    return shutil.which(settings.pdftotext_command) is not None


_validate_database_connection()
init_db()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the Typecraft API."""
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    if settings.environment == Environment.DEVELOPMENT and settings.secret_key == DEFAULT_SECRET_KEY:
        logger.warning(
            "SECURITY: SECRET_KEY is the default. "
            "Anyone can forge session tokens. Generate a secure key: openssl rand -hex 32"
        )

    if not _pdftotext_available():
        logger.warning(
            "pdftotext not found on PATH; PDF uploads will fail until poppler-utils is installed",
            extra={"command": settings.pdftotext_command},
        )

    if not settings.summaries_enabled:
        logger.info("AI summaries disabled (SUMMARY_MODEL or SUMMARY_API_KEY not set)")

    yield


app = FastAPI(
    title=APP_NAME,
    description=(
        "Typing-practice service. Users keep a folder tree of texts (pasted or "
        "extracted from PDFs), practice them with resumable progress, and can "
        "ask an AI model for summaries.\n\n"
        "**Authentication:** log in via `POST /login`; send the returned token as "
        "`Authorization: Bearer <token>` or rely on the session cookie."
    ),
    version=APP_VERSION,
    lifespan=lifespan,
)

# Middleware stack (outermost first: CORS wraps request context).
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(RequestContextMiddleware)

app.add_exception_handler(TypecraftException, typecraft_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

logger.info(
    "Typecraft API started | env=%s | db=%s | summaries=%s",
    settings.environment.value,
    "PostgreSQL" if DATABASE_URL.startswith("postgresql") else "SQLite",
    "enabled" if settings.summaries_enabled else "disabled",
)

app.include_router(auth_router)
app.include_router(texts_router)
app.include_router(practice_router)
app.include_router(categories_router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "status": "running"
    }


_startup_time = time.monotonic()


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check: database status, uptime, text count, extraction tool.

    Never raises. Returns degraded status on DB failure so load balancers
    can still probe without receiving 5xx.
    """
    db_status = "ok"
    text_count = 0
    try:
        db.execute(text("SELECT 1"))
        text_count = db.execute(text("SELECT COUNT(*) FROM texts")).scalar() or 0
    except Exception:
        logger.warning("Health check database probe failed", exc_info=True)
        db_status = "error"

    return {
        "status": "healthy" if db_status == "ok" else "degraded",
        "db": db_status,
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": APP_VERSION,
        "text_count": text_count,
        "pdftotext": "available" if _pdftotext_available() else "missing",
    }
