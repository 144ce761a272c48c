"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from booking_quote.api import api_router
from booking_quote.core.config import get_settings
from booking_quote.db.session import create_schema, dispose_engine
from booking_quote.security.logging_filters import SensitiveFilter

logger = logging.getLogger(__name__)

settings = get_settings()

logging.getLogger("booking_quote").setLevel(settings.log_level.upper())


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.app_env == "local":
        try:
            await create_schema()
        except Exception:  # pragma: no cover - best effort local bootstrap
            logger.exception("Failed to create local database schema")
    try:
        yield
    finally:
        await dispose_engine()


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins or ["http://localhost:5173"],
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)
app.add_middleware(CorrelationIdMiddleware, header_name="X-Request-ID")


for _logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error", "booking_quote", ""):
    _logger = logging.getLogger(_logger_name)
    if not any(isinstance(flt, SensitiveFilter) for flt in _logger.filters):
        _logger.addFilter(SensitiveFilter())

app.include_router(api_router)


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    """Return a simple welcome message."""
    return {"message": settings.app_name}
