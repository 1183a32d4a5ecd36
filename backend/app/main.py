# backend/app/main.py

import logging
import os

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy import text
from sqlalchemy.exc import TimeoutError as SA_TimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import models  # noqa: F401  registers every table on Base.metadata

# Routers under app/api/
from .api import (
    api_admin,
    api_booking,
    api_contractor,
    api_customer,
    api_rating,
    api_wallet,
    api_worker,
    auth,
)
from .core.config import settings
from .core.observability import setup_logging, setup_tracer
from .database import Base, SessionLocal, engine
from .utils.errors import MarketplaceError, to_http
from .utils.status_logger import register_status_listeners

# Configure logging before creating any loggers
setup_logging()
logger = logging.getLogger(__name__)

register_status_listeners()

# Alembic owns the schema in deployed environments; local runs and tests
# bootstrap it directly.
if os.getenv("SKIP_DB_BOOTSTRAP", "0") != "1":
    Base.metadata.create_all(bind=engine)

# Always use ORJSONResponse for JSON payloads to ensure consistent, fast
# serialization across all endpoints.
app = FastAPI(title="Marketplace Booking API", default_response_class=ORJSONResponse)
setup_tracer(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)
logger.info("CORS origins set to: %s", settings.CORS_ORIGINS)


@app.middleware("http")
async def catch_exceptions(request: Request, call_next):
    """Return JSON responses for errors that escape the routers and log them."""
    try:
        response = await call_next(request)
    except StarletteHTTPException as exc:  # return the original status and detail
        logger.error(
            "HTTP error %s at %s: %s", exc.status_code, request.url.path, exc.detail
        )
        response = ORJSONResponse(
            status_code=exc.status_code, content={"detail": exc.detail}
        )
    except SA_TimeoutError as exc:  # DB pool timeout -> 503 to reduce retry storms
        logger.error("DB timeout at %s: %s", request.url.path, str(exc))
        response = ORJSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Database busy, please retry"},
        )
    except Exception as exc:  # pragma: no cover - generic handler
        logger.exception("Unhandled error: %s", exc)
        response = ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal Server Error"},
        )
    return response


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    """Map domain failures raised by the services to their HTTP status."""
    http_exc = to_http(exc)
    return ORJSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return validation errors with details and log them for debugging."""
    errors = jsonable_encoder(exc.errors())
    logger.warning("Validation error at %s: %s", request.url.path, errors)
    return ORJSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": errors},
    )


@app.get("/health", tags=["health"])
def health():
    """Readiness probe: confirms the database answers a trivial query."""
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
    except Exception as exc:
        logger.error("Health check failed: %s", exc)
        return ORJSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable"},
        )
    return {"status": "ok"}


api_prefix = settings.API_V1_STR  # usually something like "/api/v1"

app.include_router(auth.router, prefix=f"{api_prefix}/auth", tags=["auth"])
app.include_router(api_wallet.router, prefix=f"{api_prefix}/wallet", tags=["wallet"])
app.include_router(api_booking.router, prefix=f"{api_prefix}/bookings", tags=["bookings"])
app.include_router(api_worker.router, prefix=f"{api_prefix}/workers", tags=["workers"])
app.include_router(api_contractor.router, prefix=f"{api_prefix}/contractors", tags=["contractors"])
app.include_router(api_customer.router, prefix=f"{api_prefix}/customers", tags=["customers"])
app.include_router(api_rating.router, prefix=f"{api_prefix}/ratings", tags=["ratings"])
app.include_router(api_admin.router, prefix=api_prefix, tags=["admin"])


@app.get("/")
async def root():
    return {"message": "Marketplace Booking API"}
