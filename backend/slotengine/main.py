# backend/slotengine/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import HTTP_400_BAD_REQUEST

from . import __version__
from .core.config import settings
from .core.exceptions import DomainException
from .database import init_db
from .routes.v1 import availability as availability_v1
from .routes.v1 import bookings as bookings_v1
from .routes.v1 import event_types as event_types_v1
from .routes.v1 import health as health_v1
from .routes.v1 import hosts as hosts_v1

# Configure logging
logging.basicConfig(
    level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info("slotengine API starting up...")
    logger.info(f"Environment: {settings.environment}")

    if settings.environment == "development" and not settings.is_testing:
        init_db()

    yield

    logger.info("slotengine API shutting down...")


app = FastAPI(
    title="slotengine",
    description="Availability resolution and booking admission API",
    version=__version__,
    lifespan=app_lifespan,
)


@app.exception_handler(DomainException)
async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Render domain errors with their mapped status code."""
    http_exc = exc.to_http_exception()
    if http_exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.code)
    return JSONResponse(
        status_code=http_exc.status_code,
        content={"detail": jsonable_encoder(http_exc.detail)},
        headers=getattr(http_exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or missing request fields are validation errors (400)."""
    return JSONResponse(
        status_code=HTTP_400_BAD_REQUEST,
        content={
            "detail": {
                "message": "Request validation failed",
                "code": "VALIDATION_ERROR",
                "details": {"errors": jsonable_encoder(exc.errors())},
            }
        },
    )


# V1 routers, mounted under the configured prefix
api_v1 = APIRouter(prefix=settings.api_prefix)
api_v1.include_router(availability_v1.router, prefix="/availability")
api_v1.include_router(bookings_v1.router, prefix="/bookings")
api_v1.include_router(event_types_v1.router, prefix="/event-types")
api_v1.include_router(hosts_v1.router, prefix="/hosts")

app.include_router(api_v1)
app.include_router(health_v1.router)
