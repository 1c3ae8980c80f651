"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import health, menu, orders
from app.api.responses import ErrorEnvelope
from app.core.config import settings
from app.core.errors import AppError
from app.core.logging import setup_logging
from app.db.database import AsyncSessionLocal, init_db
from app.services.menu.seed import seed_menu

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    await init_db()
    if settings.seed_menu_file:
        async with AsyncSessionLocal() as session:
            await seed_menu(session, settings.seed_menu_file)
    yield


app = FastAPI(
    title=settings.app_name,
    description="Menu catalog and order tracking API for restaurant back-office staff",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Render domain errors into the response envelope."""
    if exc.status_code >= 500:
        logger.error(f"[API] {request.method} {request.url.path} failed - {exc.message}")
    else:
        logger.info(f"[API] {request.method} {request.url.path} rejected - {type(exc).__name__}: {exc.message}")
    body = ErrorEnvelope(message=exc.message, errors=exc.errors)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report request validation failures as 400 with one entry per field."""
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        message = error.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": ".".join(location) or "body", "message": message})
    logger.info(f"[API] {request.method} {request.url.path} validation failed - {len(errors)} errors")
    body = ErrorEnvelope(message="Validation failed", errors=errors)
    return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Render framework HTTP errors (unknown route, wrong method) into the envelope."""
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    body = ErrorEnvelope(message=message)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"[API] {request.method} {request.url.path} unhandled error - {exc}", exc_info=exc)
    body = ErrorEnvelope(message="Internal server error")
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


app.include_router(health.router, tags=["health"])
app.include_router(menu.router, tags=["menu"])
app.include_router(orders.router, tags=["orders"])
