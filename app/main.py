"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.jobs.scheduler import register_jobs, scheduler
from app.routers import auth, bisac, bookmarks, leaderboard, ledger, metadata, user
from app.services.metadata_service import MetadataRegistry
from app.utils.errors import AppError, InvalidInputError, MethodNotAllowedError, NotFoundError

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Headers": (
        "Content-Type, Authorization, Idempotency-Key, X-System-Operation, X-System-Key"
    ),
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start and stop scheduler with app lifecycle."""
    if settings.enable_scheduler:
        register_jobs()
        scheduler.start()
        logger.info("Scheduler started")
    yield
    if settings.enable_scheduler and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")


app = FastAPI(
    title=settings.app_name,
    description="Bookmarks, profiles and token ledger API",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
)
app.state.metadata_registry = MetadataRegistry()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_timing_middleware(request: Request, call_next):
    """Add per-request processing time and optionally log slow requests."""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    response.headers["X-Process-Time-Ms"] = f"{elapsed_ms:.1f}"

    threshold_ms = settings.slow_request_log_threshold_ms
    if threshold_ms > 0 and elapsed_ms >= threshold_ms:
        logger.warning(
            "Slow request %s %s %.1fms",
            request.method,
            request.url.path,
            elapsed_ms,
        )

    return response


@app.middleware("http")
async def cors_headers_middleware(request: Request, call_next):
    """Answer every OPTIONS request and stamp CORS headers on all responses."""
    origin = request.headers.get("origin")
    allowed = settings.origins_list
    if "*" in allowed or not allowed:
        allow_origin = "*"
    else:
        allow_origin = origin if origin in allowed else allowed[0]

    if request.method == "OPTIONS":
        response = Response(status_code=200)
    else:
        response = await call_next(request)

    response.headers.setdefault("Access-Control-Allow-Origin", allow_origin)
    for header, value in CORS_HEADERS.items():
        response.headers.setdefault(header, value)
    return response


@app.exception_handler(AppError)
async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    """Convert domain exceptions into structured API responses."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    _: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Normalize FastAPI validation responses."""
    detail = exc.errors()
    if detail:
        first = detail[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
        message = first.get("msg", "Invalid request")
        message = f"{field}: {message}" if field else message
    else:
        message = "Invalid request"
    api_error = InvalidInputError(message)
    return JSONResponse(status_code=api_error.status_code, content=api_error.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Give routing errors (unknown path, wrong method) the standard shape."""
    if exc.status_code == 405:
        api_error: AppError = MethodNotAllowedError()
    elif exc.status_code == 404:
        api_error = NotFoundError("Route")
    else:
        api_error = AppError(str(exc.detail), code="HTTP_ERROR", status_code=exc.status_code)
    return JSONResponse(status_code=api_error.status_code, content=api_error.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(_: Request, exc: Exception) -> JSONResponse:
    """Catch unexpected errors without leaking internals."""
    logger.exception("Unhandled exception", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "code": "INTERNAL_ERROR"},
    )


app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(ledger.router, tags=["tokens"])
app.include_router(bookmarks.router, prefix="/bookmarks", tags=["bookmarks"])
app.include_router(user.router, prefix="/user", tags=["user"])
app.include_router(bisac.router, prefix="/bisac-codes", tags=["bisac"])
app.include_router(metadata.router, prefix="/metadata", tags=["metadata"])
app.include_router(leaderboard.router, tags=["leaderboard"])


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint for deploys and uptime probes."""
    return {"status": "ok", "version": settings.app_version}
