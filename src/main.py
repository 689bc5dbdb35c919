"""payskill - task verification service for skill rewards."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.routing import Mount

from src.core.config import constants, settings
from src.core.db_client import DatabaseClient, get_db
from src.core.errors import AppError, ErrorCode, ErrorResponse, StorageError
from src.core.logging import configure_logfire, instrument_fastapi
from src.core.redis_client import redis_client
from src.domain.user import PublicUser
from src.interface.auth_router import router as auth_router
from src.interface.task_router import router as task_router
from src.interface.upload_router import router as upload_router
from src.services import user_service


logger = logging.getLogger(__name__)


async def check_redis_connectivity() -> None:
    """Verify Redis connectivity (optional service).

    Only checks if Redis is configured. Logs warning if unavailable but doesn't fail.
    """
    if not redis_client.is_available:
        logger.info("startup_validation", extra={"service": "redis", "status": "disabled"})
        return

    result = await redis_client.ping()
    if result:
        logger.info("startup_validation", extra={"service": "redis", "status": "ok"})
    else:
        logger.warning("startup_validation", extra={"service": "redis", "status": "unavailable"})


def validate_startup_configuration() -> None:
    """Validate required storage settings, exiting the process when they are missing."""
    logger.info("startup_validation_begin")

    try:
        settings.require_credential("database_url", "Storage location")
        settings.require_credential("database_name", "Storage database name")
        logger.info("startup_validation", extra={"stage": "credentials", "status": "ok"})
    except ValueError as e:
        logger.error("startup_validation_failed", extra={"error": str(e)})
        print(f"\n❌ Startup validation failed: {e}\n", file=sys.stderr)  # noqa: T201
        sys.exit(1)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Startup
    # Configure logging first so validation logs are captured
    configure_logfire()
    validate_startup_configuration()

    db = DatabaseClient(db_path=settings.database_path)
    await db.connect()
    app.state.db = db
    logger.info("Database initialized", extra={"database": db.name})

    await check_redis_connectivity()
    settings.uploads_dir.mkdir(parents=True, exist_ok=True)
    # Serve the directory configured at startup rather than the one seen at import
    uploads_mount.app = StaticFiles(directory=settings.uploads_dir)

    yield

    # Shutdown
    await db.close()
    await redis_client.close()


app = FastAPI(
    title="payskill",
    description="Phone sign-in, task catalog and proof-of-completion ledger",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)


@app.exception_handler(StorageError)
async def storage_error_handler(_request: Request, exc: StorageError) -> JSONResponse:
    """Log the storage failure and answer with a generic message."""
    logger.error("storage_error", extra={"error": exc.message, "error_type": type(exc).__name__})
    body = ErrorResponse(code=ErrorCode.ERR_STORAGE, error="Internal server error")
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


@app.exception_handler(AppError)
async def app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
    """Turn service errors into the structured error body."""
    logger.info("request_rejected", extra={"code": exc.code, "status_code": exc.status_code})
    return JSONResponse(status_code=exc.status_code, content=exc.to_response().model_dump(exclude_none=True))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap framework HTTP errors (429 rate limits, unknown routes) in the structured error body."""
    codes = {404: ErrorCode.ERR_NOT_FOUND, 429: ErrorCode.ERR_RATE_LIMITED}
    body = ErrorResponse(code=codes.get(exc.status_code, ErrorCode.ERR_UNKNOWN), error=str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed bodies and missing parameters as 400."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in {"body", "query", "path"})
    message = f"{location}: {first.get('msg', 'invalid input')}" if location else first.get("msg", "invalid input")
    body = ErrorResponse(code=ErrorCode.ERR_VALIDATION, error=message)
    return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))


# Register routers
app.include_router(auth_router)
app.include_router(task_router)
app.include_router(upload_router)

uploads_mount = Mount(
    constants.UPLOADS_URL_PREFIX,
    app=StaticFiles(directory=settings.uploads_dir, check_dir=False),
    name="uploaded_videos",
)
app.router.routes.append(uploads_mount)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=200)


@app.get("/health/db")
async def database_health_check(db: DatabaseClient = Depends(get_db)) -> JSONResponse:
    """Storage diagnostics: database name, collections and a few user summaries."""
    collections = await db.list_collections()
    user_count = await user_service.count_users(db=db)
    sample_users = await user_service.get_sample_users(db=db)

    return JSONResponse(
        content={
            "status": "connected",
            "database": db.name,
            "collections": collections,
            "userCount": user_count,
            "sampleUsers": [PublicUser.from_user(user).model_dump(by_alias=True) for user in sample_users],
            "redis": redis_client.get_health_status(),
        },
        status_code=200,
    )
