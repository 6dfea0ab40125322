# registre_backend/app/main.py
import logging
from contextlib import asynccontextmanager
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.v1.api import api_router
from .config import get_settings, setup_logging, validate_settings
from .core.exceptions import AppError, RegistreExportError
from .database import check_db_health, db_manager, init_db
from .logging_config import get_logging_config, request_id_var

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings)

    issues = validate_settings(settings)
    for issue in issues:
        logger.warning(f"Configuration issue: {issue}")
    if issues and settings.is_production:
        raise RuntimeError(f"Refusing to start with invalid settings: {issues}")

    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})")
    await init_db(**settings.database_config)

    yield

    logger.info("Shutting down")
    await db_manager.close()


app = FastAPI(
    title=settings.APP_NAME,
    description="Export du registre (événements, mentions, prises de service)",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Tag every log line of a request with its id."""
    request_id = request.headers.get("X-Request-ID") or uuid4().hex
    token = request_id_var.set(request_id)
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    # Rejections are expected outcomes for the client, not server faults
    if isinstance(exc, RegistreExportError):
        logger.info(f"{request.method} {request.url.path} rejected: {exc.code}")
    else:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Log with traceback; the client only gets a generic 500."""
    logger.error(
        f"Unhandled exception for {request.method} {request.url.path}: {exc}",
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "An internal server error occurred."},
    )


app.include_router(api_router, prefix="/api/v1")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Request-ID"],
)


@app.get("/health")
async def health_check():
    database = await check_db_health()
    return {
        "status": database["status"],
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "database": database,
    }


if __name__ == "__main__":
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_config=get_logging_config(settings.LOG_LEVEL, settings.LOG_FILE),
    )
