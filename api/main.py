"""Legajos - FastAPI Application
Case files, persons and their sources behind a JWT-protected REST API.
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from core.config import api_settings, log_settings, storage_settings
from core.database.session import dispose_engine, init_db_async, test_connection, wait_for_database
from core.errors import AppError
from core.logging import configure_logging, get_logger

DB_STARTUP_TIMEOUT = 60.0


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager with startup validation."""
    logger = configure_logging(
        log_dir=log_settings.dir,
        log_level=log_settings.level,
        json_format=log_settings.json_format,
        enable_file=log_settings.to_file,
    )
    logger.info(f"Starting Legajos API ({api_settings.environment})")

    from core.startup import run_startup_validation

    run_startup_validation(strict=api_settings.is_production)

    if not await wait_for_database(max_wait=DB_STARTUP_TIMEOUT, interval=2.0):
        if api_settings.is_production:
            raise RuntimeError("Database not available - cannot start in production mode")
        logger.warning("Database not available - some features may not work")
    else:
        await init_db_async()
        logger.info("Database tables initialized")

    app.state.ready = True
    logger.info("Legajos API ready to accept requests")

    yield

    app.state.ready = False
    await dispose_engine()
    logger.info("Legajos API shutdown complete")


app = FastAPI(
    title=api_settings.title,
    version=api_settings.version,
    description=api_settings.description,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=api_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)
# Executed in reverse order of registration
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)


def _error_path(loc) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in ("body", "query", "path", "header", "form"):
        parts = parts[1:]
    return ".".join(parts)


def _error_message(error: dict) -> str:
    message = error.get("msg", "")
    return message.removeprefix("Value error, ")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "error": "ValidationError",
            "message": "Datos inválidos",
            "details": [
                {"path": _error_path(e.get("loc", ())), "message": _error_message(e)}
                for e in exc.errors()
            ],
        },
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        get_logger().error(f"{exc.error}: {exc.message}", path=request.url.path)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        content = {"error": "NotFound", "message": "Recurso no encontrado"}
    else:
        content = {"error": "HTTPError", "message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    get_logger().error(
        f"Unhandled exception: {exc!s}",
        exc_info=True,
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(
        status_code=500,
        content={"error": "InternalServerError", "message": "Ocurrió un error inesperado"},
    )


from api.auth import router as auth_router
from api.rbac import require_admin
from api.routes import (
    cases_router,
    exports_router,
    media_router,
    persons_router,
    sources_router,
    users_router,
)

app.include_router(auth_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(sources_router, prefix="/api")
app.include_router(persons_router, prefix="/api")
# Export paths are registered ahead of /cases/{case_id}
app.include_router(exports_router, prefix="/api")
app.include_router(cases_router, prefix="/api")
app.include_router(media_router, prefix="/api")

Path(storage_settings.root).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=storage_settings.root), name="uploads")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": api_settings.title,
        "version": api_settings.version,
        "status": "operational",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check with database status."""
    database = "connected" if await test_connection() else "error"
    return {"status": "ok", "database": database}


@app.get("/ready")
async def readiness_check():
    """Returns 200 only when the application is ready to serve traffic."""
    if not getattr(app.state, "ready", False):
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "message": "Application is not ready"},
        )
    if not await test_connection():
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "message": "Database not connected"},
        )
    return {"status": "ready"}


@app.get("/live")
async def liveness_check():
    """Returns 200 if the application is alive (even if not fully ready)."""
    return {"status": "alive"}


@app.get("/metrics", dependencies=[Depends(require_admin)])
async def get_metrics_json():
    """In-process request counters, audit counts and export timings."""
    return get_logger().get_metrics()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=api_settings.host,
        port=api_settings.port,
        reload=not api_settings.is_production,
    )
