"""FastAPI application entrypoint for the tabload data service."""
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from tabload import __version__
from tabload.api.routes import router
from tabload.core.logging import get_logger, setup_logging
from tabload.core.config import settings
from tabload.datasets import list_datasets

# Initialize structured logging
log_format = settings.environment == "production"
setup_logging(level=settings.log_level, json_format=log_format)
logger = get_logger(__name__)

APP_NAME = "tabload"

app = FastAPI(
    title=APP_NAME,
    description="Load tabular data from delimited files, binary snapshots and bundled datasets",
    version=__version__,
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with timing, status code and a request id."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    try:
        response = await call_next(request)
    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        logger.error(
            f"Request failed: {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "duration_ms": round(duration_ms, 2),
                "error_type": type(e).__name__,
            },
            exc_info=True
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "request_id": request_id}
        )

    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        f"Request completed: {request.method} {request.url.path}",
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(duration_ms, 2),
        }
    )
    response.headers["X-Request-ID"] = request_id
    return response


app.include_router(router, prefix=settings.api_prefix)


@app.get("/")
def root():
    """Basic service info."""
    return {
        "service": APP_NAME,
        "version": __version__,
        "status": "running",
        "environment": settings.environment
    }


@app.get("/health")
def health_check():
    """Liveness probe; also reports whether the data directory exists."""
    return {
        "status": "healthy",
        "version": __version__,
        "checks": {
            "datasets": len(list_datasets()),
            "data_dir": "ok" if settings.data_dir.is_dir() else "missing",
            "remote_cache": "enabled" if settings.remote_cache_enabled else "disabled",
        }
    }
