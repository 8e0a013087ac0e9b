"""FastAPI application entry point."""
import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from filebox.config import settings
from filebox.routes.files import router as files_router
from filebox.routes.frontend import build_frontend_router
from filebox.services.file_storage import file_storage
from filebox.services.metadata_store import metadata_store

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Make sure the upload directory and metadata document exist."""
    file_storage.initialize()
    await metadata_store.initialize()
    logger.info(f"Storing uploads in {file_storage.base_path.resolve()}")
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Filebox API",
    version="1.0.0",
    description="Upload, list, download and delete files.",
    lifespan=lifespan,
)

# Dev-only CORS. In production the UI is served from the same origin.
if not settings.is_production:
    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status and duration of every request."""
    start_time = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        "%s %s %d %.1f ms",
        request.method, request.url.path, response.status_code, elapsed_ms,
    )
    return response


# The UI reads failures from an "error" key
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.get("/api/health")
async def health_check():
    return {"ok": True}


app.include_router(files_router)

public_dir = Path(settings.PUBLIC_DIR)
if public_dir.is_dir():
    app.include_router(build_frontend_router(public_dir))


def run() -> None:
    """Console entry point."""
    uvicorn.run(
        "filebox.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
