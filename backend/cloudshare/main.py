"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text

from cloudshare.config import Settings, get_settings
from cloudshare.logging_config import configure_logging, install_access_log_redaction
from cloudshare.routes.files import router as files_router
from cloudshare.routes.share import router as share_router
from cloudshare.schemas.common import ErrorResponse
from cloudshare.services.container import FileServices
from cloudshare.services.errors import ErrorKind, FileServiceError

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_INPUT: 422,
    ErrorKind.CONFLICT: 409,
    ErrorKind.STORAGE_UNAVAILABLE: 503,
}


def _error_response(kind: ErrorKind, detail: str, headers: Optional[dict] = None) -> JSONResponse:
    body = ErrorResponse(error=kind.value, detail=detail)
    return JSONResponse(status_code=STATUS_BY_KIND[kind], content=body.model_dump(), headers=headers)


async def file_service_error_handler(request: Request, exc: FileServiceError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.kind is ErrorKind.UNAUTHENTICATED else None
    return _error_response(exc.kind, exc.message, headers)


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Report malformed ids, missing form fields and the like as invalid_input."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        problems.append(f"{location}: {error.get('msg', 'invalid value')}")
    return _error_response(ErrorKind.INVALID_INPUT, "; ".join(problems) or "Invalid request")


def create_app(settings: Optional[Settings] = None, services: Optional[FileServices] = None) -> FastAPI:
    """Build the API.

    ``services`` lets callers hand in an already started container; otherwise
    one is built from ``settings`` on startup and disposed on shutdown.
    The access-log redaction filter is installed here so that every launch
    path (``python -m cloudshare.main`` or ``uvicorn --factory``) gets it.
    """
    settings = settings or get_settings()
    install_access_log_redaction()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "services", None) is not None:
            yield
            return
        configure_logging(settings.LOG_LEVEL)
        container = FileServices.build(settings)
        await container.start()
        app.state.services = container
        try:
            yield
        finally:
            await container.close()

    app = FastAPI(
        title="CloudShare API",
        version="1.0.0",
        description="Upload files and share them through public links.",
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(FileServiceError, file_service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    if settings.FILE_STORAGE_TYPE == "local":
        storage_dir = Path(settings.FILE_STORAGE_PATH)
        storage_dir.mkdir(parents=True, exist_ok=True)
        app.mount("/storage", StaticFiles(directory=storage_dir), name="storage")

    @app.get("/api/health")
    async def health_check(request: Request):
        """Verify API and database connectivity."""
        container: FileServices = request.app.state.services
        try:
            async with container.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return {"status": "ok", "database": "connected"}
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return JSONResponse(status_code=503, content={"status": "error", "database": "unavailable"})

    app.include_router(files_router)
    app.include_router(share_router)
    return app


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(create_app(_settings), host="0.0.0.0", port=_settings.API_PORT)
