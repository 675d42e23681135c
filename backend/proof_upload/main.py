"""Main FastAPI application for the proof upload API."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from proof_upload.api.middleware import LoggingMiddleware, SecurityHeadersMiddleware
from proof_upload.api.routes_uploads import router as uploads_router
from proof_upload.core.config import settings
from proof_upload.core.exceptions import BaseServiceException
from proof_upload.core.logging import configure_logging, get_logger
from proof_upload.schemas.responses import HealthResponse, UploadErrorResponse
from proof_upload.services.proof_upload import MISSING_FILE_MESSAGE


configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(
        "proof upload server running",
        port=settings.port,
        version=settings.app_version,
        env=settings.env,
        drive_folder_id=settings.google_drive_folder_id,
    )
    yield
    logger.info("shutting down proof upload server")


async def handle_service_exception(request: Request, exc: BaseServiceException) -> JSONResponse:
    logger.warning(
        "request rejected",
        path=request.url.path,
        error_code=exc.error_code,
        error=exc.message,
        **exc.details,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=UploadErrorResponse(error=exc.message).model_dump(),
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if any("screenshot" in error.get("loc", ()) for error in errors):
        # A text value in the file field counts as no file at all
        message = MISSING_FILE_MESSAGE
    else:
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    logger.warning("invalid request", path=request.url.path, errors=len(errors))
    return JSONResponse(status_code=400, content=UploadErrorResponse(error=message).model_dump())


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Proof Upload API - store payment screenshots in Google Drive",
        docs_url="/docs",
        redoc_url=None,
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BaseServiceException, handle_service_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)

    app.include_router(uploads_router)

    @app.get("/apps/api/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse()

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("proof_upload.main:app", host="0.0.0.0", port=settings.port, reload=settings.is_dev)
