"""Maps domain errors to JSON responses of the form {"error": message}."""
import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.application.interfaces.cloud_drive import CloudDriveError
from src.application.interfaces.identity import AuthenticationError
from src.domain.exceptions import (
    IntegrationNotConnectedError,
    InvalidInputError,
    VideoNotFoundError,
)

logger = structlog.get_logger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
        return _error(status.HTTP_401_UNAUTHORIZED, str(exc))

    @app.exception_handler(IntegrationNotConnectedError)
    async def not_connected_handler(request: Request, exc: IntegrationNotConnectedError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, f"{exc.integration} not connected")

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(VideoNotFoundError)
    async def video_not_found_handler(request: Request, exc: VideoNotFoundError) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, str(exc))

    @app.exception_handler(CloudDriveError)
    async def cloud_drive_error_handler(request: Request, exc: CloudDriveError) -> JSONResponse:
        logger.error("cloud_drive_request_failed", path=request.url.path, error=str(exc))
        return _error(status.HTTP_502_BAD_GATEWAY, str(exc))
