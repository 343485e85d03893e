"""HTTP client for the upload-session negotiation function."""
from datetime import datetime

import httpx
import structlog

from src.application.interfaces.upload_gateways import UploadSessionGateway
from src.config import settings
from src.domain.entities.upload_session import UploadSession
from src.domain.exceptions import IntegrationNotConnectedError, UploadSessionError

logger = structlog.get_logger(__name__)

NOT_CONNECTED_MARKER = "not connected"


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return response.text or f"HTTP {response.status_code}"


def _parse_expiry(value: object) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


class UploadSessionClient(UploadSessionGateway):
    """Thin HTTP wrapper around POST /onedrive-upload-session."""

    def __init__(
        self,
        base_url: str = settings.functions_base_url,
        timeout: float = settings.http_timeout_seconds,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def create_session(
        self,
        *,
        auth_token: str,
        owner_record_id: str,
        filename: str,
        file_size: int,
        mime_type: str | None = None,
    ) -> UploadSession:
        """
        POST /onedrive-upload-session → {"uploadUrl": "...", "sessionId": "...", "expirationDateTime": "..."}
        """
        payload = {
            "productId": owner_record_id,
            "filename": filename,
            "fileSize": file_size,
            "mimeType": mime_type,
        }
        headers = {
            "Authorization": f"Bearer {auth_token}",
            "Content-Type": "application/json",
        }

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    f"{self._base_url}/onedrive-upload-session",
                    json=payload,
                    headers=headers,
                )
            except httpx.RequestError as exc:
                logger.error("upload_session_connection_failed", error=str(exc))
                raise UploadSessionError(f"Failed to reach upload session service: {exc}") from exc

        if response.is_error:
            message = _error_message(response)
            logger.error(
                "upload_session_refused",
                status_code=response.status_code,
                error=message,
            )
            if NOT_CONNECTED_MARKER in message.lower():
                raise IntegrationNotConnectedError("OneDrive")
            raise UploadSessionError(message or "Failed to create upload session")

        try:
            data = response.json()
        except ValueError as exc:
            raise UploadSessionError("Upload session response was not valid JSON") from exc

        upload_url = data.get("uploadUrl") if isinstance(data, dict) else None
        if not upload_url:
            raise UploadSessionError("No upload URL received")

        session = UploadSession(
            session_id=str(data.get("sessionId") or ""),
            upload_url=upload_url,
            expected_size=file_size,
            expires_at=_parse_expiry(data.get("expirationDateTime")),
        )
        logger.info(
            "upload_session_negotiated",
            session_id=session.session_id,
            filename=filename,
            file_size=file_size,
        )
        return session
