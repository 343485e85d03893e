"""HTTP client for the video metadata function."""
from typing import Any

import httpx
import structlog

from src.application.interfaces.upload_gateways import VideoMetadataGateway
from src.config import settings
from src.domain.entities.upload_session import VideoMetadataRecord
from src.domain.exceptions import MetadataPersistFailure

logger = structlog.get_logger(__name__)


class VideoMetadataClient(VideoMetadataGateway):
    def __init__(
        self,
        base_url: str = settings.functions_base_url,
        timeout: float = settings.http_timeout_seconds,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def save(self, *, auth_token: str, record: VideoMetadataRecord) -> dict[str, Any]:
        """POST /videos → the saved video row."""
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    f"{self._base_url}/videos",
                    json=record.to_payload(),
                    headers={
                        "Authorization": f"Bearer {auth_token}",
                        "Content-Type": "application/json",
                    },
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "video_metadata_rejected",
                    session_id=record.session_id,
                    status_code=exc.response.status_code,
                    response=exc.response.text,
                )
                raise MetadataPersistFailure(
                    record, f"{exc.response.status_code}: {exc.response.text}"
                ) from exc
            except httpx.RequestError as exc:
                logger.error("video_metadata_connection_failed", session_id=record.session_id, error=str(exc))
                raise MetadataPersistFailure(record, f"Failed to reach video service: {exc}") from exc

        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
