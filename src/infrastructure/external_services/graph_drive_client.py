"""Microsoft Graph (OneDrive) client."""
from datetime import datetime
from urllib.parse import quote

import httpx
import structlog

from src.application.interfaces.cloud_drive import (
    CloudDrive,
    CloudDriveError,
    DriveUploadSession,
)
from src.config import settings

logger = structlog.get_logger(__name__)


class GraphDriveClient(CloudDrive):
    """
    Wraps the two Graph calls the upload backend needs:

    POST {graph}/me/drive/items/{folder}:/{name}:/createUploadSession
    DELETE {graph}/me/drive/items/{item}
    """

    def __init__(
        self,
        base_url: str = settings.graph_api_url,
        timeout: float = settings.http_timeout_seconds,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def create_upload_session(
        self, *, access_token: str, folder_id: str, filename: str
    ) -> DriveUploadSession:
        url = (
            f"{self._base_url}/me/drive/items/{folder_id}:/"
            f"{quote(filename)}:/createUploadSession"
        )
        body = {"item": {"@microsoft.graph.conflictBehavior": "rename"}}

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    url,
                    json=body,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "graph_upload_session_failed",
                    folder_id=folder_id,
                    filename=filename,
                    status_code=exc.response.status_code,
                    response=exc.response.text,
                )
                raise CloudDriveError(
                    f"Failed to create upload session: {exc.response.text}"
                ) from exc
            except httpx.RequestError as exc:
                raise CloudDriveError(f"Failed to reach Microsoft Graph: {exc}") from exc
            except ValueError as exc:
                raise CloudDriveError("Microsoft Graph returned invalid JSON") from exc

        upload_url = data.get("uploadUrl") if isinstance(data, dict) else None
        if not upload_url:
            raise CloudDriveError("Microsoft Graph did not return an upload URL")

        expires_at = None
        expiration = data.get("expirationDateTime")
        if isinstance(expiration, str):
            try:
                expires_at = datetime.fromisoformat(expiration.replace("Z", "+00:00"))
            except ValueError:
                logger.warning("graph_expiry_unparseable", value=expiration)

        return DriveUploadSession(upload_url=upload_url, expires_at=expires_at)

    async def delete_item(self, *, access_token: str, item_id: str) -> None:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.delete(
                    f"{self._base_url}/me/drive/items/{item_id}",
                    headers={"Authorization": f"Bearer {access_token}"},
                )
            except httpx.RequestError as exc:
                raise CloudDriveError(f"Failed to reach Microsoft Graph: {exc}") from exc

        # 404: already gone
        if response.status_code == 404:
            logger.info("graph_item_already_deleted", item_id=item_id)
            return
        if response.is_error:
            raise CloudDriveError(
                f"Failed to delete drive item {item_id}: {response.status_code} {response.text}"
            )
        logger.info("graph_item_deleted", item_id=item_id)
