"""PUTs byte ranges to a pre-authorized resumable upload URL."""
import httpx
import structlog

from src.application.interfaces.upload_gateways import (
    ChunkResponse,
    ChunkTransport,
    ChunkTransportError,
)
from src.config import settings
from src.domain.uploads.byte_range import ByteRange

logger = structlog.get_logger(__name__)


class HttpChunkTransport(ChunkTransport):
    """
    One shared AsyncClient for the whole upload; use as an async context
    manager or call aclose() when done.

    The upload URL is pre-authorized, so no Authorization header is sent.
    """

    def __init__(
        self,
        timeout: float = settings.http_timeout_seconds,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def __aenter__(self) -> "HttpChunkTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def put_chunk(self, upload_url: str, byte_range: ByteRange, data: bytes) -> ChunkResponse:
        try:
            response = await self._client.put(
                upload_url,
                content=data,
                headers={
                    "Content-Range": byte_range.content_range,
                    "Content-Type": "application/octet-stream",
                },
            )
        except httpx.RequestError as exc:
            raise ChunkTransportError(f"Failed to reach upload URL: {exc}") from exc

        return ChunkResponse(status_code=response.status_code, text=response.text)
