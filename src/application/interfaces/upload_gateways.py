"""Ports used by the client-side upload pipeline."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from src.domain.entities.upload_session import UploadSession, VideoMetadataRecord
from src.domain.uploads.byte_range import ByteRange


class UploadSessionGateway(ABC):
    """Exchanges an identity token and a target for a fresh upload session."""

    @abstractmethod
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
        Raises IntegrationNotConnectedError when the drive is not linked and
        UploadSessionError for every other failure.
        """
        ...


@dataclass(frozen=True)
class ChunkResponse:
    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class ChunkTransportError(Exception):
    """The chunk request never produced an HTTP response."""


class ChunkTransport(ABC):
    """Sends one byte range to a pre-authorized upload URL."""

    @abstractmethod
    async def put_chunk(self, upload_url: str, byte_range: ByteRange, data: bytes) -> ChunkResponse:
        ...


class VideoMetadataGateway(ABC):
    """Persists a completed upload against its owning product record."""

    @abstractmethod
    async def save(self, *, auth_token: str, record: VideoMetadataRecord) -> dict[str, Any]:
        """Raises MetadataPersistFailure when the record could not be saved."""
        ...
