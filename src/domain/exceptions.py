"""
Error taxonomy for the upload and polling core.

None of these are retried automatically; callers surface them and let the
user decide what to restart.
"""
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from src.domain.entities.upload_session import VideoMetadataRecord


class InvalidInputError(ValueError):
    """Malformed sizes, ranges or files. Always a usage error."""


class IntegrationNotConnectedError(Exception):
    """Session negotiation refused because the cloud drive is not linked."""

    def __init__(self, integration: str = "OneDrive") -> None:
        self.integration = integration
        super().__init__(
            f"{integration} not connected. Please connect your {integration} account in Settings."
        )


class UploadSessionError(Exception):
    """Session negotiation failed for any other reason (network, server, bad response)."""


class ChunkUploadError(Exception):
    """A chunk PUT failed; the whole sequence was aborted."""

    def __init__(
        self,
        chunk_index: int,
        total_chunks: int,
        detail: str,
        status_code: int | None = None,
    ) -> None:
        self.chunk_index = chunk_index
        self.total_chunks = total_chunks
        self.detail = detail
        self.status_code = status_code
        super().__init__(
            f"Upload failed at chunk {chunk_index + 1}/{total_chunks}: {detail}"
        )


class IncompleteUploadResultError(Exception):
    """All bytes were sent but the final response did not identify the remote file."""

    def __init__(self, detail: str = "Upload completed but no file ID returned") -> None:
        self.detail = detail
        super().__init__(detail)


class MetadataPersistFailure(Exception):
    """The remote file exists but its metadata record could not be saved."""

    def __init__(self, record: "VideoMetadataRecord", detail: str) -> None:
        self.record = record
        self.detail = detail
        super().__init__(f"Upload succeeded, but saving failed: {detail}")


class PollTimeoutError(Exception):
    """The job produced no result inside the polling window. It may still finish later."""

    def __init__(self, target_key: str, max_seconds: int) -> None:
        self.target_key = target_key
        self.max_seconds = max_seconds
        super().__init__(f"No result for {target_key} after {max_seconds}s")


class PopupBlockedError(Exception):
    """The OAuth popup could not be opened."""


class OAuthFlowError(Exception):
    """The OAuth popup reported an error or closed before completing."""


class VideoNotFoundError(Exception):
    def __init__(self, video_id: UUID) -> None:
        self.video_id = video_id
        super().__init__(f"Video {video_id} not found or does not belong to user")
