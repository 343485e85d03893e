from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.domain.exceptions import IncompleteUploadResultError, InvalidInputError


@dataclass
class UploadSession:
    """
    Short-lived upload authorization issued by the backend.

    The upload URL is single-use: the chunk uploader claims the session before
    sending the first byte, and a claimed session cannot be reused. Restarting
    a failed upload means negotiating a new session.
    """

    session_id: str
    upload_url: str
    expected_size: int
    expires_at: datetime | None = None

    _claimed: bool = field(default=False, repr=False, compare=False)

    @property
    def is_claimed(self) -> bool:
        return self._claimed

    def claim(self) -> None:
        if self._claimed:
            raise InvalidInputError(
                f"Upload session {self.session_id} was already used; negotiate a new session"
            )
        self._claimed = True


@dataclass(frozen=True)
class UploadResult:
    """Remote drive item described by the response to the final chunk."""

    remote_file_id: str
    remote_path: str
    name: str

    @classmethod
    def from_drive_item(cls, payload: Any) -> "UploadResult":
        if not isinstance(payload, dict):
            raise IncompleteUploadResultError("Final chunk response was not a JSON object")
        item_id = payload.get("id")
        if not item_id:
            raise IncompleteUploadResultError()

        parent = payload.get("parentReference") or {}
        return cls(
            remote_file_id=str(item_id),
            remote_path=str(parent.get("path") or ""),
            name=str(payload.get("name") or ""),
        )

    @property
    def item_path(self) -> str:
        """Full path of the uploaded file, e.g. /Videos/B0XXXXXXXXX.mp4."""
        if self.remote_path:
            return f"{self.remote_path.rstrip('/')}/{self.name}"
        return f"/{self.name}"


@dataclass(frozen=True)
class VideoMetadataRecord:
    session_id: str
    owner_record_id: str
    remote_file_id: str
    remote_path: str
    filename: str
    file_size_bytes: int
    mime_type: str | None = None

    @classmethod
    def from_upload(
        cls,
        *,
        session: UploadSession,
        owner_record_id: str,
        result: UploadResult,
        filename: str,
        mime_type: str | None,
    ) -> "VideoMetadataRecord":
        return cls(
            session_id=session.session_id,
            owner_record_id=owner_record_id,
            remote_file_id=result.remote_file_id,
            remote_path=result.item_path,
            filename=filename,
            file_size_bytes=session.expected_size,
            mime_type=mime_type,
        )

    def to_payload(self) -> dict[str, Any]:
        """Body accepted by the video metadata endpoint."""
        return {
            "sessionId": self.session_id or None,
            "productId": self.owner_record_id,
            "onedrive_file_id": self.remote_file_id,
            "onedrive_path": self.remote_path,
            "filename": self.filename,
            "file_size": self.file_size_bytes,
            "mime_type": self.mime_type,
        }
