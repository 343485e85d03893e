from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from src.domain.enums.upload_status import UploadStatus
from src.domain.events.domain_events import (
    DomainEvent,
    UploadSessionCreatedEvent,
    VideoDeletedEvent,
    VideoUploadCompletedEvent,
)
from src.domain.exceptions import InvalidInputError

PENDING_FILE_ID = "pending"

EDITABLE_FIELDS = frozenset({"product_id", "thumbnail_url", "duration_seconds", "upload_status"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ProductVideo:
    """
    A video stored on the user's cloud drive and linked to a product record.

    Created in PENDING state when an upload session is issued; completed once
    the client reports the drive item id. Emits domain events which the
    application layer collects and publishes.
    """

    id: UUID = field(default_factory=uuid4)
    user_id: str = ""
    product_id: str | None = None

    onedrive_file_id: str = PENDING_FILE_ID
    onedrive_path: str = ""
    filename: str = ""
    file_size: int | None = None
    mime_type: str | None = None
    thumbnail_url: str | None = None
    duration_seconds: int | None = None

    upload_status: UploadStatus = UploadStatus.PENDING

    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    _events: list[DomainEvent] = field(default_factory=list, repr=False, compare=False)

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @classmethod
    def create_pending(
        cls,
        *,
        user_id: str,
        product_id: str | None,
        folder_id: str,
        filename: str,
        file_size: int,
        mime_type: str | None = None,
    ) -> "ProductVideo":
        video = cls(
            user_id=user_id,
            product_id=product_id,
            onedrive_path=f"{folder_id}/{filename}",
            filename=filename,
            file_size=file_size,
            mime_type=mime_type,
        )
        video._events.append(
            UploadSessionCreatedEvent(
                video_id=video.id,
                user_id=user_id,
                product_id=product_id,
                filename=filename,
                file_size=file_size,
            )
        )
        return video

    @classmethod
    def create_complete(
        cls,
        *,
        user_id: str,
        product_id: str | None,
        onedrive_file_id: str,
        onedrive_path: str | None,
        filename: str,
        file_size: int | None = None,
        mime_type: str | None = None,
        thumbnail_url: str | None = None,
        duration_seconds: int | None = None,
    ) -> "ProductVideo":
        video = cls(
            user_id=user_id,
            product_id=product_id,
            filename=filename,
        )
        video.complete_upload(
            onedrive_file_id=onedrive_file_id,
            onedrive_path=onedrive_path or f"/{filename}",
            file_size=file_size,
            mime_type=mime_type,
            thumbnail_url=thumbnail_url,
            duration_seconds=duration_seconds,
        )
        return video

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def complete_upload(
        self,
        *,
        onedrive_file_id: str,
        onedrive_path: str | None = None,
        filename: str | None = None,
        file_size: int | None = None,
        mime_type: str | None = None,
        thumbnail_url: str | None = None,
        duration_seconds: int | None = None,
    ) -> None:
        """Record the drive item; fields left as None keep their current value."""
        self.onedrive_file_id = onedrive_file_id
        self.onedrive_path = onedrive_path or self.onedrive_path
        self.filename = filename or self.filename
        self.file_size = file_size or self.file_size
        self.mime_type = mime_type or self.mime_type
        self.thumbnail_url = thumbnail_url or self.thumbnail_url
        self.duration_seconds = duration_seconds or self.duration_seconds
        self.upload_status = UploadStatus.COMPLETE
        self.updated_at = _utcnow()

        self._events.append(
            VideoUploadCompletedEvent(
                video_id=self.id,
                user_id=self.user_id,
                product_id=self.product_id,
                onedrive_file_id=self.onedrive_file_id,
                onedrive_path=self.onedrive_path,
            )
        )

    def update_details(self, changes: dict[str, Any]) -> None:
        """Apply a partial update. Only EDITABLE_FIELDS may change."""
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise InvalidInputError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        if "upload_status" in changes:
            try:
                changes = {**changes, "upload_status": UploadStatus(changes["upload_status"])}
            except ValueError as exc:
                raise InvalidInputError(f"Invalid upload_status: {changes['upload_status']}") from exc
        if changes.get("duration_seconds") is not None and changes["duration_seconds"] < 0:
            raise InvalidInputError("duration_seconds must be >= 0")

        for name, value in changes.items():
            setattr(self, name, value)
        self.updated_at = _utcnow()

    def mark_deleted(self, *, deleted_from_drive: bool) -> None:
        self._events.append(
            VideoDeletedEvent(
                video_id=self.id,
                user_id=self.user_id,
                deleted_from_drive=deleted_from_drive,
            )
        )

    @property
    def has_drive_item(self) -> bool:
        return self.onedrive_file_id != PENDING_FILE_ID

    # -------------------------------------------------------------------------
    # Event collection
    # -------------------------------------------------------------------------

    def collect_events(self) -> list[DomainEvent]:
        """Return pending events and clear the internal buffer."""
        events = list(self._events)
        self._events.clear()
        return events
