from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class UploadSessionCreatedEvent(DomainEvent):
    """Published when a resumable upload session is issued for a video."""

    video_id: UUID = field(default_factory=uuid4)
    user_id: str = ""
    product_id: str | None = None
    filename: str = ""
    file_size: int = 0


@dataclass(frozen=True)
class VideoUploadCompletedEvent(DomainEvent):
    """Published when the client confirms the bytes landed on the drive."""

    video_id: UUID = field(default_factory=uuid4)
    user_id: str = ""
    product_id: str | None = None
    onedrive_file_id: str = ""
    onedrive_path: str = ""


@dataclass(frozen=True)
class VideoDeletedEvent(DomainEvent):
    video_id: UUID = field(default_factory=uuid4)
    user_id: str = ""
    deleted_from_drive: bool = False
