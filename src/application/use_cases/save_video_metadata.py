from dataclasses import dataclass
from uuid import UUID

import structlog

from src.application.interfaces.event_publisher import EventPublisher
from src.application.interfaces.video_repository import VideoRepository
from src.domain.entities.product_video import ProductVideo
from src.domain.exceptions import InvalidInputError, VideoNotFoundError

logger = structlog.get_logger(__name__)


@dataclass
class SaveVideoMetadataInput:
    user_id: str
    onedrive_file_id: str
    filename: str
    session_id: UUID | None = None
    product_id: str | None = None
    onedrive_path: str | None = None
    file_size: int | None = None
    mime_type: str | None = None
    thumbnail_url: str | None = None
    duration_seconds: int | None = None


class SaveVideoMetadata:
    """
    Use case: Record the drive item of a finished upload.

    With a session id the PENDING record created at negotiation time is
    completed; without one a new complete record is created.
    """

    def __init__(self, video_repo: VideoRepository, event_publisher: EventPublisher) -> None:
        self._video_repo = video_repo
        self._event_publisher = event_publisher

    async def execute(self, input_data: SaveVideoMetadataInput) -> ProductVideo:
        if not input_data.onedrive_file_id or not input_data.filename:
            raise InvalidInputError("onedrive_file_id and filename are required")

        if input_data.session_id is not None:
            video = await self._video_repo.get_for_user(input_data.session_id, input_data.user_id)
            if video is None:
                raise VideoNotFoundError(input_data.session_id)
            video.complete_upload(
                onedrive_file_id=input_data.onedrive_file_id,
                onedrive_path=input_data.onedrive_path,
                filename=input_data.filename,
                file_size=input_data.file_size,
                mime_type=input_data.mime_type,
                thumbnail_url=input_data.thumbnail_url,
                duration_seconds=input_data.duration_seconds,
            )
        else:
            video = ProductVideo.create_complete(
                user_id=input_data.user_id,
                product_id=input_data.product_id,
                onedrive_file_id=input_data.onedrive_file_id,
                onedrive_path=input_data.onedrive_path,
                filename=input_data.filename,
                file_size=input_data.file_size,
                mime_type=input_data.mime_type,
                thumbnail_url=input_data.thumbnail_url,
                duration_seconds=input_data.duration_seconds,
            )

        await self._video_repo.save(video)
        await self._event_publisher.publish_many(video.collect_events())

        logger.info(
            "video_metadata_saved",
            video_id=str(video.id),
            user_id=input_data.user_id,
            onedrive_file_id=video.onedrive_file_id,
            completed_session=input_data.session_id is not None,
        )
        return video
