from dataclasses import dataclass
from uuid import UUID

import structlog

from src.application.interfaces.cloud_drive import CloudDrive, CloudDriveError
from src.application.interfaces.drive_connection_repository import DriveConnectionRepository
from src.application.interfaces.event_publisher import EventPublisher
from src.application.interfaces.video_repository import VideoRepository
from src.domain.exceptions import VideoNotFoundError

logger = structlog.get_logger(__name__)


@dataclass
class DeleteVideoInput:
    user_id: str
    video_id: UUID
    delete_from_drive: bool = False


@dataclass
class DeleteVideoOutput:
    video_id: UUID
    deleted_from_drive: bool


class DeleteVideo:
    """
    Use case: Remove a video record, optionally deleting the drive file too.

    A drive failure does not block removing the record.
    """

    def __init__(
        self,
        video_repo: VideoRepository,
        connection_repo: DriveConnectionRepository,
        drive: CloudDrive,
        event_publisher: EventPublisher,
    ) -> None:
        self._video_repo = video_repo
        self._connection_repo = connection_repo
        self._drive = drive
        self._event_publisher = event_publisher

    async def execute(self, input_data: DeleteVideoInput) -> DeleteVideoOutput:
        video = await self._video_repo.get_for_user(input_data.video_id, input_data.user_id)
        if video is None:
            raise VideoNotFoundError(input_data.video_id)

        deleted_from_drive = False
        if input_data.delete_from_drive and video.has_drive_item:
            connection = await self._connection_repo.get_for_user(input_data.user_id)
            if connection is None:
                logger.warning("drive_delete_skipped_not_connected", video_id=str(video.id))
            else:
                try:
                    await self._drive.delete_item(
                        access_token=connection.access_token,
                        item_id=video.onedrive_file_id,
                    )
                    deleted_from_drive = True
                except CloudDriveError as exc:
                    logger.error(
                        "drive_delete_failed",
                        video_id=str(video.id),
                        onedrive_file_id=video.onedrive_file_id,
                        error=str(exc),
                    )

        await self._video_repo.delete(video.id)
        video.mark_deleted(deleted_from_drive=deleted_from_drive)
        await self._event_publisher.publish_many(video.collect_events())

        logger.info("video_deleted", video_id=str(video.id), deleted_from_drive=deleted_from_drive)
        return DeleteVideoOutput(video_id=video.id, deleted_from_drive=deleted_from_drive)
