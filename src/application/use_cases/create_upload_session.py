from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

import structlog

from src.application.interfaces.cloud_drive import CloudDrive
from src.application.interfaces.drive_connection_repository import DriveConnectionRepository
from src.application.interfaces.event_publisher import EventPublisher
from src.application.interfaces.video_repository import VideoRepository
from src.domain.entities.product_video import ProductVideo
from src.domain.exceptions import IntegrationNotConnectedError, InvalidInputError

logger = structlog.get_logger(__name__)


@dataclass
class CreateUploadSessionInput:
    user_id: str
    filename: str
    file_size: int
    product_id: str | None = None
    folder_id: str | None = None
    mime_type: str | None = None


@dataclass
class CreateUploadSessionOutput:
    session_id: UUID
    upload_url: str
    expires_at: datetime | None


class CreateUploadSession:
    """
    Use case: Issue a resumable drive upload session for a user's video.

    Creates the drive-side session first, then a PENDING video record whose
    id is handed to the client as the session id.
    """

    def __init__(
        self,
        connection_repo: DriveConnectionRepository,
        video_repo: VideoRepository,
        drive: CloudDrive,
        event_publisher: EventPublisher,
    ) -> None:
        self._connection_repo = connection_repo
        self._video_repo = video_repo
        self._drive = drive
        self._event_publisher = event_publisher

    async def execute(self, input_data: CreateUploadSessionInput) -> CreateUploadSessionOutput:
        if not input_data.filename:
            raise InvalidInputError("filename is required")
        if input_data.file_size <= 0:
            raise InvalidInputError("fileSize is required and must be > 0")

        connection = await self._connection_repo.get_for_user(input_data.user_id)
        if connection is None:
            raise IntegrationNotConnectedError("OneDrive")

        folder_id = input_data.folder_id or connection.default_folder_id
        if not folder_id:
            raise InvalidInputError(
                "No folder specified. Please set a default folder or provide folderId."
            )

        # CloudDriveError propagates; no record is created
        drive_session = await self._drive.create_upload_session(
            access_token=connection.access_token,
            folder_id=folder_id,
            filename=input_data.filename,
        )

        video = ProductVideo.create_pending(
            user_id=input_data.user_id,
            product_id=input_data.product_id,
            folder_id=folder_id,
            filename=input_data.filename,
            file_size=input_data.file_size,
            mime_type=input_data.mime_type,
        )
        await self._video_repo.save(video)
        await self._event_publisher.publish_many(video.collect_events())

        logger.info(
            "upload_session_created",
            video_id=str(video.id),
            user_id=input_data.user_id,
            filename=input_data.filename,
            file_size=input_data.file_size,
        )

        return CreateUploadSessionOutput(
            session_id=video.id,
            upload_url=drive_session.upload_url,
            expires_at=drive_session.expires_at,
        )
