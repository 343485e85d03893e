"""
FastAPI dependency injection wiring.

Each dependency function returns a fully-constructed object with its
collaborators injected, keeping the route handlers thin.
"""
from collections.abc import AsyncGenerator

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.interfaces.cloud_drive import CloudDrive
from src.application.interfaces.drive_connection_repository import DriveConnectionRepository
from src.application.interfaces.event_publisher import EventPublisher
from src.application.interfaces.identity import AuthenticationError, IdentityResolver
from src.application.interfaces.video_repository import VideoRepository
from src.application.use_cases.create_upload_session import CreateUploadSession
from src.application.use_cases.delete_video import DeleteVideo
from src.application.use_cases.list_videos import ListVideos
from src.application.use_cases.save_video_metadata import SaveVideoMetadata
from src.application.use_cases.update_video import UpdateVideo
from src.infrastructure.database.connection import get_db_session
from src.infrastructure.database.repositories.drive_connection_repository_impl import (
    SqlAlchemyDriveConnectionRepository,
)
from src.infrastructure.database.repositories.video_repository_impl import (
    SqlAlchemyVideoRepository,
)
from src.infrastructure.external_services.graph_drive_client import GraphDriveClient
from src.infrastructure.external_services.supabase_identity import SupabaseIdentityResolver
from src.infrastructure.messaging.rabbitmq_publisher import RabbitMQPublisher


# ---- Low-level dependencies ------------------------------------------------

async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_db_session():
        yield session


def get_video_repo(session: AsyncSession = Depends(get_session)) -> VideoRepository:
    return SqlAlchemyVideoRepository(session)


def get_connection_repo(session: AsyncSession = Depends(get_session)) -> DriveConnectionRepository:
    return SqlAlchemyDriveConnectionRepository(session)


def get_event_publisher() -> EventPublisher:
    return RabbitMQPublisher()


def get_cloud_drive() -> CloudDrive:
    return GraphDriveClient()


def get_identity_resolver() -> IdentityResolver:
    return SupabaseIdentityResolver()


async def get_current_user_id(
    authorization: str | None = Header(default=None),
    identity: IdentityResolver = Depends(get_identity_resolver),
) -> str:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise AuthenticationError("Missing or invalid authorization header")
    return await identity.resolve_user_id(authorization[len("bearer "):].strip())


# ---- Use-case dependencies -------------------------------------------------

def get_create_upload_session_use_case(
    connection_repo: DriveConnectionRepository = Depends(get_connection_repo),
    video_repo: VideoRepository = Depends(get_video_repo),
    drive: CloudDrive = Depends(get_cloud_drive),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> CreateUploadSession:
    return CreateUploadSession(connection_repo, video_repo, drive, event_publisher)


def get_save_video_metadata_use_case(
    video_repo: VideoRepository = Depends(get_video_repo),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> SaveVideoMetadata:
    return SaveVideoMetadata(video_repo, event_publisher)


def get_list_videos_use_case(
    video_repo: VideoRepository = Depends(get_video_repo),
) -> ListVideos:
    return ListVideos(video_repo)


def get_update_video_use_case(
    video_repo: VideoRepository = Depends(get_video_repo),
) -> UpdateVideo:
    return UpdateVideo(video_repo)


def get_delete_video_use_case(
    video_repo: VideoRepository = Depends(get_video_repo),
    connection_repo: DriveConnectionRepository = Depends(get_connection_repo),
    drive: CloudDrive = Depends(get_cloud_drive),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> DeleteVideo:
    return DeleteVideo(video_repo, connection_repo, drive, event_publisher)
