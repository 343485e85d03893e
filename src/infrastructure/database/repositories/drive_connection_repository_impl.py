from sqlalchemy.ext.asyncio import AsyncSession

from src.application.interfaces.drive_connection_repository import (
    DriveConnection,
    DriveConnectionRepository,
)
from src.infrastructure.database.models import DriveConnectionModel


class SqlAlchemyDriveConnectionRepository(DriveConnectionRepository):
    """Read-only; rows are written by the OAuth callback function."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_for_user(self, user_id: str) -> DriveConnection | None:
        model = await self._session.get(DriveConnectionModel, user_id)
        if model is None:
            return None
        return DriveConnection(
            user_id=model.user_id,
            access_token=model.access_token,
            default_folder_id=model.default_folder_id,
            account_email=model.account_email,
            connected_at=model.connected_at,
        )
