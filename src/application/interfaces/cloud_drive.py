from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


class CloudDriveError(Exception):
    """The drive provider rejected or failed a request."""


@dataclass(frozen=True)
class DriveUploadSession:
    upload_url: str
    expires_at: datetime | None


class CloudDrive(ABC):
    """Port for the user's cloud drive (Microsoft Graph / OneDrive)."""

    @abstractmethod
    async def create_upload_session(
        self, *, access_token: str, folder_id: str, filename: str
    ) -> DriveUploadSession:
        ...

    @abstractmethod
    async def delete_item(self, *, access_token: str, item_id: str) -> None:
        ...
