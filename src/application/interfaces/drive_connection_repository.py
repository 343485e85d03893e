from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass
class DriveConnection:
    user_id: str
    access_token: str
    default_folder_id: str | None
    account_email: str | None = None
    connected_at: datetime | None = None


class DriveConnectionRepository(ABC):
    """Port for reading a user's linked cloud drive account."""

    @abstractmethod
    async def get_for_user(self, user_id: str) -> DriveConnection | None:
        ...
