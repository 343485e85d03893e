from abc import ABC, abstractmethod
from uuid import UUID

from src.domain.entities.product_video import ProductVideo
from src.domain.enums.upload_status import UploadStatus


class VideoRepository(ABC):
    """Port for persisting and querying ProductVideo records. Always user-scoped."""

    @abstractmethod
    async def save(self, video: ProductVideo) -> None:
        ...

    @abstractmethod
    async def get_for_user(self, video_id: UUID, user_id: str) -> ProductVideo | None:
        ...

    @abstractmethod
    async def list_for_user(
        self,
        user_id: str,
        *,
        product_id: str | None = None,
        status: UploadStatus | None = None,
    ) -> list[ProductVideo]:
        """Newest first."""
        ...

    @abstractmethod
    async def delete(self, video_id: UUID) -> None:
        ...
