from dataclasses import dataclass

from src.application.interfaces.video_repository import VideoRepository
from src.domain.entities.product_video import ProductVideo
from src.domain.enums.upload_status import UploadStatus


@dataclass
class ListVideosInput:
    user_id: str
    product_id: str | None = None
    status: UploadStatus | None = None


@dataclass
class ListVideosOutput:
    videos: list[ProductVideo]

    @property
    def total_count(self) -> int:
        return len(self.videos)


class ListVideos:
    """Use case: List a user's videos, newest first, optionally filtered."""

    def __init__(self, video_repo: VideoRepository) -> None:
        self._video_repo = video_repo

    async def execute(self, input_data: ListVideosInput) -> ListVideosOutput:
        videos = await self._video_repo.list_for_user(
            input_data.user_id,
            product_id=input_data.product_id,
            status=input_data.status,
        )
        return ListVideosOutput(videos=videos)
