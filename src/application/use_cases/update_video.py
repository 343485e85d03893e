from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

import structlog

from src.application.interfaces.video_repository import VideoRepository
from src.domain.entities.product_video import ProductVideo
from src.domain.exceptions import InvalidInputError, VideoNotFoundError

logger = structlog.get_logger(__name__)


@dataclass
class UpdateVideoInput:
    user_id: str
    video_id: UUID
    changes: dict[str, Any] = field(default_factory=dict)


class UpdateVideo:
    """Use case: Partially update a video's product link, thumbnail, duration or status."""

    def __init__(self, video_repo: VideoRepository) -> None:
        self._video_repo = video_repo

    async def execute(self, input_data: UpdateVideoInput) -> ProductVideo:
        video = await self._video_repo.get_for_user(input_data.video_id, input_data.user_id)
        if video is None:
            raise VideoNotFoundError(input_data.video_id)

        if not input_data.changes:
            raise InvalidInputError("No valid fields to update")

        video.update_details(input_data.changes)
        await self._video_repo.save(video)
        logger.info("video_updated", video_id=str(video.id), fields=sorted(input_data.changes))
        return video
