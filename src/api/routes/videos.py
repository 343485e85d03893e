from uuid import UUID

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import (
    get_current_user_id,
    get_delete_video_use_case,
    get_list_videos_use_case,
    get_save_video_metadata_use_case,
    get_update_video_use_case,
)
from src.api.schemas.video_schemas import (
    DeleteVideoResponse,
    SaveVideoRequest,
    UpdateVideoRequest,
    VideoListResponse,
    VideoResponse,
)
from src.application.use_cases.delete_video import DeleteVideo, DeleteVideoInput
from src.application.use_cases.list_videos import ListVideos, ListVideosInput
from src.application.use_cases.save_video_metadata import SaveVideoMetadata, SaveVideoMetadataInput
from src.application.use_cases.update_video import UpdateVideo, UpdateVideoInput
from src.domain.enums.upload_status import UploadStatus

router = APIRouter(prefix="/videos", tags=["videos"])


@router.get("", response_model=VideoListResponse)
async def list_videos(
    product_id: str | None = Query(default=None, alias="productId"),
    upload_status: UploadStatus | None = Query(default=None, alias="status"),
    user_id: str = Depends(get_current_user_id),
    use_case: ListVideos = Depends(get_list_videos_use_case),
) -> VideoListResponse:
    result = await use_case.execute(
        ListVideosInput(user_id=user_id, product_id=product_id, status=upload_status)
    )
    return VideoListResponse(
        videos=[VideoResponse.model_validate(v) for v in result.videos],
        total_count=result.total_count,
    )


@router.post("", response_model=VideoResponse)
async def save_video(
    body: SaveVideoRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: SaveVideoMetadata = Depends(get_save_video_metadata_use_case),
) -> VideoResponse:
    """Record a finished upload, completing the pending record when sessionId is given."""
    video = await use_case.execute(
        SaveVideoMetadataInput(
            user_id=user_id,
            onedrive_file_id=body.onedrive_file_id,
            filename=body.filename,
            session_id=body.session_id,
            product_id=body.product_id,
            onedrive_path=body.onedrive_path,
            file_size=body.file_size,
            mime_type=body.mime_type,
            thumbnail_url=body.thumbnail_url,
            duration_seconds=body.duration_seconds,
        )
    )
    return VideoResponse.model_validate(video)


@router.patch("/{video_id}", response_model=VideoResponse)
async def update_video(
    video_id: UUID,
    body: UpdateVideoRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: UpdateVideo = Depends(get_update_video_use_case),
) -> VideoResponse:
    video = await use_case.execute(
        UpdateVideoInput(
            user_id=user_id,
            video_id=video_id,
            changes=body.model_dump(exclude_unset=True),
        )
    )
    return VideoResponse.model_validate(video)


@router.delete("/{video_id}", response_model=DeleteVideoResponse)
async def delete_video(
    video_id: UUID,
    delete_from_drive: bool = Query(default=False, alias="deleteFromOneDrive"),
    user_id: str = Depends(get_current_user_id),
    use_case: DeleteVideo = Depends(get_delete_video_use_case),
) -> DeleteVideoResponse:
    result = await use_case.execute(
        DeleteVideoInput(user_id=user_id, video_id=video_id, delete_from_drive=delete_from_drive)
    )
    return DeleteVideoResponse(deleted_from_drive=result.deleted_from_drive)
