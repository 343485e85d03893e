from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.domain.enums.upload_status import UploadStatus


class VideoResponse(BaseModel):
    id: UUID
    user_id: str
    product_id: str | None = None
    onedrive_file_id: str
    onedrive_path: str
    filename: str
    file_size: int | None = None
    mime_type: str | None = None
    thumbnail_url: str | None = None
    duration_seconds: int | None = None
    upload_status: UploadStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class VideoListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    videos: list[VideoResponse]
    total_count: int = Field(alias="totalCount")


class SaveVideoRequest(BaseModel):
    """Body sent by the upload client once the drive item exists."""

    model_config = ConfigDict(populate_by_name=True)

    onedrive_file_id: str = Field(min_length=1)
    filename: str = Field(min_length=1)
    session_id: UUID | None = Field(default=None, alias="sessionId")
    product_id: str | None = Field(default=None, alias="productId")
    onedrive_path: str | None = None
    file_size: int | None = Field(default=None, ge=0)
    mime_type: str | None = None
    thumbnail_url: str | None = None
    duration_seconds: int | None = Field(default=None, ge=0)


class UpdateVideoRequest(BaseModel):
    # Unknown keys are dropped, matching the allow-list on the entity
    model_config = ConfigDict(extra="ignore")

    product_id: str | None = None
    thumbnail_url: str | None = None
    duration_seconds: int | None = Field(default=None, ge=0)
    upload_status: UploadStatus | None = None


class DeleteVideoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = "Video deleted"
    deleted_from_drive: bool = Field(alias="deletedFromOneDrive")
