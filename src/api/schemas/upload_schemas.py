from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CreateUploadSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    filename: str = Field(min_length=1)
    file_size: int = Field(alias="fileSize", gt=0)
    product_id: str | None = Field(default=None, alias="productId")
    mime_type: str | None = Field(default=None, alias="mimeType")
    folder_id: str | None = Field(default=None, alias="folderId")


class UploadSessionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    upload_url: str = Field(alias="uploadUrl")
    expiration_date_time: datetime | None = Field(alias="expirationDateTime")
    session_id: UUID = Field(alias="sessionId")
