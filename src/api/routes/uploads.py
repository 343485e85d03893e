from fastapi import APIRouter, Depends

from src.api.dependencies import get_create_upload_session_use_case, get_current_user_id
from src.api.schemas.upload_schemas import CreateUploadSessionRequest, UploadSessionResponse
from src.application.use_cases.create_upload_session import (
    CreateUploadSession,
    CreateUploadSessionInput,
)

router = APIRouter(tags=["uploads"])


@router.post("/onedrive-upload-session", response_model=UploadSessionResponse)
async def create_upload_session(
    body: CreateUploadSessionRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: CreateUploadSession = Depends(get_create_upload_session_use_case),
) -> UploadSessionResponse:
    """Issue a resumable OneDrive upload session and a pending video record."""
    result = await use_case.execute(
        CreateUploadSessionInput(
            user_id=user_id,
            filename=body.filename,
            file_size=body.file_size,
            product_id=body.product_id,
            folder_id=body.folder_id,
            mime_type=body.mime_type,
        )
    )
    return UploadSessionResponse(
        upload_url=result.upload_url,
        expiration_date_time=result.expires_at,
        session_id=result.session_id,
    )
