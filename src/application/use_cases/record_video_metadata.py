from typing import Any

import structlog

from src.application.interfaces.upload_gateways import VideoMetadataGateway
from src.domain.entities.upload_session import VideoMetadataRecord

logger = structlog.get_logger(__name__)


class RecordVideoMetadata:
    """
    Use case: Save the metadata of a finished upload against its product record.

    There is no transaction spanning the byte transfer and this write. When it
    fails, MetadataPersistFailure carries the record so the caller can run
    this use case again without re-uploading.
    """

    def __init__(self, gateway: VideoMetadataGateway) -> None:
        self._gateway = gateway

    async def execute(self, auth_token: str, record: VideoMetadataRecord) -> dict[str, Any]:
        saved = await self._gateway.save(auth_token=auth_token, record=record)
        logger.info(
            "video_metadata_recorded",
            session_id=record.session_id,
            product_id=record.owner_record_id,
            remote_file_id=record.remote_file_id,
            remote_path=record.remote_path,
        )
        return saved
