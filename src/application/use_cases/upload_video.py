from dataclasses import dataclass
from pathlib import Path

import structlog

from src.application.interfaces.upload_gateways import UploadSessionGateway
from src.application.services.chunk_uploader import ChunkUploader, ProgressCallback
from src.application.use_cases.record_video_metadata import RecordVideoMetadata
from src.domain.entities.upload_session import (
    UploadResult,
    UploadSession,
    VideoMetadataRecord,
)
from src.domain.entities.video_source import VideoSource

logger = structlog.get_logger(__name__)


@dataclass
class UploadVideoInput:
    auth_token: str
    product_id: str
    source_path: Path
    asin: str | None = None
    mime_type: str | None = None


@dataclass
class UploadVideoOutput:
    session: UploadSession
    result: UploadResult
    record: VideoMetadataRecord


class UploadVideo:
    """
    Use case: Upload a local video to the user's cloud drive and link it to a product.

    Negotiates a fresh upload session, sends the file in sequential chunks,
    then records the metadata. Errors propagate unchanged; restarting is the
    caller's decision and always starts with a new session.
    """

    def __init__(
        self,
        session_gateway: UploadSessionGateway,
        chunk_uploader: ChunkUploader,
        recorder: RecordVideoMetadata,
    ) -> None:
        self._session_gateway = session_gateway
        self._chunk_uploader = chunk_uploader
        self._recorder = recorder

    async def execute(
        self,
        input_data: UploadVideoInput,
        on_progress: ProgressCallback | None = None,
    ) -> UploadVideoOutput:
        video = VideoSource.from_path(
            input_data.source_path,
            asin=input_data.asin,
            mime_type=input_data.mime_type,
        )

        session = await self._session_gateway.create_session(
            auth_token=input_data.auth_token,
            owner_record_id=input_data.product_id,
            filename=video.upload_filename,
            file_size=video.size_bytes,
            mime_type=video.mime_type,
        )

        with video.open() as source:
            result = await self._chunk_uploader.upload(
                source, session, video.size_bytes, on_progress=on_progress
            )

        record = VideoMetadataRecord.from_upload(
            session=session,
            owner_record_id=input_data.product_id,
            result=result,
            filename=video.upload_filename,
            mime_type=video.mime_type,
        )
        await self._recorder.execute(input_data.auth_token, record)

        logger.info(
            "video_uploaded",
            product_id=input_data.product_id,
            session_id=session.session_id,
            remote_path=record.remote_path,
            size_bytes=video.size_bytes,
        )
        return UploadVideoOutput(session=session, result=result, record=record)
