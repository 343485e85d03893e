"""
Sequential chunked upload to a resumable upload session.

Chunks are sent one at a time, in order, to the session's single upload URL.
Only the response to the final chunk describes the uploaded file; earlier
responses are checked for success and, when present, for the byte offset the
server expects next.
"""
import asyncio
import json
from collections.abc import Callable
from typing import Any, BinaryIO

import structlog

from src.application.interfaces.upload_gateways import (
    ChunkResponse,
    ChunkTransport,
    ChunkTransportError,
)
from src.config import settings
from src.domain.entities.upload_session import UploadResult, UploadSession
from src.domain.exceptions import (
    ChunkUploadError,
    IncompleteUploadResultError,
    InvalidInputError,
)
from src.domain.uploads.byte_range import ByteRange, split_byte_ranges

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[float], None]


def _read_range(source: BinaryIO, byte_range: ByteRange) -> bytes:
    source.seek(byte_range.start)
    data = source.read(byte_range.length)
    if len(data) != byte_range.length:
        raise InvalidInputError(
            f"Source ended early: expected {byte_range.length} bytes at offset "
            f"{byte_range.start}, got {len(data)}"
        )
    return data


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text) if text else None
    except ValueError:
        return None


def _next_expected_offset(body: Any) -> int | None:
    """First offset from a `nextExpectedRanges: ["26-"]` style body, if any."""
    if not isinstance(body, dict):
        return None
    ranges = body.get("nextExpectedRanges")
    if not ranges:
        return None
    try:
        return int(str(ranges[0]).split("-", 1)[0])
    except ValueError:
        return None


class ChunkUploader:
    """Uploads a binary source to an UploadSession in strictly sequential chunks."""

    def __init__(
        self,
        transport: ChunkTransport,
        chunk_size: int = settings.upload_chunk_size,
    ) -> None:
        self._transport = transport
        self._chunk_size = chunk_size

    async def upload(
        self,
        source: BinaryIO,
        session: UploadSession,
        total_size: int,
        on_progress: ProgressCallback | None = None,
    ) -> UploadResult:
        if total_size != session.expected_size:
            raise InvalidInputError(
                f"Upload session expects {session.expected_size} bytes, got {total_size}"
            )

        ranges = split_byte_ranges(total_size, self._chunk_size)
        if not ranges:
            raise InvalidInputError("Cannot upload an empty file")

        session.claim()
        total_chunks = len(ranges)
        logger.info(
            "chunked_upload_started",
            session_id=session.session_id,
            total_size=total_size,
            total_chunks=total_chunks,
        )

        *leading, final = ranges
        for index, byte_range in enumerate(leading):
            response = await self._send(session.upload_url, source, byte_range, index, total_chunks)
            self._check_intermediate(response, byte_range, index, total_chunks)
            if on_progress is not None:
                on_progress((index + 1) / total_chunks * 100)

        response = await self._send(session.upload_url, source, final, total_chunks - 1, total_chunks)
        result = self._parse_result(response)
        if on_progress is not None:
            on_progress(100.0)

        logger.info(
            "chunked_upload_completed",
            session_id=session.session_id,
            remote_file_id=result.remote_file_id,
        )
        return result

    async def _send(
        self,
        upload_url: str,
        source: BinaryIO,
        byte_range: ByteRange,
        index: int,
        total_chunks: int,
    ) -> ChunkResponse:
        data = await asyncio.get_running_loop().run_in_executor(None, _read_range, source, byte_range)
        try:
            response = await self._transport.put_chunk(upload_url, byte_range, data)
        except ChunkTransportError as exc:
            logger.error("chunk_transport_failed", chunk=index, total_chunks=total_chunks, error=str(exc))
            raise ChunkUploadError(index, total_chunks, str(exc)) from exc

        if not response.ok:
            logger.error(
                "chunk_rejected",
                chunk=index,
                total_chunks=total_chunks,
                status_code=response.status_code,
                response=response.text,
            )
            raise ChunkUploadError(index, total_chunks, response.text, response.status_code)

        logger.debug("chunk_uploaded", chunk=index, content_range=byte_range.content_range)
        return response

    def _check_intermediate(
        self,
        response: ChunkResponse,
        byte_range: ByteRange,
        index: int,
        total_chunks: int,
    ) -> None:
        expected = _next_expected_offset(_parse_json(response.text))
        if expected is not None and expected != byte_range.end:
            raise ChunkUploadError(
                index,
                total_chunks,
                f"server expects byte {expected} next, but {byte_range.end} bytes were sent",
                response.status_code,
            )

    def _parse_result(self, response: ChunkResponse) -> UploadResult:
        body = _parse_json(response.text)
        if body is None:
            raise IncompleteUploadResultError("Final chunk response was not valid JSON")
        return UploadResult.from_drive_item(body)
