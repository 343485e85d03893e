import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from src.config import settings
from src.domain.exceptions import InvalidInputError

ACCEPTED_VIDEO_TYPES: dict[str, tuple[str, ...]] = {
    "video/mp4": (".mp4",),
    "video/quicktime": (".mov",),
    "video/webm": (".webm",),
    "video/x-msvideo": (".avi",),
}


def _guess_mime_type(path: Path) -> str | None:
    suffix = path.suffix.lower()
    for mime_type, extensions in ACCEPTED_VIDEO_TYPES.items():
        if suffix in extensions:
            return mime_type
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed


@dataclass(frozen=True)
class VideoSource:
    """A local video file selected for upload."""

    path: Path
    size_bytes: int
    mime_type: str
    upload_filename: str

    @classmethod
    def from_path(
        cls,
        path: Path | str,
        *,
        asin: str | None = None,
        mime_type: str | None = None,
        max_size: int = settings.max_upload_size,
    ) -> "VideoSource":
        path = Path(path)
        if not path.is_file():
            raise InvalidInputError(f"File not found: {path}")

        size = path.stat().st_size
        if size == 0:
            raise InvalidInputError(f"{path.name} is empty; nothing to upload")
        if size > max_size:
            raise InvalidInputError(
                f"{path.name} is too large ({size} bytes). Maximum file size is {max_size} bytes."
            )

        resolved_type = mime_type or _guess_mime_type(path)
        if resolved_type not in ACCEPTED_VIDEO_TYPES:
            raise InvalidInputError(
                f"Invalid file type {resolved_type!r}. Please upload a video file (MP4, MOV, WEBM, or AVI)."
            )

        return cls(
            path=path,
            size_bytes=size,
            mime_type=resolved_type,
            upload_filename=upload_filename_for(path.name, asin),
        )

    def open(self) -> BinaryIO:
        return self.path.open("rb")


def upload_filename_for(original_name: str, asin: str | None) -> str:
    """Name the uploaded file after the product's ASIN when one is known."""
    if not asin:
        return original_name
    extension = original_name.rsplit(".", 1)[-1].lower() if "." in original_name else "mp4"
    return f"{asin}.{extension}"
