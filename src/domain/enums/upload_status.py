from enum import Enum


class UploadStatus(str, Enum):
    """Status of a product video record on the server."""

    PENDING = "pending"
    COMPLETE = "complete"
    FAILED = "failed"
