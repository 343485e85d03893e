import math
from dataclasses import dataclass

from src.domain.exceptions import InvalidInputError

DEFAULT_CHUNK_SIZE = 10 * 1024 * 1024  # 10MB


@dataclass(frozen=True)
class ByteRange:
    """Half-open slice [start, end) of a file of total_size bytes."""

    start: int
    end: int
    total_size: int

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def content_range(self) -> str:
        return f"bytes {self.start}-{self.end - 1}/{self.total_size}"

    @property
    def is_last(self) -> bool:
        return self.end == self.total_size


def _as_byte_count(name: str, value: object, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"{name} must be a whole number of bytes, got {value!r}")
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise InvalidInputError(f"{name} must be a whole number of bytes, got {value!r}")
        value = int(value)
    if value < minimum:
        raise InvalidInputError(f"{name} must be >= {minimum}, got {value}")
    return value


def split_byte_ranges(total_size: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> list[ByteRange]:
    """
    Partition total_size bytes into contiguous ranges of chunk_size bytes.

    The last range is shorter when total_size is not a multiple of chunk_size.
    An empty file yields no ranges.
    """
    size = _as_byte_count("total_size", total_size, minimum=0)
    chunk = _as_byte_count("chunk_size", chunk_size, minimum=1)

    count = -(-size // chunk)
    return [
        ByteRange(start=i * chunk, end=min((i + 1) * chunk, size), total_size=size)
        for i in range(count)
    ]
