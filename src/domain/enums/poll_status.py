from enum import Enum


class PollStatus(str, Enum):
    """States of a job poll."""

    IDLE = "IDLE"
    POLLING = "POLLING"
    RESOLVED = "RESOLVED"
    TIMED_OUT = "TIMED_OUT"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        """Terminal states are left only by an explicit restart."""
        return self in (PollStatus.RESOLVED, PollStatus.TIMED_OUT, PollStatus.CANCELLED)
