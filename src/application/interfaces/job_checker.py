from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class JobCheckResult:
    found: bool
    payload: Any = None


class JobChecker(ABC):
    """Port for asking the backend whether a long-running job has a result yet."""

    @abstractmethod
    async def check(self, target_key: str) -> JobCheckResult:
        ...

    @abstractmethod
    async def start(self, target_key: str) -> None:
        """Kick off the server-side job for target_key."""
        ...
