"""
Message channel for OAuth popups reporting back to the opener.

Only messages whose origin is on the allow-list are processed; anything else
is dropped before it reaches the flow.
"""
import asyncio
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import structlog

from src.config import settings
from src.domain.exceptions import OAuthFlowError

logger = structlog.get_logger(__name__)

TrustedOrigin = str | re.Pattern[str]

DEFAULT_ORIGIN_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^https://.*\.netlify\.app$"),
    re.compile(r"^http://localhost(:\d+)?$"),
)


class OriginAllowList:
    """Exact-match strings and full-match patterns of trusted origins."""

    def __init__(self, origins: Iterable[TrustedOrigin]) -> None:
        self._origins = tuple(origins)

    @classmethod
    def default(cls, app_origin: str = settings.app_origin) -> "OriginAllowList":
        return cls((app_origin, *DEFAULT_ORIGIN_PATTERNS))

    def is_trusted(self, origin: str) -> bool:
        for allowed in self._origins:
            if isinstance(allowed, str):
                if origin == allowed:
                    return True
            elif allowed.fullmatch(origin):
                return True
        return False


@dataclass(frozen=True)
class OAuthResult:
    provider: str
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def email(self) -> str | None:
        return self.data.get("email")


class OAuthCallbackChannel:
    """
    Receives `{type: "<provider>-oauth-success" | "<provider>-oauth-error"}`
    messages posted by the popup.
    """

    def __init__(self, provider: str, allow_list: OriginAllowList) -> None:
        self._provider = provider
        self._allow_list = allow_list
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    @property
    def provider(self) -> str:
        return self._provider

    def post(self, origin: str, data: Any) -> bool:
        """Deliver a message. Returns False when it was discarded."""
        if not self._allow_list.is_trusted(origin):
            logger.warning("oauth_message_rejected", provider=self._provider, origin=origin)
            return False
        if not isinstance(data, dict):
            return False
        self._queue.put_nowait(data)
        return True

    def discard_pending(self) -> int:
        """Drop messages that arrived while no flow was waiting for them."""
        dropped = 0
        while not self._queue.empty():
            self._queue.get_nowait()
            dropped += 1
        if dropped:
            logger.info("oauth_stale_messages_discarded", provider=self._provider, count=dropped)
        return dropped

    async def receive(self) -> OAuthResult:
        """Wait for the first success or error message for this provider."""
        success_type = f"{self._provider}-oauth-success"
        error_type = f"{self._provider}-oauth-error"
        while True:
            data = await self._queue.get()
            message_type = data.get("type")
            if message_type == success_type:
                logger.info("oauth_flow_succeeded", provider=self._provider)
                return OAuthResult(provider=self._provider, data=data)
            if message_type == error_type:
                logger.error("oauth_flow_failed", provider=self._provider, error=data.get("error"))
                raise OAuthFlowError(
                    f"Failed to connect to {self._provider}: {data.get('error') or 'Unknown error'}"
                )
