"""
One OAuth popup at a time.

PopupRegistry is a single slot owned by whoever wires the flows together
(one per browser tab / UI shell). It is advisory: a second connect attempt
re-focuses the open popup instead of opening another one.
"""
import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import structlog

from src.application.oauth.callback_channel import OAuthCallbackChannel, OAuthResult
from src.domain.exceptions import OAuthFlowError, PopupBlockedError

logger = structlog.get_logger(__name__)


class PopupHandle(Protocol):
    @property
    def closed(self) -> bool: ...

    def focus(self) -> None: ...


PopupOpener = Callable[[], PopupHandle | None]


class PopupRegistry:
    def __init__(self) -> None:
        self._active: PopupHandle | None = None

    @property
    def active(self) -> PopupHandle | None:
        if self._active is not None and self._active.closed:
            self._active = None
        return self._active

    def acquire(self, open_popup: PopupOpener) -> tuple[PopupHandle, bool]:
        """
        Return (handle, reused). When a popup is already open it is focused
        and returned with reused=True; open_popup is not called.
        """
        existing = self.active
        if existing is not None:
            existing.focus()
            return existing, True

        handle = open_popup()
        if handle is None or handle.closed:
            raise PopupBlockedError(
                "Popup blocked! Please allow popups for this site and try again."
            )
        self._active = handle
        return handle, False

    def release(self, handle: PopupHandle) -> None:
        if self._active is handle:
            self._active = None


class OAuthPopupFlow:
    """Opens an OAuth popup through the registry and waits for its callback message."""

    def __init__(
        self,
        registry: PopupRegistry,
        channel: OAuthCallbackChannel,
        *,
        closed_check_seconds: float = 1.0,
        timeout_seconds: float | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._registry = registry
        self._channel = channel
        self._closed_check_seconds = closed_check_seconds
        self._timeout_seconds = timeout_seconds
        self._sleep = sleep

    async def run(self, open_popup: PopupOpener) -> OAuthResult | None:
        """
        Returns the success result, or None when another flow was already in
        progress and was re-focused instead.
        """
        handle, reused = self._registry.acquire(open_popup)
        if reused:
            logger.warning("oauth_popup_already_open", provider=self._channel.provider)
            return None

        self._channel.discard_pending()
        receive = asyncio.ensure_future(self._channel.receive())
        watcher = asyncio.ensure_future(self._wait_closed(handle))
        try:
            done, pending = await asyncio.wait(
                {receive, watcher},
                timeout=self._timeout_seconds,
                return_when=asyncio.FIRST_COMPLETED,
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

            if receive in done:
                return receive.result()
            if watcher in done:
                raise OAuthFlowError(
                    f"{self._channel.provider} window was closed before authorization completed"
                )
            raise OAuthFlowError(f"{self._channel.provider} authorization timed out")
        finally:
            for task in (receive, watcher):
                if not task.done():
                    task.cancel()
            self._registry.release(handle)

    async def _wait_closed(self, handle: PopupHandle) -> None:
        while not handle.closed:
            await self._sleep(self._closed_check_seconds)
