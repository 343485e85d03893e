"""Unit tests for the OAuth popup guard and trusted-origin callback channel."""
import asyncio
import re

import pytest

from src.application.oauth.callback_channel import (
    OAuthCallbackChannel,
    OriginAllowList,
)
from src.application.oauth.popup_flow import OAuthPopupFlow, PopupRegistry
from src.domain.exceptions import OAuthFlowError, PopupBlockedError

APP_ORIGIN = "https://app.example.com"


class FakePopup:
    def __init__(self) -> None:
        self.closed = False
        self.focus_calls = 0

    def focus(self) -> None:
        self.focus_calls += 1


async def _instant_sleep(seconds: float) -> None:
    await asyncio.sleep(0)


def _channel() -> OAuthCallbackChannel:
    return OAuthCallbackChannel("onedrive", OriginAllowList.default(APP_ORIGIN))


class TestOriginAllowList:
    @pytest.mark.parametrize(
        "origin",
        [
            APP_ORIGIN,
            "https://deploy-preview-12--reseller.netlify.app",
            "http://localhost",
            "http://localhost:8888",
        ],
    )
    def test_trusted_origins(self, origin: str) -> None:
        assert OriginAllowList.default(APP_ORIGIN).is_trusted(origin) is True

    @pytest.mark.parametrize(
        "origin",
        [
            "https://evil.example.com",
            "http://reseller.netlify.app",
            "https://netlify.app.evil.com",
            "http://localhost.evil.com",
            "https://localhost:8888",
            "https://app.example.com.evil.com",
        ],
    )
    def test_untrusted_origins(self, origin: str) -> None:
        assert OriginAllowList.default(APP_ORIGIN).is_trusted(origin) is False

    def test_custom_pattern(self) -> None:
        allow_list = OriginAllowList([re.compile(r"^https://[a-z]+\.internal$")])
        assert allow_list.is_trusted("https://crm.internal") is True
        assert allow_list.is_trusted("https://crm.internal.com") is False


class TestOAuthCallbackChannel:
    @pytest.mark.asyncio
    async def test_success_message_resolves(self) -> None:
        channel = _channel()

        assert channel.post(APP_ORIGIN, {"type": "onedrive-oauth-success", "email": "a@b.com"})
        result = await channel.receive()

        assert result.provider == "onedrive"
        assert result.email == "a@b.com"

    @pytest.mark.asyncio
    async def test_untrusted_origin_is_discarded(self) -> None:
        channel = _channel()

        accepted = channel.post(
            "https://evil.example.com", {"type": "onedrive-oauth-success", "email": "x@evil.com"}
        )
        channel.post(APP_ORIGIN, {"type": "onedrive-oauth-success", "email": "real@b.com"})
        result = await channel.receive()

        assert accepted is False
        assert result.email == "real@b.com"

    @pytest.mark.asyncio
    async def test_error_message_raises(self) -> None:
        channel = _channel()
        channel.post(APP_ORIGIN, {"type": "onedrive-oauth-error", "error": "access_denied"})

        with pytest.raises(OAuthFlowError, match="access_denied"):
            await channel.receive()

    @pytest.mark.asyncio
    async def test_other_message_types_are_ignored(self) -> None:
        channel = _channel()
        channel.post(APP_ORIGIN, {"type": "ebay-oauth-success"})
        channel.post(APP_ORIGIN, {"source": "react-devtools"})
        channel.post(APP_ORIGIN, {"type": "onedrive-oauth-success"})

        result = await channel.receive()

        assert result.provider == "onedrive"

    def test_non_dict_payload_is_discarded(self) -> None:
        assert _channel().post(APP_ORIGIN, "onedrive-oauth-success") is False

    def test_discard_pending_empties_the_queue(self) -> None:
        channel = _channel()
        channel.post(APP_ORIGIN, {"type": "onedrive-oauth-success"})
        channel.post(APP_ORIGIN, {"type": "onedrive-oauth-error"})

        assert channel.discard_pending() == 2
        assert channel.discard_pending() == 0


class TestPopupRegistry:
    def test_second_acquire_refocuses_open_popup(self) -> None:
        registry = PopupRegistry()
        popup = FakePopup()
        opened: list[FakePopup] = []

        def open_popup() -> FakePopup:
            opened.append(FakePopup())
            return opened[-1]

        first, reused_first = registry.acquire(lambda: popup)
        second, reused_second = registry.acquire(open_popup)

        assert first is popup and reused_first is False
        assert second is popup and reused_second is True
        assert popup.focus_calls == 1
        assert opened == []

    def test_closed_popup_frees_the_slot(self) -> None:
        registry = PopupRegistry()
        popup = FakePopup()
        registry.acquire(lambda: popup)
        popup.closed = True

        replacement = FakePopup()
        handle, reused = registry.acquire(lambda: replacement)

        assert handle is replacement
        assert reused is False

    def test_blocked_popup_raises(self) -> None:
        registry = PopupRegistry()

        with pytest.raises(PopupBlockedError):
            registry.acquire(lambda: None)
        assert registry.active is None


class TestOAuthPopupFlow:
    @pytest.mark.asyncio
    async def test_completes_on_success_and_releases_slot(self) -> None:
        registry = PopupRegistry()
        channel = _channel()
        flow = OAuthPopupFlow(registry, channel, sleep=_instant_sleep)
        popup = FakePopup()

        task = asyncio.ensure_future(flow.run(lambda: popup))
        await asyncio.sleep(0)
        channel.post(APP_ORIGIN, {"type": "onedrive-oauth-success", "email": "a@b.com"})
        result = await task

        assert result is not None
        assert result.email == "a@b.com"
        assert registry.active is None

    @pytest.mark.asyncio
    async def test_concurrent_attempt_refocuses_and_returns_none(self) -> None:
        registry = PopupRegistry()
        channel = _channel()
        flow = OAuthPopupFlow(registry, channel, sleep=_instant_sleep)
        popup = FakePopup()

        first = asyncio.ensure_future(flow.run(lambda: popup))
        await asyncio.sleep(0)
        second = await flow.run(FakePopup)

        assert second is None
        assert popup.focus_calls == 1

        channel.post(APP_ORIGIN, {"type": "onedrive-oauth-success"})
        assert (await first) is not None

    @pytest.mark.asyncio
    async def test_popup_closed_without_result_raises_and_releases(self) -> None:
        registry = PopupRegistry()
        flow = OAuthPopupFlow(registry, _channel(), sleep=_instant_sleep)
        popup = FakePopup()

        task = asyncio.ensure_future(flow.run(lambda: popup))
        await asyncio.sleep(0)
        popup.closed = True

        with pytest.raises(OAuthFlowError, match="closed"):
            await task
        assert registry.active is None

    @pytest.mark.asyncio
    async def test_error_message_releases_slot(self) -> None:
        registry = PopupRegistry()
        channel = _channel()
        flow = OAuthPopupFlow(registry, channel, sleep=_instant_sleep)
        popup = FakePopup()

        task = asyncio.ensure_future(flow.run(lambda: popup))
        await asyncio.sleep(0)
        channel.post(APP_ORIGIN, {"type": "onedrive-oauth-error", "error": "denied"})

        with pytest.raises(OAuthFlowError):
            await task
        assert registry._active is None

    @pytest.mark.asyncio
    async def test_timeout_raises(self) -> None:
        registry = PopupRegistry()
        flow = OAuthPopupFlow(
            registry, _channel(), timeout_seconds=0.01, closed_check_seconds=0.001
        )

        with pytest.raises(OAuthFlowError, match="timed out"):
            await flow.run(FakePopup)
        assert registry._active is None

    @pytest.mark.asyncio
    async def test_blocked_popup_raises(self) -> None:
        flow = OAuthPopupFlow(PopupRegistry(), _channel(), sleep=_instant_sleep)

        with pytest.raises(PopupBlockedError):
            await flow.run(lambda: None)

    @pytest.mark.asyncio
    async def test_late_message_from_previous_flow_does_not_complete_next_flow(self) -> None:
        registry = PopupRegistry()
        channel = _channel()
        timed_flow = OAuthPopupFlow(
            registry, channel, timeout_seconds=0.01, closed_check_seconds=0.001
        )
        with pytest.raises(OAuthFlowError, match="timed out"):
            await timed_flow.run(FakePopup)

        channel.post(APP_ORIGIN, {"type": "onedrive-oauth-success", "email": "old@b.com"})

        flow = OAuthPopupFlow(registry, channel, sleep=_instant_sleep)
        task = asyncio.ensure_future(flow.run(FakePopup))
        for _ in range(5):
            await asyncio.sleep(0)
        assert not task.done()

        channel.post(APP_ORIGIN, {"type": "onedrive-oauth-success", "email": "new@b.com"})
        result = await task

        assert result is not None
        assert result.email == "new@b.com"
