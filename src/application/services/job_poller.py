"""
Polls a long-running server job until it has a result.

Two tick rates: a fine wall-clock tick drives the elapsed-time display, and a
coarser interval gates the actual remote check so the backend is not hit on
every tick. The poll ends on the first result, on timeout, or on cancel().
The timeout is hard: a check still in flight at the deadline is abandoned.
"""
import asyncio
import math
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import structlog

from src.application.interfaces.job_checker import JobChecker, JobCheckResult
from src.config import settings
from src.domain.enums.poll_status import PollStatus
from src.domain.exceptions import PollTimeoutError
from src.domain.state_machine.poll_state_machine import PollStateMachine

logger = structlog.get_logger(__name__)

_state_machine = PollStateMachine()

TickCallback = Callable[[str], None]
Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[Any]]


def format_elapsed(seconds: int) -> str:
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}m {secs}s" if minutes > 0 else f"{secs}s"


@dataclass
class PollState:
    target_key: str
    started_at: float
    max_seconds: int
    elapsed_seconds: int = 0
    last_checked_at: float | None = None
    checks: int = 0
    status: PollStatus = PollStatus.IDLE


class AsyncJobPoller:
    """
    Single-target job poller.

    start() begins polling (cancelling any poll in flight), wait() returns the
    result payload, raises PollTimeoutError, or returns None if cancelled.
    """

    def __init__(
        self,
        checker: JobChecker,
        *,
        tick_seconds: float = settings.poll_tick_seconds,
        check_interval_seconds: int = settings.poll_check_interval_seconds,
        max_seconds: int = settings.poll_max_seconds,
        progress_label: str = "Finding correlations...",
        on_tick: TickCallback | None = None,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._checker = checker
        self._tick_seconds = tick_seconds
        self._check_interval = check_interval_seconds
        self._max_seconds = max_seconds
        self._progress_label = progress_label
        self._on_tick = on_tick
        self._clock = clock
        self._sleep = sleep

        self._state: PollState | None = None
        self._task: asyncio.Task[Any] | None = None

    @property
    def status(self) -> PollStatus:
        return self._state.status if self._state is not None else PollStatus.IDLE

    @property
    def state(self) -> PollState | None:
        return self._state

    def _transition(self, to_status: PollStatus) -> None:
        _state_machine.validate_transition(self.status, to_status)
        if self._state is not None:
            self._state.status = to_status

    def start(self, target_key: str) -> asyncio.Task[Any]:
        """Start polling for target_key. Must be called from a running event loop."""
        self.cancel()
        state = PollState(
            target_key=target_key,
            started_at=self._clock(),
            max_seconds=self._max_seconds,
        )
        _state_machine.validate_transition(state.status, PollStatus.POLLING)
        state.status = PollStatus.POLLING
        self._state = state
        logger.info("job_poll_started", target_key=target_key, max_seconds=self._max_seconds)
        self._task = asyncio.get_running_loop().create_task(self._run(state))
        return self._task

    def cancel(self) -> None:
        """Stop the poll in flight, if any. No tick fires after this returns."""
        if self.status is not PollStatus.POLLING:
            return
        self._transition(PollStatus.CANCELLED)
        if self._task is not None and not self._task.done():
            self._task.cancel()
        if self._state is not None:
            logger.info(
                "job_poll_cancelled",
                target_key=self._state.target_key,
                elapsed_seconds=self._state.elapsed_seconds,
            )

    async def wait(self) -> Any:
        if self._task is None:
            raise RuntimeError("wait() called before start()")
        try:
            return await self._task
        except asyncio.CancelledError:
            if self.status is PollStatus.CANCELLED:
                return None
            raise

    async def run(self, target_key: str) -> Any:
        self.start(target_key)
        return await self.wait()

    def _active(self, state: PollState) -> bool:
        return self._state is state and state.status is PollStatus.POLLING

    def _elapsed(self, state: PollState) -> float:
        return self._clock() - state.started_at

    def _timed_out(self, state: PollState) -> PollTimeoutError:
        self._transition(PollStatus.TIMED_OUT)
        logger.warning(
            "job_poll_timed_out",
            target_key=state.target_key,
            max_seconds=state.max_seconds,
            checks=state.checks,
        )
        return PollTimeoutError(state.target_key, state.max_seconds)

    async def _run(self, state: PollState) -> Any:
        last_check_elapsed = 0
        while True:
            await self._sleep(self._tick_seconds)
            if not self._active(state):
                return None

            elapsed = self._elapsed(state)
            state.elapsed_seconds = math.floor(elapsed)
            if self._on_tick is not None:
                self._on_tick(f"{self._progress_label} ({format_elapsed(state.elapsed_seconds)})")
                if not self._active(state):
                    return None

            # No check may start past the deadline.
            if elapsed > state.max_seconds:
                raise self._timed_out(state)

            if state.elapsed_seconds - last_check_elapsed >= self._check_interval:
                last_check_elapsed = state.elapsed_seconds
                result = await self._check(state, remaining=state.max_seconds - elapsed)
                if not self._active(state):
                    return None
                if result is not None and result.found:
                    self._transition(PollStatus.RESOLVED)
                    logger.info(
                        "job_poll_resolved",
                        target_key=state.target_key,
                        elapsed_seconds=state.elapsed_seconds,
                        checks=state.checks,
                    )
                    return result.payload
                elapsed = self._elapsed(state)

            if elapsed >= state.max_seconds:
                raise self._timed_out(state)

    async def _check(self, state: PollState, *, remaining: float) -> JobCheckResult | None:
        state.checks += 1
        state.last_checked_at = self._clock()
        check = asyncio.ensure_future(self._checker.check(state.target_key))
        try:
            done, _ = await asyncio.wait({check}, timeout=max(remaining, 0))
        finally:
            if not check.done():
                check.cancel()
        if check not in done:
            logger.warning("job_check_abandoned_at_deadline", target_key=state.target_key)
            return None
        try:
            return check.result()
        except Exception as exc:
            # A failed check is just a tick without a result; the timeout still bounds the poll.
            logger.warning("job_check_failed", target_key=state.target_key, error=str(exc))
            return None
