from dataclasses import dataclass
from typing import Any

import structlog

from src.application.interfaces.job_checker import JobChecker
from src.application.services.job_poller import AsyncJobPoller

logger = structlog.get_logger(__name__)


@dataclass
class FindCorrelationsOutput:
    asin: str
    correlations: list[Any] | None
    from_cache: bool


class FindCorrelations:
    """
    Use case: Get ASIN correlations, running the server-side search only when
    nothing is stored yet.

    The poller is owned by the caller so it can be cancelled when the user
    navigates away or picks another product.
    """

    def __init__(self, checker: JobChecker, poller: AsyncJobPoller) -> None:
        self._checker = checker
        self._poller = poller

    async def execute(self, asin: str) -> FindCorrelationsOutput:
        existing = await self._checker.check(asin)
        if existing.found:
            logger.info("correlations_found_in_cache", asin=asin)
            return FindCorrelationsOutput(asin=asin, correlations=existing.payload, from_cache=True)

        await self._checker.start(asin)
        logger.info("correlation_sync_started", asin=asin)

        # Raises PollTimeoutError; returns None if the poll was cancelled
        correlations = await self._poller.run(asin)
        return FindCorrelationsOutput(asin=asin, correlations=correlations, from_cache=False)
