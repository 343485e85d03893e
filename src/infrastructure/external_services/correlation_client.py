"""HTTP client for the ASIN correlation job function."""
import httpx
import structlog

from src.application.interfaces.job_checker import JobChecker, JobCheckResult
from src.config import settings

logger = structlog.get_logger(__name__)


class CorrelationClientError(Exception):
    pass


class CorrelationJobClient(JobChecker):
    """
    Both actions go to the same endpoint:
    {"asin": ..., "action": "check"} → {"exists": bool, "correlations": [...]}
    {"asin": ..., "action": "sync"}  → starts the search in the background
    """

    def __init__(
        self,
        auth_token: str,
        base_url: str = settings.functions_base_url,
        timeout: float = settings.http_timeout_seconds,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = f"{base_url.rstrip('/')}/trigger-asin-correlation-v2"
        self._headers = {
            "Authorization": f"Bearer {auth_token}",
            "Content-Type": "application/json",
        }
        self._timeout = timeout
        self._transport = transport

    async def _post(self, asin: str, action: str) -> dict:  # type: ignore[type-arg]
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    self._url,
                    json={"asin": asin, "action": action},
                    headers=self._headers,
                )
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "correlation_request_failed",
                    asin=asin,
                    action=action,
                    status_code=exc.response.status_code,
                )
                raise CorrelationClientError(
                    f"Correlation service returned {exc.response.status_code}: {exc.response.text}"
                ) from exc
            except httpx.RequestError as exc:
                raise CorrelationClientError(f"Failed to reach correlation service: {exc}") from exc
            except ValueError as exc:
                raise CorrelationClientError("Correlation service returned invalid JSON") from exc
        return data if isinstance(data, dict) else {}

    async def check(self, target_key: str) -> JobCheckResult:
        data = await self._post(target_key, "check")
        correlations = data.get("correlations") or []
        found = bool(data.get("exists")) and len(correlations) > 0
        logger.debug("correlation_check", asin=target_key, found=found)
        return JobCheckResult(found=found, payload=correlations if found else None)

    async def start(self, target_key: str) -> None:
        await self._post(target_key, "sync")
        logger.info("correlation_sync_requested", asin=target_key)
