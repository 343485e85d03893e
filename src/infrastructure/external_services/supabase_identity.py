"""Resolves Supabase access tokens to user ids."""
import httpx
import structlog

from src.application.interfaces.identity import AuthenticationError, IdentityResolver
from src.config import settings

logger = structlog.get_logger(__name__)


class SupabaseIdentityResolver(IdentityResolver):
    """GET {supabase_url}/auth/v1/user with the caller's bearer token."""

    def __init__(
        self,
        supabase_url: str = settings.supabase_url,
        anon_key: str = settings.supabase_anon_key,
        timeout: float = settings.http_timeout_seconds,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = f"{supabase_url.rstrip('/')}/auth/v1/user"
        self._anon_key = anon_key
        self._timeout = timeout
        self._transport = transport

    async def resolve_user_id(self, token: str) -> str:
        if not token:
            raise AuthenticationError("Missing bearer token")

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.get(
                    self._url,
                    headers={"Authorization": f"Bearer {token}", "apikey": self._anon_key},
                )
            except httpx.RequestError as exc:
                logger.error("identity_provider_unreachable", error=str(exc))
                raise AuthenticationError("Could not verify token") from exc

        if response.status_code != 200:
            logger.info("token_rejected", status_code=response.status_code)
            raise AuthenticationError("Invalid or expired token")

        try:
            user_id = response.json().get("id")
        except (ValueError, AttributeError) as exc:
            raise AuthenticationError("Invalid identity response") from exc
        if not user_id:
            raise AuthenticationError("Invalid identity response")
        return str(user_id)
