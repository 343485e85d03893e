from abc import ABC, abstractmethod


class AuthenticationError(Exception):
    """The bearer token is missing, expired or unknown."""


class IdentityResolver(ABC):
    """Port for turning a bearer token into a user id."""

    @abstractmethod
    async def resolve_user_id(self, token: str) -> str:
        """Raises AuthenticationError for tokens that do not identify a user."""
        ...
