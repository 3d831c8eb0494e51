from abc import ABC, abstractmethod

from app.auth.models import AuthenticatedUser


class BaseIdentityProvider(ABC):
    """Contract for identity provider adapters.

    The service only needs a yes/no answer: is this bearer token a signed-in user.
    """

    @abstractmethod
    def verify(self, token: str | None) -> AuthenticatedUser | None:
        """Return the user behind the token, or None if not signed in."""
