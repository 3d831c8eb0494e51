import hashlib
import hmac

from app.auth.base import BaseIdentityProvider
from app.auth.models import AuthenticatedUser


class DisabledIdentityProvider(BaseIdentityProvider):
    """Treats every caller as signed in. For local development."""

    ANONYMOUS = AuthenticatedUser(user_id="anonymous")

    def verify(self, token: str | None) -> AuthenticatedUser | None:
        _ = token
        return self.ANONYMOUS


class StaticTokenIdentityProvider(BaseIdentityProvider):
    """Accepts bearer tokens from a fixed, configured list."""

    def __init__(self, tokens: list[str]) -> None:
        if not tokens:
            raise ValueError("auth_tokens is required for auth_provider=static")
        self._tokens = [t.encode() for t in tokens]

    def verify(self, token: str | None) -> AuthenticatedUser | None:
        if not token:
            return None
        candidate = token.encode()
        for known in self._tokens:
            if hmac.compare_digest(candidate, known):
                digest = hashlib.sha256(known).hexdigest()[:12]
                return AuthenticatedUser(user_id=f"token-{digest}")
        return None
