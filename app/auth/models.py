from dataclasses import dataclass


@dataclass(frozen=True)
class AuthenticatedUser:
    """The signed-in caller as reported by the identity provider."""

    user_id: str
    email: str | None = None
