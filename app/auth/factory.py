from app.auth.base import BaseIdentityProvider
from app.auth.providers import DisabledIdentityProvider, StaticTokenIdentityProvider
from app.config.settings import Settings


class IdentityProviderFactory:
    """Creates the configured identity provider."""

    @classmethod
    def create(cls, settings: Settings) -> BaseIdentityProvider:
        provider = settings.auth_provider.lower()
        if provider == "disabled":
            return DisabledIdentityProvider()
        if provider == "static":
            return StaticTokenIdentityProvider(settings.auth_tokens)
        raise ValueError(
            f"Unknown auth provider '{provider}'. Choose from: ['disabled', 'static']"
        )
