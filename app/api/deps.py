import threading
from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Header, Request

from app.analysis.base import BaseAnalysisClient
from app.analysis.factory import AnalysisClientFactory
from app.api.errors import ApiError
from app.auth.base import BaseIdentityProvider
from app.auth.models import AuthenticatedUser
from app.config.settings import Settings
from app.database.repositories.saved_records_repository import SavedRecordsRepository


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_shutdown_event(request: Request) -> threading.Event:
    return request.app.state.shutdown_event


def get_identity_provider(request: Request) -> BaseIdentityProvider:
    return request.app.state.identity_provider


def get_analysis_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Generator[BaseAnalysisClient, None, None]:
    """One client per request; each analysis owns its own job state."""
    client = AnalysisClientFactory.create(settings)
    try:
        yield client
    finally:
        client.close()


def get_records_repository() -> SavedRecordsRepository:
    return SavedRecordsRepository()


def require_user(
    provider: Annotated[BaseIdentityProvider, Depends(get_identity_provider)],
    authorization: Annotated[str | None, Header()] = None,
) -> AuthenticatedUser:
    """Reject the request unless the identity provider recognizes the caller."""
    token = None
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer":
            token = credentials.strip()
    user = provider.verify(token)
    if user is None:
        raise ApiError(401, "Not authenticated")
    return user
