import socket
import threading
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from app.api.analyze import router as analyze_router
from app.api.errors import register_exception_handlers
from app.api.records import router as records_router
from app.auth.factory import IdentityProviderFactory
from app.config.settings import Settings
from app.database.connection import close_pool, init_pool
from app.logging.logger import Log


class AnalysisServer(uvicorn.Server):
    """uvicorn server that cancels waiting analyses as soon as shutdown begins.

    uvicorn drains in-flight requests before the lifespan shutdown runs, so the
    shutdown event is set here, ahead of the drain.
    """

    def __init__(self, config: uvicorn.Config, shutdown_event: threading.Event) -> None:
        super().__init__(config)
        self._shutdown_event = shutdown_event

    async def shutdown(self, sockets: list[socket.socket] | None = None) -> None:
        Log.info("Shutdown requested, cancelling in-flight analyses")
        self._shutdown_event.set()
        await super().shutdown(sockets=sockets)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API: analysis routes, record routes, health check."""
    settings = settings if settings is not None else Settings()
    shutdown_event = threading.Event()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        init_pool(settings)
        try:
            yield
        finally:
            shutdown_event.set()
            close_pool()
            Log.info("Service stopped")

    app = FastAPI(title="Document analysis service", lifespan=lifespan)
    app.state.settings = settings
    app.state.shutdown_event = shutdown_event
    app.state.identity_provider = IdentityProviderFactory.create(settings)

    register_exception_handlers(app)
    app.include_router(analyze_router)
    app.include_router(records_router)

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


def main() -> None:
    """Entry point: load settings -> configure logging -> serve the API."""
    settings = Settings()
    Log.configure(settings.log_level)
    Log.info(f"Starting service ({settings.app_env}) on {settings.http_host}:{settings.http_port}")
    app = create_app(settings)
    config = uvicorn.Config(app, host=settings.http_host, port=settings.http_port)
    AnalysisServer(config, app.state.shutdown_event).run()


if __name__ == "__main__":
    main()
