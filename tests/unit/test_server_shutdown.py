"""Shutdown behaviour of the real uvicorn server with a slow analysis in flight."""

import threading
import time
from collections.abc import Callable

import httpx
import uvicorn

from app.config.settings import Settings
from app.main import AnalysisServer, create_app


def _wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        assert time.monotonic() < deadline, "timed out"
        time.sleep(0.05)


class TestAnalysisServerShutdown:
    def test_shutdown_cancels_analysis_waiting_between_polls(self) -> None:
        app = create_app(Settings(analysis_provider="example", analysis_poll_interval_ms=4000))
        config = uvicorn.Config(app, host="127.0.0.1", port=0, lifespan="off", log_level="warning")
        server = AnalysisServer(config, app.state.shutdown_event)
        server_thread = threading.Thread(target=server.run, daemon=True)
        server_thread.start()
        _wait_until(lambda: server.started)
        port = server.servers[0].sockets[0].getsockname()[1]

        result: dict[str, object] = {}

        def post() -> None:
            started = time.monotonic()
            response = httpx.post(
                f"http://127.0.0.1:{port}/api/analyze",
                files={"file": ("scan.png", b"png-bytes", "image/png")},
                timeout=10,
            )
            result["elapsed"] = time.monotonic() - started
            result["status"] = response.status_code
            result["body"] = response.json()

        client_thread = threading.Thread(target=post)
        client_thread.start()
        time.sleep(0.5)
        server.should_exit = True
        client_thread.join(timeout=10)
        server_thread.join(timeout=10)

        assert result["status"] == 503
        assert result["body"]["error"] == "cancelled"  # type: ignore[index]
        assert result["elapsed"] < 3  # type: ignore[operator]
        assert not server_thread.is_alive()
