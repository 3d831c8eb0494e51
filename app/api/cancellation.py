import threading
from collections.abc import Callable
from typing import Protocol, TypeVar

import anyio
from fastapi.concurrency import run_in_threadpool

from app.logging.logger import Log

T = TypeVar("T")

WATCH_INTERVAL_SECONDS = 0.1


class DisconnectAware(Protocol):
    async def is_disconnected(self) -> bool: ...


async def run_cancellable(
    request: DisconnectAware,
    shutdown_event: threading.Event,
    func: Callable[[threading.Event], T],
) -> T:
    """Run a blocking call in the threadpool with its own cancel event.

    The event is set when the client disconnects or the server starts shutting
    down, so a call waiting on it can stop early.
    """
    cancel_event = threading.Event()

    async def watch() -> None:
        while not cancel_event.is_set():
            if shutdown_event.is_set():
                Log.warning("Server shutting down, cancelling in-flight analysis")
                cancel_event.set()
                return
            if await request.is_disconnected():
                Log.warning("Client disconnected, cancelling in-flight analysis")
                cancel_event.set()
                return
            await anyio.sleep(WATCH_INTERVAL_SECONDS)

    # errors are re-raised outside the task group so they are not wrapped
    # in an ExceptionGroup
    error: Exception | None = None
    async with anyio.create_task_group() as tg:
        tg.start_soon(watch)
        try:
            result = await run_in_threadpool(func, cancel_event)
        except Exception as exc:
            error = exc
        tg.cancel_scope.cancel()
    if error is not None:
        raise error
    return result
