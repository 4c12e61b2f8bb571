import asyncio
import threading
from typing import Any, Awaitable, Callable

_loop: asyncio.AbstractEventLoop | None = None
_loop_thread: threading.Thread | None = None
_lock = threading.Lock()


def _ensure_loop() -> asyncio.AbstractEventLoop:
    global _loop, _loop_thread
    with _lock:
        if _loop and not _loop.is_closed():
            return _loop

        loop = asyncio.new_event_loop()

        def _run_loop():
            asyncio.set_event_loop(loop)
            loop.run_forever()

        _loop = loop
        _loop_thread = threading.Thread(
            target=_run_loop, name="esodm-loop", daemon=True
        )
        _loop_thread.start()
        return loop


def run_sync(afunc: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
    """Run a coroutine function to completion from synchronous code.

    The coroutine runs on a dedicated background loop so that resources
    bound to that loop, such as pooled HTTP clients, are reused across
    calls.
    """
    loop = _ensure_loop()
    future = asyncio.run_coroutine_threadsafe(afunc(*args, **kwargs), loop)
    return future.result()
