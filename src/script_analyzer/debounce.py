"""Delay-and-coalesce wrapper for asyncio code."""

import asyncio
import inspect
from typing import Any, Callable


class Debouncer:
    """Run ``fn`` once after ``delay_ms`` of quiet.

    Each call restarts the timer with its own arguments, so a burst of calls
    results in a single invocation with the arguments of the last one. ``fn``
    may be reassigned at any time; the function current when the timer fires
    is the one that runs. Coroutine results are scheduled as tasks and kept
    until they finish. ``cancel()`` only drops the pending call; work that has
    already started is left alone.
    """

    def __init__(self, fn: Callable[..., Any], delay_ms: float):
        self.fn = fn
        self.delay_ms = delay_ms
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()

    def __call__(self, *args, **kwargs) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay_ms / 1000, self._fire, args, kwargs)

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, args: tuple, kwargs: dict) -> None:
        self._handle = None
        result = self.fn(*args, **kwargs)
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)


def debounce(fn: Callable[..., Any], delay_ms: float) -> Debouncer:
    return Debouncer(fn, delay_ms)
