"""
Timer and task scheduling used by TranslationSession.

The session never touches the event loop directly; it asks a Scheduler for
delayed callbacks (debounce, copy feedback) and background tasks
(translations). Tests swap in a scheduler with a manual clock.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Callable, Coroutine, Optional, Set


class Scheduler(ABC):
    """Delayed callbacks and background coroutines on one event loop."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> Any:
        """
        Run `callback` after `delay` seconds.

        Returns:
            A handle with a `cancel()` method.
        """

    @abstractmethod
    def spawn(self, coro: Coroutine[Any, Any, Any]) -> 'asyncio.Future[Any]':
        """Start a coroutine in the background and return its task."""


class AsyncioScheduler(Scheduler):
    """Scheduler backed by the running asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        # Strong references so pending tasks are not garbage collected
        self._tasks: Set['asyncio.Task[Any]'] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> 'asyncio.Task[Any]':
        task = self.loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
