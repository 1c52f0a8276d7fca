"""A handle for a background task that runs at most once at a time."""

from __future__ import annotations

import asyncio
import enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class TaskStatus(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


class TaskHandle(Generic[T]):
    """Tracks one background task and the result it hands back.

    ``try_start`` returns a future that the task resolves with its result.
    Cancelling that future, or failing it with an exception, means the task
    ended without a result and the handle returns to idle.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._status = TaskStatus.IDLE
        self._receiver: asyncio.Future[T] | None = None
        self._result: Any = None

    def _set_idle(self) -> None:
        self._status = TaskStatus.IDLE
        self._receiver = None
        self._result = None

    def _set_completed(self, result: T) -> None:
        self._status = TaskStatus.COMPLETED
        self._receiver = None
        self._result = result

    def _try_complete(self) -> None:
        receiver = self._receiver
        if self._status is not TaskStatus.RUNNING or receiver is None:
            return
        if not receiver.done():
            return
        if receiver.cancelled() or receiver.exception() is not None:
            self._set_idle()
        else:
            self._set_completed(receiver.result())

    async def status(self) -> TaskStatus:
        """Current status, noticing a task that has finished."""
        async with self._lock:
            self._try_complete()
            return self._status

    async def try_start(self) -> asyncio.Future[T] | None:
        """Mark a task as running and return its result future, or None if one runs."""
        async with self._lock:
            self._try_complete()
            if self._status is TaskStatus.RUNNING:
                return None
            receiver: asyncio.Future[T] = asyncio.get_running_loop().create_future()
            self._status = TaskStatus.RUNNING
            self._receiver = receiver
            self._result = None
            return receiver

    async def take_result(self) -> T | None:
        """Take a completed result and return to idle; None otherwise."""
        async with self._lock:
            self._try_complete()
            if self._status is not TaskStatus.COMPLETED:
                return None
            result = self._result
            self._set_idle()
            return result

    async def wait(self) -> T | None:
        """Wait for the running task; None if idle or it ended without a result."""
        async with self._lock:
            if self._status is TaskStatus.COMPLETED:
                result = self._result
                self._set_idle()
                return result
            receiver = self._receiver
            self._set_idle()
            if receiver is None:
                return None

        await asyncio.wait({receiver})
        if receiver.cancelled() or receiver.exception() is not None:
            return None

        async with self._lock:
            self._set_completed(receiver.result())
        return await self.take_result()

    async def reset(self) -> None:
        """Return to idle, forgetting any running task."""
        async with self._lock:
            self._set_idle()