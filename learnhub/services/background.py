from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any


class BackgroundRunner:
    """Fire-and-forget task holder.

    Keeps a strong reference to each spawned task until it finishes (the
    event loop only holds weak ones) and lets callers wait for all of them.
    Coroutines passed to ``spawn`` must handle their own exceptions.
    """

    def __init__(self) -> None:
        self._pending: set[asyncio.Task[Any]] = set()

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
