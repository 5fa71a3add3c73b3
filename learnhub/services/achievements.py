"""Achievement side effects.

Workflows emit an ``AchievementEvent``; the ``AchievementPublisher`` hands
it to a sink on a separate asyncio task.  Whatever the sink does (raise,
hang, succeed) the emitting workflow has already returned.  Failures are
logged and counted, never re-raised.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

from learnhub.core.metrics import ACHIEVEMENTS
from learnhub.models.achievement import Achievement, AchievementEvent, AchievementType
from learnhub.services.background import BackgroundRunner
from learnhub.services.task_queue import TaskQueue

logger = logging.getLogger(__name__)

ACHIEVEMENT_QUEUE = "achievements"


@runtime_checkable
class AchievementSink(Protocol):
    async def record(self, user_id: str, achievement_type: AchievementType) -> None: ...


class InMemoryAchievementSink:
    """Unlocks each (user, type) once; repeated records are ignored."""

    def __init__(self) -> None:
        self._unlocked: dict[tuple[str, str], Achievement] = {}

    async def record(self, user_id: str, achievement_type: AchievementType) -> None:
        key = (user_id, achievement_type)
        if key in self._unlocked:
            return
        self._unlocked[key] = Achievement.unlock(
            user_id=user_id,
            type=achievement_type,
            unlocked_at=datetime.now(UTC).isoformat(),
        )
        logger.info("Achievement %s unlocked for user=%s", achievement_type, user_id)

    def for_user(self, user_id: str) -> list[Achievement]:
        return [a for (uid, _), a in self._unlocked.items() if uid == user_id]

    def total_points(self, user_id: str) -> int:
        return sum(a.points for a in self.for_user(user_id))


class QueueAchievementSink:
    """Defers recording to the worker process via the task queue."""

    def __init__(self, queue: TaskQueue) -> None:
        self._queue = queue

    async def record(self, user_id: str, achievement_type: AchievementType) -> None:
        await self._queue.enqueue(
            ACHIEVEMENT_QUEUE, {"user_id": user_id, "type": achievement_type}
        )


class AchievementPublisher:
    def __init__(
        self, sink: AchievementSink, runner: BackgroundRunner | None = None
    ) -> None:
        self._sink = sink
        self._runner = runner or BackgroundRunner()

    def emit(self, event: AchievementEvent) -> None:
        """Schedule delivery of ``event``; returns immediately.

        Must be called from inside a running event loop.
        """
        self._runner.spawn(self._deliver(event))

    async def _deliver(self, event: AchievementEvent) -> None:
        try:
            await self._sink.record(event.user_id, event.type)
        except Exception:
            ACHIEVEMENTS.labels(type=event.type, outcome="failed").inc()
            logger.exception(
                "Achievement %s for user=%s failed",
                event.type,
                event.user_id,
                extra={"user_id": event.user_id, "operation": "achievement"},
            )
            return
        ACHIEVEMENTS.labels(type=event.type, outcome="recorded").inc()

    async def drain(self) -> None:
        """Wait for every in-flight delivery to finish."""
        await self._runner.drain()
