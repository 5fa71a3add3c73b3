"""Background worker process.

RUN:  python -m learnhub.worker

Drains the task queues the API process enqueues onto.  Achievements
land in PostgreSQL when DATABASE_URL is set, otherwise in an in-memory
sink that lives as long as the worker.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from learnhub.core.config import SETTINGS
from learnhub.core.logging import setup_logging
from learnhub.core.metrics import QUEUE_DEPTH
from learnhub.db.engine import async_session_factory
from learnhub.models.achievement import ACHIEVEMENT_POINTS
from learnhub.repos.pg_repos import PgAchievementSink
from learnhub.services.achievements import (
    ACHIEVEMENT_QUEUE,
    AchievementSink,
    InMemoryAchievementSink,
)
from learnhub.services.task_queue import TaskQueue, task_queue

TaskHandler = Callable[[dict], Coroutine[Any, Any, None]]

logger = logging.getLogger("learnhub.worker")


# ---------------------------------------------------------------------------
# Handler registry
# ---------------------------------------------------------------------------

HANDLERS: dict[str, TaskHandler] = {}


def register_handler(queue: str):
    """Decorator: register a coroutine as the handler for a queue."""

    def decorator(func):
        HANDLERS[queue] = func
        return func

    return decorator


def _default_sink() -> AchievementSink:
    if async_session_factory is not None:
        return PgAchievementSink(async_session_factory)
    return InMemoryAchievementSink()


achievement_sink: AchievementSink = _default_sink()


# ---------------------------------------------------------------------------
# Task handlers
# ---------------------------------------------------------------------------


@register_handler(ACHIEVEMENT_QUEUE)
async def handle_achievement(payload: dict) -> None:
    user_id = payload.get("user_id")
    achievement_type = payload.get("type")
    if not user_id or achievement_type not in ACHIEVEMENT_POINTS:
        raise ValueError(f"malformed achievement task: {payload!r}")

    await achievement_sink.record(user_id, achievement_type)
    logger.info(
        "Achievement %s recorded",
        achievement_type,
        extra={"user_id": user_id, "operation": "achievement"},
    )


# ---------------------------------------------------------------------------
# Main worker loop
# ---------------------------------------------------------------------------


async def process_one(queue: TaskQueue, queue_name: str, timeout: int = 1) -> bool:
    """Dequeue and handle one task.  Returns False when the queue was empty."""
    task = await queue.dequeue(queue_name, timeout=timeout)
    if task is None:
        return False

    handler = HANDLERS[queue_name]
    try:
        await handler(task.payload)
        logger.info("Task %s on [%s] completed", task.id, queue_name)
    except Exception:
        logger.exception("Task %s on [%s] failed", task.id, queue_name)
    QUEUE_DEPTH.labels(queue_name=queue_name).set(await queue.queue_length(queue_name))
    return True


async def run_worker() -> None:
    """Poll all registered queues and dispatch tasks to handlers."""
    queues = list(HANDLERS.keys())
    logger.info("Worker started, listening on queues: %s", queues)

    while True:
        for queue_name in queues:
            await process_one(task_queue, queue_name)


if __name__ == "__main__":
    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    asyncio.run(run_worker())
