from __future__ import annotations

import asyncio

import pytest

from learnhub import worker
from learnhub.services.achievements import ACHIEVEMENT_QUEUE, InMemoryAchievementSink
from learnhub.services.task_queue import InMemoryTaskQueue


@pytest.fixture
def sink(monkeypatch: pytest.MonkeyPatch) -> InMemoryAchievementSink:
    fresh = InMemoryAchievementSink()
    monkeypatch.setattr(worker, "achievement_sink", fresh)
    return fresh


def test_achievement_handler_is_registered() -> None:
    assert ACHIEVEMENT_QUEUE in worker.HANDLERS


def test_process_one_records_achievement(sink: InMemoryAchievementSink) -> None:
    async def run():
        queue = InMemoryTaskQueue()
        await queue.enqueue(
            ACHIEVEMENT_QUEUE, {"user_id": "u1", "type": "first_lesson"}
        )
        handled = await worker.process_one(queue, ACHIEVEMENT_QUEUE)
        empty = await worker.process_one(queue, ACHIEVEMENT_QUEUE)
        return handled, empty

    assert asyncio.run(run()) == (True, False)
    assert sink.total_points("u1") == 10


def test_malformed_task_is_logged_not_raised(
    sink: InMemoryAchievementSink, caplog: pytest.LogCaptureFixture
) -> None:
    async def run():
        queue = InMemoryTaskQueue()
        await queue.enqueue(ACHIEVEMENT_QUEUE, {"user_id": "u1", "type": "bogus"})
        return await worker.process_one(queue, ACHIEVEMENT_QUEUE)

    assert asyncio.run(run()) is True
    assert sink.for_user("u1") == []
    assert "failed" in caplog.text
