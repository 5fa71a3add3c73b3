from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

AchievementType = Literal[
    "first_enrollment",
    "first_lesson",
    "course_completion",
    "certificate_earned",
]

ACHIEVEMENT_POINTS: dict[str, int] = {
    "first_enrollment": 50,
    "first_lesson": 10,
    "course_completion": 100,
    "certificate_earned": 200,
}


@dataclass(frozen=True, slots=True)
class AchievementEvent:
    """Emitted by a workflow; consumed by an AchievementSink."""

    user_id: str
    type: AchievementType


@dataclass(frozen=True, slots=True)
class Achievement:
    user_id: str
    type: AchievementType
    points: int
    unlocked_at: str

    @staticmethod
    def unlock(*, user_id: str, type: AchievementType, unlocked_at: str) -> Achievement:
        return Achievement(
            user_id=user_id,
            type=type,
            points=ACHIEVEMENT_POINTS[type],
            unlocked_at=unlocked_at,
        )
