from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Enrollment:
    """A learner's paid access to one course and their progress through it.

    ``completed_lessons`` keeps insertion order for persistence but is
    treated as a set: a lesson id appears at most once.
    """

    id: str
    user_id: str
    course_id: str
    progress: int = 0  # 0..100
    completed_lessons: tuple[str, ...] = ()
    enrolled_at: str | None = None
    last_accessed_at: str | None = None
    certificate_issued: bool = False
    certificate_id: str | None = None
    payment_id: str | None = None
    amount_paid: float = 0
    total_time_spent: int = 0

    @property
    def key(self) -> tuple[str, str]:
        return (self.user_id, self.course_id)

    def has_completed(self, lesson_id: str) -> bool:
        return lesson_id in self.completed_lessons
