from __future__ import annotations

import logging
from dataclasses import replace
from datetime import UTC, datetime

from learnhub.core.metrics import PROGRESS_UPDATES
from learnhub.models.achievement import AchievementEvent
from learnhub.models.enrollment import Enrollment
from learnhub.repos.enrollment_repo import EnrollmentRepo
from learnhub.services.achievements import AchievementPublisher
from learnhub.services.guard import KeyedGuard
from learnhub.services.normalizer import normalize_enrollment
from learnhub.services.state import EngineState

logger = logging.getLogger(__name__)


def compute_progress(completed: int, total_lessons: int) -> int:
    """Percent of lessons completed, rounded, clamped to 0..100.

    A course with no lessons reports 0 rather than dividing by zero.
    """
    if total_lessons <= 0:
        return 0
    return max(0, min(100, round(completed / total_lessons * 100)))


class ProgressTracker:
    """Records lesson completion for an enrollment.

    Called from background UI interactions, so it never raises on a
    persistence failure: it logs and returns None instead.  Updates for one
    (user, course) run one at a time and read the enrollment under the
    guard, so overlapping lesson completions each see the previous write.
    """

    def __init__(
        self,
        state: EngineState,
        enrollments: EnrollmentRepo,
        achievements: AchievementPublisher,
        guard: KeyedGuard | None = None,
    ) -> None:
        self._state = state
        self._enrollments = enrollments
        self._achievements = achievements
        self._guard = guard or KeyedGuard()

    async def update_progress(
        self, course_id: str, user_id: str, lesson_id: str
    ) -> Enrollment | None:
        async with self._guard.hold((user_id, course_id)):
            return await self._update(course_id, user_id, lesson_id)

    async def _update(
        self, course_id: str, user_id: str, lesson_id: str
    ) -> Enrollment | None:
        ctx = {"user_id": user_id, "course_id": course_id, "operation": "progress"}

        enrollment = self._state.find_enrollment(course_id, user_id)
        course = self._state.get_course(course_id)
        if enrollment is None or course is None:
            PROGRESS_UPDATES.labels(outcome="skipped").inc()
            logger.debug("Progress update skipped: no enrollment or course", extra=ctx)
            return None

        if enrollment.has_completed(lesson_id):
            PROGRESS_UPDATES.labels(outcome="unchanged").inc()
            return enrollment

        completed = (*enrollment.completed_lessons, lesson_id)
        # Never regress, even if total_lessons grew since the last update.
        progress = max(
            enrollment.progress, compute_progress(len(completed), course.total_lessons)
        )

        try:
            raw = await self._enrollments.update_progress(
                enrollment.id, progress, list(completed)
            )
            stored = normalize_enrollment(raw)
        except Exception:
            PROGRESS_UPDATES.labels(outcome="persistence_failed").inc()
            logger.exception(
                "Progress for lesson %s could not be persisted",
                lesson_id,
                extra={**ctx, "enrollment_id": enrollment.id},
            )
            return None

        updated = replace(
            enrollment,
            progress=stored.progress,
            completed_lessons=stored.completed_lessons,
            last_accessed_at=datetime.now(UTC).isoformat(),
        )
        self._state.put_enrollment(updated)
        PROGRESS_UPDATES.labels(outcome="recorded").inc()
        logger.info(
            "Lesson %s completed: %d/%d lessons, progress=%d%%",
            lesson_id,
            len(updated.completed_lessons),
            course.total_lessons,
            updated.progress,
            extra={**ctx, "enrollment_id": enrollment.id},
        )

        if len(updated.completed_lessons) == 1:
            self._achievements.emit(AchievementEvent(user_id, "first_lesson"))
        if updated.progress == 100 and enrollment.progress < 100:
            self._achievements.emit(AchievementEvent(user_id, "course_completion"))

        return updated
