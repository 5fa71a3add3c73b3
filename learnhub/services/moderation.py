"""Course moderation: draft -> pending_approval -> published | rejected.

Local state only; no moderation store is wired in yet.

``publish_course`` submits a course for review.  It clears is_published
as well as is_draft and is_approved: the course stays hidden until an
admin approves it.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from learnhub.models.course import Course
from learnhub.services.state import EngineState

logger = logging.getLogger(__name__)


class ModerationStateMachine:
    def __init__(self, state: EngineState) -> None:
        self._state = state

    def publish_course(self, course_id: str) -> Course | None:
        return self._transition(
            course_id,
            "publish",
            is_published=False,
            is_draft=False,
            is_approved=False,
            rejection_reason=None,
        )

    def approve_course(self, course_id: str) -> Course | None:
        return self._transition(
            course_id,
            "approve",
            is_approved=True,
            is_published=True,
            is_draft=False,
            rejection_reason=None,
        )

    def reject_course(self, course_id: str, reason: str) -> Course | None:
        return self._transition(
            course_id,
            "reject",
            is_approved=False,
            is_published=False,
            is_draft=False,
            rejection_reason=reason,
        )

    def _transition(self, course_id: str, action: str, **flags) -> Course | None:
        updated = self._state.update_course(course_id, lambda c: replace(c, **flags))
        if updated is None:
            logger.warning(
                "Moderation %s ignored: unknown course",
                action,
                extra={"course_id": course_id, "operation": "moderation"},
            )
            return None
        logger.info(
            "Course %s -> %s",
            course_id,
            updated.moderation_state,
            extra={"course_id": course_id, "operation": "moderation"},
        )
        return updated
