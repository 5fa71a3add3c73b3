from __future__ import annotations

import logging

from learnhub.models.cart import CartItem
from learnhub.models.course import Course
from learnhub.services.state import EngineState

logger = logging.getLogger(__name__)


class CartManager:
    """Cart with set semantics keyed by course id.  Local state only."""

    def __init__(self, state: EngineState) -> None:
        self._state = state

    def add_to_cart(self, course: Course) -> None:
        if any(item.course_id == course.id for item in self._state.cart):
            logger.debug("Course %s already in cart", course.id)
            return
        self._state.cart.append(CartItem.of(course))

    def remove_from_cart(self, course_id: str) -> None:
        self._state.cart[:] = [
            item for item in self._state.cart if item.course_id != course_id
        ]

    def clear_cart(self) -> None:
        self._state.cart.clear()

    def items(self) -> list[CartItem]:
        return list(self._state.cart)

    def cart_total(self) -> float:
        return sum(item.course.price for item in self._state.cart)
