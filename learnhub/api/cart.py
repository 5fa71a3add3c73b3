from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from learnhub.api.dependencies import Engine
from learnhub.api.schemas import CartItemOut, CartOut
from learnhub.services.engine import LearningEngine

router = APIRouter(prefix="/v1/cart", tags=["cart"])


class AddToCartIn(BaseModel):
    course_id: str


def _cart(engine: LearningEngine) -> CartOut:
    return CartOut(
        items=[CartItemOut.from_item(i) for i in engine.cart_items()],
        total=engine.cart.cart_total(),
    )


@router.get("", response_model=CartOut)
async def get_cart(engine: Engine) -> CartOut:
    return _cart(engine)


@router.post("", response_model=CartOut, status_code=status.HTTP_201_CREATED)
async def add_to_cart(body: AddToCartIn, engine: Engine) -> CartOut:
    course = engine.state.get_course(body.course_id)
    if course is None:
        raise HTTPException(status_code=404, detail="course not found")
    engine.add_to_cart(course)
    return _cart(engine)


@router.delete("/{course_id}", response_model=CartOut)
async def remove_from_cart(course_id: str, engine: Engine) -> CartOut:
    engine.remove_from_cart(course_id)
    return _cart(engine)


@router.delete("", response_model=CartOut)
async def clear_cart(engine: Engine) -> CartOut:
    engine.clear_cart()
    return _cart(engine)
