"""Daily meal-slot endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request, Response, status

from meal_diary.api.deps import current_user_id
from meal_diary.api.schemas import (
    DayPlanOut,
    MacroTargetsPayload,
    MealItemOut,
    MealItemPayload,
    SlotTimePayload,
)

if TYPE_CHECKING:
    from meal_diary.containers import AppContainer

router = APIRouter(prefix="/daily-meals", tags=["daily-meals"])


@router.get("/{day}")
async def get_day_plan(
    day: str,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> DayPlanOut:
    """Return the day's six slots with its macro targets."""
    container: AppContainer = request.app.state.container
    plan = container.slot_scheduler.get_day_plan(user_id, day)
    return DayPlanOut.from_plan(plan)


@router.put("/{day}/meals/{slot_id}/time")
async def set_slot_time(
    day: str,
    slot_id: int,
    payload: SlotTimePayload,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, str]:
    """Move a slot to a new time."""
    container: AppContainer = request.app.state.container
    container.slot_scheduler.set_time(user_id, day, slot_id, payload.time)
    return {"status": "ok"}


@router.post("/{day}/meals/{slot_id}/items", status_code=status.HTTP_201_CREATED)
async def add_item(
    day: str,
    slot_id: int,
    payload: MealItemPayload,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> MealItemOut:
    """Log an item into a slot."""
    container: AppContainer = request.app.state.container
    entry = container.slot_scheduler.add_item(
        user_id, day, slot_id, payload.to_domain()
    )
    return MealItemOut.from_entry(entry)


@router.put("/{day}/meals/{slot_id}/items/{item_id}")
async def update_item(
    day: str,
    slot_id: int,
    item_id: int,
    payload: MealItemPayload,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> MealItemOut:
    """Replace a logged item."""
    container: AppContainer = request.app.state.container
    entry = container.slot_scheduler.update_item(
        user_id, day, slot_id, item_id, payload.to_domain()
    )
    return MealItemOut.from_entry(entry)


@router.delete(
    "/{day}/meals/{slot_id}/items/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_item(
    day: str,
    slot_id: int,
    item_id: int,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> Response:
    """Remove a logged item."""
    container: AppContainer = request.app.state.container
    container.slot_scheduler.delete_item(user_id, day, slot_id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{day}/meals/{slot_id}/items")
async def delete_all_items(
    day: str,
    slot_id: int,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, int]:
    """Remove every logged item of a slot."""
    container: AppContainer = request.app.state.container
    deleted = container.slot_scheduler.delete_all_items(user_id, day, slot_id)
    return {"deleted": deleted}


@router.put("/{day}/macros")
async def save_macros(
    day: str,
    payload: MacroTargetsPayload,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> MacroTargetsPayload:
    """Store the day's macro targets."""
    container: AppContainer = request.app.state.container
    saved = container.macro_service.save(user_id, day, payload.to_domain())
    return MacroTargetsPayload.from_domain(saved)


@router.post("/{day}/cleanup-placeholders")
async def cleanup_placeholders(
    day: str,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, int]:
    """Remove duplicate placeholder rows of the day."""
    container: AppContainer = request.app.state.container
    removed = container.slot_scheduler.cleanup_duplicate_placeholders(user_id, day)
    return {"removed": removed}
