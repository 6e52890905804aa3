"""Food catalog endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request, Response, status

from meal_diary.api.deps import current_user_id
from meal_diary.api.schemas import FoodOut, FoodPayload
from meal_diary.domain.catalog import FoodRef, FoodSource

if TYPE_CHECKING:
    from meal_diary.containers import AppContainer

router = APIRouter(prefix="/foods", tags=["foods"])


@router.get("")
async def list_foods(
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, list[FoodOut]]:
    """Return the caller's effective catalog."""
    container: AppContainer = request.app.state.container
    views = container.catalog_service.list_effective(user_id)
    return {"foods": [FoodOut.from_view(view) for view in views]}


@router.get("/search")
async def search_foods(
    request: Request,
    q: str = "",
    user_id: UUID = Depends(current_user_id),
) -> dict[str, list[FoodOut]]:
    """Search the caller's effective catalog by name."""
    container: AppContainer = request.app.state.container
    views = container.catalog_service.search(q, user_id)
    return {"foods": [FoodOut.from_view(view) for view in views]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_food(
    payload: FoodPayload,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> FoodOut:
    """Create a custom food for the caller."""
    container: AppContainer = request.app.state.container
    view = container.catalog_service.add_custom(user_id, payload.to_domain())
    return FoodOut.from_view(view)


@router.put("/{source}/{food_id}")
async def update_food(
    source: FoodSource,
    food_id: int,
    payload: FoodPayload,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> FoodOut:
    """Edit a catalog entry; shared entries are copied for the caller."""
    container: AppContainer = request.app.state.container
    view = container.catalog_service.update(
        user_id, FoodRef(source=source, id=food_id), payload.to_domain()
    )
    return FoodOut.from_view(view)


@router.delete("/{source}/{food_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_food(
    source: FoodSource,
    food_id: int,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> Response:
    """Remove a catalog entry from the caller's view."""
    container: AppContainer = request.app.state.container
    container.catalog_service.delete(user_id, FoodRef(source=source, id=food_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
