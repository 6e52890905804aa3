"""Domain models for the shared food catalog and per-user overlays."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from meal_diary.domain.errors import InvalidArgumentError


class FoodSource(StrEnum):
    """Where an effective catalog entry comes from."""

    GLOBAL = "global"
    USER = "user"


@dataclass(frozen=True)
class FoodData:
    """Caller-supplied food definition."""

    name: str
    serving_amount: str | None = None
    calories: float = 0.0
    carbs: float = 0.0
    protein: float = 0.0
    protein_general: float = 0.0
    fat: float = 0.0

    def validated(self) -> "FoodData":
        """Return a normalized copy or raise InvalidArgumentError."""
        name = self.name.strip()
        if not name:
            raise InvalidArgumentError("Food name must not be empty")
        for field_name in ("calories", "carbs", "protein", "protein_general", "fat"):
            if getattr(self, field_name) < 0:
                raise InvalidArgumentError(f"{field_name} must not be negative")
        return FoodData(
            name=name,
            serving_amount=self.serving_amount,
            calories=float(self.calories),
            carbs=float(self.carbs),
            protein=float(self.protein),
            protein_general=float(self.protein_general),
            fat=float(self.fat),
        )


@dataclass(frozen=True)
class GlobalFood:
    """A catalog row shared by every user."""

    id: int
    name: str
    serving_amount: str | None
    calories: float
    carbs: float
    protein: float
    protein_general: float
    fat: float


@dataclass(frozen=True)
class UserFoodOverlay:
    """A per-user row that adds, replaces or hides a catalog entry."""

    id: int
    user_id: UUID
    name: str
    serving_amount: str | None
    calories: float
    carbs: float
    protein: float
    protein_general: float
    fat: float
    is_custom: bool
    is_deleted: bool
    created_at: datetime | None = None


@dataclass(frozen=True)
class FoodRef:
    """Stable address of an effective catalog entry."""

    source: FoodSource
    id: int


@dataclass(frozen=True)
class FoodView:
    """An entry of a user's effective catalog."""

    id: int
    source: FoodSource
    editable: bool
    is_custom: bool
    name: str
    serving_amount: str | None
    calories: float
    carbs: float
    protein: float
    protein_general: float
    fat: float

    @property
    def ref(self) -> FoodRef:
        """Identifier callers echo back to update or delete this entry."""
        return FoodRef(source=self.source, id=self.id)

    @classmethod
    def from_global(cls, food: GlobalFood) -> "FoodView":
        """Build a view of a shared catalog row."""
        return cls(
            id=food.id,
            source=FoodSource.GLOBAL,
            editable=False,
            is_custom=False,
            name=food.name,
            serving_amount=food.serving_amount,
            calories=food.calories,
            carbs=food.carbs,
            protein=food.protein,
            protein_general=food.protein_general,
            fat=food.fat,
        )

    @classmethod
    def from_overlay(cls, food: UserFoodOverlay) -> "FoodView":
        """Build a view of a user's own row."""
        return cls(
            id=food.id,
            source=FoodSource.USER,
            editable=True,
            is_custom=food.is_custom,
            name=food.name,
            serving_amount=food.serving_amount,
            calories=food.calories,
            carbs=food.carbs,
            protein=food.protein,
            protein_general=food.protein_general,
            fat=food.fat,
        )


def catalog_sort_key(view: FoodView) -> tuple[str, str, int, int]:
    """Order effective entries by name, shared rows first on equal names."""
    return (
        view.name.casefold(),
        view.name,
        0 if view.source is FoodSource.GLOBAL else 1,
        view.id,
    )


def merge_catalog(
    global_foods: list[GlobalFood], overlays: list[UserFoodOverlay]
) -> list[FoodView]:
    """Merge shared rows with a user's overlay rows into one sorted view.

    Any overlay row, tombstones included, shadows every shared row with the
    same name. Tombstones themselves never appear.
    """
    shadowed = {overlay.name for overlay in overlays}
    views = [
        FoodView.from_global(food)
        for food in global_foods
        if food.name not in shadowed
    ]
    views.extend(
        FoodView.from_overlay(overlay)
        for overlay in overlays
        if not overlay.is_deleted
    )
    return sorted(views, key=catalog_sort_key)
