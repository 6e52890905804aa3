"""Supabase implementation for the shared catalog and user overlays."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from meal_diary.adapters.supabase_store import parse_timestamp, store_call
from meal_diary.domain.catalog import FoodData, GlobalFood, UserFoodOverlay
from meal_diary.services.catalog import CatalogRepository

_GLOBAL_TABLE = "foods"
_OVERLAY_TABLE = "user_foods"


@dataclass
class SupabaseCatalogRepository(CatalogRepository):
    """Supabase-backed repository for catalog rows."""

    client: Client

    @store_call
    def list_global_foods(self) -> list[GlobalFood]:
        """Return every shared catalog row ordered by name."""
        response = self.client.table(_GLOBAL_TABLE).select("*").order("name").execute()
        return [_parse_global(row) for row in response.data or []]

    @store_call
    def search_global_foods(self, term: str) -> list[GlobalFood]:
        """Return shared rows whose name contains term."""
        response = (
            self.client.table(_GLOBAL_TABLE)
            .select("*")
            .ilike("name", f"%{term}%")
            .order("name")
            .execute()
        )
        return [_parse_global(row) for row in response.data or []]

    @store_call
    def get_global_food(self, food_id: int) -> GlobalFood | None:
        """Return a shared row by id, if present."""
        response = (
            self.client.table(_GLOBAL_TABLE)
            .select("*")
            .eq("id", food_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_global(response.data[0])

    @store_call
    def find_global_foods_by_name(self, name: str) -> list[GlobalFood]:
        """Return shared rows with exactly this name."""
        response = (
            self.client.table(_GLOBAL_TABLE).select("*").eq("name", name).execute()
        )
        return [_parse_global(row) for row in response.data or []]

    @store_call
    def list_overlays(self, user_id: UUID) -> list[UserFoodOverlay]:
        """Return all overlay rows of a user, tombstones included."""
        response = (
            self.client.table(_OVERLAY_TABLE)
            .select("*")
            .eq("user_id", str(user_id))
            .order("name")
            .execute()
        )
        return [_parse_overlay(row) for row in response.data or []]

    @store_call
    def search_overlays(self, user_id: UUID, term: str) -> list[UserFoodOverlay]:
        """Return a user's overlay rows whose name contains term."""
        response = (
            self.client.table(_OVERLAY_TABLE)
            .select("*")
            .eq("user_id", str(user_id))
            .ilike("name", f"%{term}%")
            .execute()
        )
        return [_parse_overlay(row) for row in response.data or []]

    @store_call
    def get_overlay(self, user_id: UUID, overlay_id: int) -> UserFoodOverlay | None:
        """Return one of a user's overlay rows by id, if present."""
        response = (
            self.client.table(_OVERLAY_TABLE)
            .select("*")
            .eq("id", overlay_id)
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_overlay(response.data[0])

    @store_call
    def find_overlays_by_name(
        self, user_id: UUID, name: str
    ) -> list[UserFoodOverlay]:
        """Return a user's overlay rows with exactly this name."""
        response = (
            self.client.table(_OVERLAY_TABLE)
            .select("*")
            .eq("user_id", str(user_id))
            .eq("name", name)
            .execute()
        )
        return [_parse_overlay(row) for row in response.data or []]

    @store_call
    def create_overlay(
        self, user_id: UUID, food: FoodData, *, is_custom: bool, is_deleted: bool
    ) -> UserFoodOverlay:
        """Insert an overlay row and return it."""
        response = (
            self.client.table(_OVERLAY_TABLE)
            .insert(
                {
                    "user_id": str(user_id),
                    **_food_payload(food),
                    "is_custom": is_custom,
                    "is_deleted": is_deleted,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create user food")
        return _parse_overlay(response.data[0])

    @store_call
    def update_overlay(self, overlay_id: int, food: FoodData) -> UserFoodOverlay:
        """Replace the food fields of an overlay row, leaving it live, and return it."""
        response = (
            self.client.table(_OVERLAY_TABLE)
            .update(
                {
                    **_food_payload(food),
                    "is_deleted": False,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("id", overlay_id)
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update user food")
        return _parse_overlay(response.data[0])

    @store_call
    def delete_overlay(self, overlay_id: int) -> None:
        """Hard-delete an overlay row."""
        self.client.table(_OVERLAY_TABLE).delete().eq("id", overlay_id).execute()


def _food_payload(food: FoodData) -> dict[str, object]:
    return {
        "name": food.name,
        "serving_amount": food.serving_amount,
        "calories": food.calories,
        "carbs": food.carbs,
        "protein": food.protein,
        "protein_general": food.protein_general,
        "fat": food.fat,
    }


def _parse_global(row: dict[str, object]) -> GlobalFood:
    """Parse a shared catalog row into a domain model."""
    return GlobalFood(
        id=int(row["id"]),
        name=str(row.get("name", "")),
        serving_amount=_optional_str(row.get("serving_amount")),
        calories=float(row.get("calories") or 0.0),
        carbs=float(row.get("carbs") or 0.0),
        protein=float(row.get("protein") or 0.0),
        protein_general=float(row.get("protein_general") or 0.0),
        fat=float(row.get("fat") or 0.0),
    )


def _parse_overlay(row: dict[str, object]) -> UserFoodOverlay:
    """Parse a user overlay row into a domain model."""
    return UserFoodOverlay(
        id=int(row["id"]),
        user_id=UUID(str(row["user_id"])),
        name=str(row.get("name", "")),
        serving_amount=_optional_str(row.get("serving_amount")),
        calories=float(row.get("calories") or 0.0),
        carbs=float(row.get("carbs") or 0.0),
        protein=float(row.get("protein") or 0.0),
        protein_general=float(row.get("protein_general") or 0.0),
        fat=float(row.get("fat") or 0.0),
        is_custom=bool(row.get("is_custom", True)),
        is_deleted=bool(row.get("is_deleted", False)),
        created_at=parse_timestamp(row.get("created_at")),
    )


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    return str(value)
