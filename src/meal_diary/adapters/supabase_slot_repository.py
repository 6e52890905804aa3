"""Supabase repository for meal-slot rows.

Placeholders are stored as ordinary rows whose food name is a sentinel
(``__MEAL_TIME_PLACEHOLDER__MEAL_<slot>__``, or the slot-less legacy form)
with zeroed nutrition. This module is the only place that knows about the
sentinel; callers receive ``PlaceholderRow`` objects instead.
"""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from meal_diary.adapters.supabase_store import parse_timestamp, store_call
from meal_diary.domain.slots import (
    RESERVED_NAME_PREFIX,
    MealEntry,
    MealItemData,
    PlaceholderRow,
    SlotRow,
)
from meal_diary.services.slots import SlotRepository

_TABLE = "meal_slot_entries"
LEGACY_PLACEHOLDER_NAME = RESERVED_NAME_PREFIX
_ZEROED = {
    "amount": 0,
    "calories": 0,
    "carbs": 0,
    "protein": 0,
    "protein_general": 0,
    "fat": 0,
}


def placeholder_name(slot_id: int) -> str:
    """Return the sentinel food name of a slot's placeholder."""
    return f"{RESERVED_NAME_PREFIX}MEAL_{slot_id}__"


@dataclass
class SupabaseSlotRepository(SlotRepository):
    """Supabase implementation for slot entries and placeholders."""

    client: Client

    @store_call
    def list_day_rows(self, user_id: UUID, day: str) -> list[SlotRow]:
        """Return every row of a user's weekday."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("user_id", str(user_id))
            .eq("day", day)
            .order("id")
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    @store_call
    def list_slot_rows(self, user_id: UUID, day: str, slot_id: int) -> list[SlotRow]:
        """Return the rows assigned to one slot."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("user_id", str(user_id))
            .eq("day", day)
            .eq("slot_id", slot_id)
            .order("id")
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    @store_call
    def get_entry(
        self, user_id: UUID, day: str, slot_id: int, entry_id: int
    ) -> MealEntry | None:
        """Return a real entry of the slot by id, if present."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("id", entry_id)
            .eq("user_id", str(user_id))
            .eq("day", day)
            .eq("slot_id", slot_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = _parse_row(response.data[0])
        return row if isinstance(row, MealEntry) else None

    @store_call
    def insert_entry(
        self,
        user_id: UUID,
        day: str,
        slot_id: int,
        slot_time: str,
        item: MealItemData,
    ) -> MealEntry:
        """Insert a real entry and return it."""
        response = (
            self.client.table(_TABLE)
            .insert(
                {
                    "user_id": str(user_id),
                    "day": day,
                    "slot_id": slot_id,
                    "slot_time": slot_time,
                    **_item_payload(item),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create slot entry")
        return _parse_entry(response.data[0])

    @store_call
    def update_entry(self, entry_id: int, item: MealItemData) -> MealEntry:
        """Replace the snapshot of an entry and return it."""
        response = (
            self.client.table(_TABLE)
            .update(_item_payload(item))
            .eq("id", entry_id)
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update slot entry")
        return _parse_entry(response.data[0])

    @store_call
    def delete_entry(self, entry_id: int) -> None:
        """Delete a real entry."""
        self.client.table(_TABLE).delete().eq("id", entry_id).execute()

    @store_call
    def delete_entries(self, user_id: UUID, day: str, slot_id: int) -> int:
        """Delete every real entry of a slot."""
        response = (
            self.client.table(_TABLE)
            .delete()
            .eq("user_id", str(user_id))
            .eq("day", day)
            .eq("slot_id", slot_id)
            .neq("food_name", placeholder_name(slot_id))
            .neq("food_name", LEGACY_PLACEHOLDER_NAME)
            .execute()
        )
        return len(response.data or [])

    @store_call
    def retime_entries(
        self, user_id: UUID, day: str, slot_id: int, slot_time: str
    ) -> None:
        """Set the time of every real entry of a slot."""
        (
            self.client.table(_TABLE)
            .update({"slot_time": slot_time})
            .eq("user_id", str(user_id))
            .eq("day", day)
            .eq("slot_id", slot_id)
            .neq("food_name", placeholder_name(slot_id))
            .neq("food_name", LEGACY_PLACEHOLDER_NAME)
            .execute()
        )

    @store_call
    def insert_placeholder(
        self, user_id: UUID, day: str, slot_id: int, slot_time: str
    ) -> PlaceholderRow:
        """Insert a placeholder row for a slot and return it."""
        response = (
            self.client.table(_TABLE)
            .insert(
                {
                    "user_id": str(user_id),
                    "day": day,
                    "slot_id": slot_id,
                    "slot_time": slot_time,
                    "food_name": placeholder_name(slot_id),
                    **_ZEROED,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create slot placeholder")
        row = _parse_row(response.data[0])
        if not isinstance(row, PlaceholderRow):
            raise RuntimeError("Stored placeholder did not round-trip")
        return row

    @store_call
    def delete_placeholders(self, user_id: UUID, day: str, slot_id: int) -> None:
        """Delete every placeholder of a slot."""
        (
            self.client.table(_TABLE)
            .delete()
            .eq("user_id", str(user_id))
            .eq("day", day)
            .eq("slot_id", slot_id)
            .in_("food_name", [placeholder_name(slot_id), LEGACY_PLACEHOLDER_NAME])
            .execute()
        )

    @store_call
    def delete_rows(self, row_ids: list[int]) -> None:
        """Delete rows by id."""
        if not row_ids:
            return
        self.client.table(_TABLE).delete().in_("id", row_ids).execute()

    @store_call
    def list_unassigned_rows(self) -> list[SlotRow]:
        """Return legacy rows stored without a slot id."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .is_("slot_id", "null")
            .order("id")
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    @store_call
    def assign_slot_id(self, row: SlotRow, slot_id: int) -> None:
        """Persist the slot id of a legacy row."""
        payload: dict[str, object] = {"slot_id": slot_id}
        if isinstance(row, PlaceholderRow):
            payload["food_name"] = placeholder_name(slot_id)
        self.client.table(_TABLE).update(payload).eq("id", row.id).execute()


def _item_payload(item: MealItemData) -> dict[str, object]:
    return {
        "food_name": item.name,
        "amount": item.amount,
        "calories": item.calories,
        "carbs": item.carbs,
        "protein": item.protein,
        "protein_general": item.protein_general,
        "fat": item.fat,
    }


def _parse_row(row: dict[str, object]) -> SlotRow:
    """Parse a stored row into an entry or a placeholder."""
    name = str(row.get("food_name", ""))
    if not name.startswith(RESERVED_NAME_PREFIX):
        return _parse_entry(row)
    slot_id = row.get("slot_id")
    return PlaceholderRow(
        id=int(row["id"]),
        user_id=UUID(str(row["user_id"])),
        day=str(row.get("day", "")),
        slot_id=int(slot_id) if slot_id is not None else None,
        slot_time=str(row.get("slot_time", "")),
        created_at=parse_timestamp(row.get("created_at")),
    )


def _parse_entry(row: dict[str, object]) -> MealEntry:
    slot_id = row.get("slot_id")
    return MealEntry(
        id=int(row["id"]),
        user_id=UUID(str(row["user_id"])),
        day=str(row.get("day", "")),
        slot_id=int(slot_id) if slot_id is not None else None,
        slot_time=str(row.get("slot_time", "")),
        name=str(row.get("food_name", "")),
        amount=float(row.get("amount") or 0.0),
        calories=float(row.get("calories") or 0.0),
        carbs=float(row.get("carbs") or 0.0),
        protein=float(row.get("protein") or 0.0),
        protein_general=float(row.get("protein_general") or 0.0),
        fat=float(row.get("fat") or 0.0),
        created_at=parse_timestamp(row.get("created_at")),
    )
