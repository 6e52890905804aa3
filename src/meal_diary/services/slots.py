"""Weekly meal-slot scheduling."""

import logging
from dataclasses import dataclass, field, replace
from typing import Protocol
from uuid import UUID

from meal_diary.domain.errors import (
    InvalidArgumentError,
    NotFoundError,
    StoreUnavailableError,
)
from meal_diary.domain.slots import (
    DayPlan,
    MealEntry,
    MealItemData,
    PlaceholderRow,
    Slot,
    SlotRow,
    assemble_slots,
    default_slots,
    infer_slot_id,
    is_default_time,
    latest_placeholder,
    normalize_day,
    normalize_time,
    slot_from_rows,
    validate_slot_id,
)
from meal_diary.services.locks import KeyedLocks
from meal_diary.services.macros import DailyMacroService

_logger = logging.getLogger(__name__)


class SlotRepository(Protocol):
    """Persistence interface for slot entries and placeholders."""

    def list_day_rows(self, user_id: UUID, day: str) -> list[SlotRow]:
        """Return every row of a user's weekday, legacy rows included."""

    def list_slot_rows(self, user_id: UUID, day: str, slot_id: int) -> list[SlotRow]:
        """Return the rows assigned to one slot."""

    def get_entry(
        self, user_id: UUID, day: str, slot_id: int, entry_id: int
    ) -> MealEntry | None:
        """Return a real entry of the slot by id, if present."""

    def insert_entry(
        self,
        user_id: UUID,
        day: str,
        slot_id: int,
        slot_time: str,
        item: MealItemData,
    ) -> MealEntry:
        """Insert a real entry and return it."""

    def update_entry(self, entry_id: int, item: MealItemData) -> MealEntry:
        """Replace the snapshot of an entry and return it."""

    def delete_entry(self, entry_id: int) -> None:
        """Delete a real entry."""

    def delete_entries(self, user_id: UUID, day: str, slot_id: int) -> int:
        """Delete every real entry of a slot and return how many were removed."""

    def retime_entries(
        self, user_id: UUID, day: str, slot_id: int, slot_time: str
    ) -> None:
        """Set the time of every real entry of a slot."""

    def insert_placeholder(
        self, user_id: UUID, day: str, slot_id: int, slot_time: str
    ) -> PlaceholderRow:
        """Insert a placeholder row for a slot and return it."""

    def delete_placeholders(self, user_id: UUID, day: str, slot_id: int) -> None:
        """Delete every placeholder of a slot."""

    def delete_rows(self, row_ids: list[int]) -> None:
        """Delete rows by id."""

    def list_unassigned_rows(self) -> list[SlotRow]:
        """Return legacy rows stored without a slot id."""

    def assign_slot_id(self, row: SlotRow, slot_id: int) -> None:
        """Persist the slot id of a legacy row."""


@dataclass
class MealSlotScheduler:
    """Six positional, time-labeled meal slots per user and weekday.

    A slot's time lives on its entries, or on a single placeholder row when
    the slot is empty at a non-default time. Mutations of one slot run under
    a lock keyed by user, day and slot.
    """

    repository: SlotRepository
    macro_service: DailyMacroService
    locks: KeyedLocks = field(default_factory=KeyedLocks)

    def get_day(self, user_id: UUID, day: str) -> list[Slot]:
        """Return the day's six slots ordered by slot id."""
        normalized = normalize_day(day)
        try:
            rows = self._repair(self.repository.list_day_rows(user_id, normalized))
        except StoreUnavailableError as exc:
            _logger.warning(
                "Slots unavailable for user_id=%s day=%s: %s", user_id, normalized, exc
            )
            return default_slots()
        return assemble_slots(rows)

    def get_day_plan(self, user_id: UUID, day: str) -> DayPlan:
        """Return the day's slots together with its macro targets."""
        normalized = normalize_day(day)
        return DayPlan(
            day=normalized,
            targets=self.macro_service.get(user_id, normalized),
            slots=self.get_day(user_id, normalized),
        )

    def add_item(
        self, user_id: UUID, day: str, slot_id: int, item: MealItemData
    ) -> MealEntry:
        """Log an item into a slot at the slot's current time."""
        normalized, slot_id = _validate(day, slot_id)
        item = item.validated()
        with self.locks.hold((user_id, normalized, slot_id)):
            rows = self.repository.list_slot_rows(user_id, normalized, slot_id)
            slot = slot_from_rows(slot_id, rows)
            if _placeholders(rows):
                self.repository.delete_placeholders(user_id, normalized, slot_id)
            entry = self.repository.insert_entry(
                user_id, normalized, slot_id, slot.time, item
            )
        _logger.info(
            "Slot item added: user_id=%s day=%s slot_id=%s name=%s",
            user_id,
            normalized,
            slot_id,
            item.name,
        )
        return entry

    def update_item(
        self,
        user_id: UUID,
        day: str,
        slot_id: int,
        item_id: int,
        item: MealItemData,
    ) -> MealEntry:
        """Replace the snapshot of a logged item."""
        normalized, slot_id = _validate(day, slot_id)
        item = item.validated()
        with self.locks.hold((user_id, normalized, slot_id)):
            entry = self._require_entry(user_id, normalized, slot_id, item_id)
            return self.repository.update_entry(entry.id, item)

    def delete_item(self, user_id: UUID, day: str, slot_id: int, item_id: int) -> None:
        """Delete a logged item, keeping a custom slot time if it was the last."""
        normalized, slot_id = _validate(day, slot_id)
        with self.locks.hold((user_id, normalized, slot_id)):
            entry = self._require_entry(user_id, normalized, slot_id, item_id)
            self.repository.delete_entry(entry.id)
            remaining = self.repository.list_slot_rows(user_id, normalized, slot_id)
            if not _entries(remaining):
                self._write_placeholder(
                    user_id,
                    normalized,
                    slot_id,
                    entry.slot_time,
                    _placeholders(remaining),
                )

    def delete_all_items(self, user_id: UUID, day: str, slot_id: int) -> int:
        """Delete every logged item of a slot without touching placeholders."""
        normalized, slot_id = _validate(day, slot_id)
        with self.locks.hold((user_id, normalized, slot_id)):
            deleted = self.repository.delete_entries(user_id, normalized, slot_id)
        _logger.info(
            "Slot cleared: user_id=%s day=%s slot_id=%s deleted=%s",
            user_id,
            normalized,
            slot_id,
            deleted,
        )
        return deleted

    def set_time(self, user_id: UUID, day: str, slot_id: int, new_time: str) -> None:
        """Move a slot to a new time. Calling it again with the same time is a no-op."""
        normalized, slot_id = _validate(day, slot_id)
        slot_time = normalize_time(new_time)
        with self.locks.hold((user_id, normalized, slot_id)):
            self.repository.retime_entries(user_id, normalized, slot_id, slot_time)
            rows = self.repository.list_slot_rows(user_id, normalized, slot_id)
            if not _entries(rows):
                self._write_placeholder(
                    user_id, normalized, slot_id, slot_time, _placeholders(rows)
                )
            elif _placeholders(rows):
                self.repository.delete_placeholders(user_id, normalized, slot_id)
        _logger.info(
            "Slot time set: user_id=%s day=%s slot_id=%s time=%s",
            user_id,
            normalized,
            slot_id,
            slot_time,
        )

    def cleanup_duplicate_placeholders(self, user_id: UUID, day: str) -> int:
        """Keep only the newest placeholder per slot; return how many were removed."""
        normalized = normalize_day(day)
        rows = self.repository.list_day_rows(user_id, normalized)
        by_slot: dict[int, list[PlaceholderRow]] = {}
        for row in _placeholders(rows):
            if row.slot_id is not None:
                by_slot.setdefault(row.slot_id, []).append(row)

        removed = 0
        for slot_id, placeholders in sorted(by_slot.items()):
            if len(placeholders) < 2:  # noqa: PLR2004
                continue
            keep = latest_placeholder(placeholders)
            stale = [row.id for row in placeholders if row.id != keep.id]
            with self.locks.hold((user_id, normalized, slot_id)):
                self.repository.delete_rows(stale)
            removed += len(stale)

        if removed:
            _logger.info(
                "Duplicate placeholders removed: user_id=%s day=%s count=%s",
                user_id,
                normalized,
                removed,
            )
        return removed

    def repair_legacy_rows(self) -> int:
        """Assign slot ids to every stored row that lacks one."""
        rows = self.repository.list_unassigned_rows()
        repaired = self._repair(rows)
        count = len(rows) - sum(1 for row in repaired if row.slot_id is None)
        if count:
            _logger.info("Legacy slot rows repaired: count=%s", count)
        return count

    def _repair(self, rows: list[SlotRow]) -> list[SlotRow]:
        """Assign slot ids to legacy rows; return the rows that remain stored."""
        repaired: list[SlotRow] = []
        for row in rows:
            if row.slot_id is not None:
                repaired.append(row)
                continue
            try:
                slot_id = infer_slot_id(row.slot_time)
            except InvalidArgumentError:
                _logger.warning(
                    "Legacy slot row has unreadable time: row_id=%s time=%r",
                    row.id,
                    row.slot_time,
                )
                repaired.append(row)
                continue
            if self._assign(row, slot_id):
                repaired.append(replace(row, slot_id=slot_id))
        return repaired

    def _assign(self, row: SlotRow, slot_id: int) -> bool:
        """Move a legacy row into a slot; return False if it was dropped instead."""
        with self.locks.hold((row.user_id, row.day, slot_id)):
            taken = isinstance(row, PlaceholderRow) and bool(
                self.repository.list_slot_rows(row.user_id, row.day, slot_id)
            )
            if not taken:
                self.repository.assign_slot_id(row, slot_id)
                return True
            # The slot already carries its own time.
            self.repository.delete_rows([row.id])
        _logger.info(
            "Legacy placeholder dropped: row_id=%s slot_id=%s", row.id, slot_id
        )
        return False

    def _require_entry(
        self, user_id: UUID, day: str, slot_id: int, item_id: int
    ) -> MealEntry:
        entry = self.repository.get_entry(user_id, day, slot_id, item_id)
        if entry is None:
            raise NotFoundError(f"No item {item_id} in slot {slot_id} on {day}")
        return entry

    def _write_placeholder(
        self,
        user_id: UUID,
        day: str,
        slot_id: int,
        slot_time: str,
        existing: list[PlaceholderRow],
    ) -> None:
        wanted = not is_default_time(slot_id, slot_time)
        if wanted and len(existing) == 1 and existing[0].slot_time == slot_time:
            return
        if existing:
            self.repository.delete_placeholders(user_id, day, slot_id)
        if wanted:
            self.repository.insert_placeholder(user_id, day, slot_id, slot_time)
            _logger.info(
                "Slot placeholder written: user_id=%s day=%s slot_id=%s time=%s",
                user_id,
                day,
                slot_id,
                slot_time,
            )


def _validate(day: str, slot_id: int) -> tuple[str, int]:
    return normalize_day(day), validate_slot_id(slot_id)


def _entries(rows: list[SlotRow]) -> list[MealEntry]:
    return [row for row in rows if isinstance(row, MealEntry)]


def _placeholders(rows: list[SlotRow]) -> list[PlaceholderRow]:
    return [row for row in rows if isinstance(row, PlaceholderRow)]
