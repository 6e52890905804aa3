"""Domain models for the weekly meal-slot schedule."""

import re
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from meal_diary.domain.errors import InvalidArgumentError
from meal_diary.domain.macros import DailyMacroTargets

WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

DEFAULT_SLOT_TIMES: dict[int, str] = {
    1: "08:00",
    2: "11:00",
    3: "14:00",
    4: "17:00",
    5: "20:00",
    6: "23:00",
}

SLOT_IDS = tuple(DEFAULT_SLOT_TIMES)

# Food names with this prefix are reserved for placeholder rows in storage.
RESERVED_NAME_PREFIX = "__MEAL_TIME_PLACEHOLDER__"

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


@dataclass(frozen=True)
class MacroTotals:
    """Summed nutrition of a set of logged items."""

    calories: float = 0.0
    carbs: float = 0.0
    protein: float = 0.0
    protein_general: float = 0.0
    fat: float = 0.0

    def __add__(self, other: "MacroTotals") -> "MacroTotals":
        return MacroTotals(
            calories=self.calories + other.calories,
            carbs=self.carbs + other.carbs,
            protein=self.protein + other.protein,
            protein_general=self.protein_general + other.protein_general,
            fat=self.fat + other.fat,
        )


@dataclass(frozen=True)
class MealItemData:
    """Nutrition snapshot supplied by the caller when logging a food."""

    name: str
    amount: float = 0.0
    calories: float = 0.0
    carbs: float = 0.0
    protein: float = 0.0
    protein_general: float = 0.0
    fat: float = 0.0

    def validated(self) -> "MealItemData":
        """Return a normalized copy or raise InvalidArgumentError."""
        name = self.name.strip()
        if not name:
            raise InvalidArgumentError("Item name must not be empty")
        if name.startswith(RESERVED_NAME_PREFIX):
            raise InvalidArgumentError("Item name is reserved")
        return MealItemData(
            name=name,
            amount=float(self.amount),
            calories=float(self.calories),
            carbs=float(self.carbs),
            protein=float(self.protein),
            protein_general=float(self.protein_general),
            fat=float(self.fat),
        )


@dataclass(frozen=True)
class MealEntry:
    """A real food row logged into a slot."""

    id: int
    user_id: UUID
    day: str
    slot_id: int | None
    slot_time: str
    name: str
    amount: float
    calories: float
    carbs: float
    protein: float
    protein_general: float
    fat: float
    created_at: datetime | None = None

    @property
    def totals(self) -> MacroTotals:
        return MacroTotals(
            calories=self.calories,
            carbs=self.carbs,
            protein=self.protein,
            protein_general=self.protein_general,
            fat=self.fat,
        )


@dataclass(frozen=True)
class PlaceholderRow:
    """A stored marker remembering the time of a slot with no entries."""

    id: int
    user_id: UUID
    day: str
    slot_id: int | None
    slot_time: str
    created_at: datetime | None = None


SlotRow = MealEntry | PlaceholderRow


@dataclass(frozen=True)
class EmptySlot:
    """Slot content with no logged items."""

    time: str


@dataclass(frozen=True)
class PopulatedSlot:
    """Slot content holding at least one logged item."""

    time: str
    items: tuple[MealEntry, ...]


SlotContent = EmptySlot | PopulatedSlot


@dataclass(frozen=True)
class Slot:
    """One of the six positional meal slots of a day."""

    slot_id: int
    content: SlotContent

    @property
    def time(self) -> str:
        return self.content.time

    @property
    def items(self) -> list[MealEntry]:
        if isinstance(self.content, PopulatedSlot):
            return list(self.content.items)
        return []

    @property
    def is_empty(self) -> bool:
        return isinstance(self.content, EmptySlot)

    @property
    def totals(self) -> MacroTotals:
        return sum((item.totals for item in self.items), MacroTotals())


@dataclass(frozen=True)
class DayPlan:
    """A day's six slots with the day's macro targets."""

    day: str
    targets: DailyMacroTargets
    slots: list[Slot]

    @property
    def totals(self) -> MacroTotals:
        return sum((slot.totals for slot in self.slots), MacroTotals())


def default_slots() -> list[Slot]:
    """Return six empty slots at their default times."""
    return [
        Slot(slot_id=slot_id, content=EmptySlot(time=time))
        for slot_id, time in DEFAULT_SLOT_TIMES.items()
    ]


def normalize_day(day: str) -> str:
    """Lowercase and validate a weekday name."""
    normalized = day.strip().lower()
    if normalized not in WEEKDAYS:
        raise InvalidArgumentError(f"Unknown day: {day!r}")
    return normalized


def validate_slot_id(slot_id: int) -> int:
    """Raise InvalidArgumentError unless slot_id is one of the six slots."""
    if slot_id not in DEFAULT_SLOT_TIMES:
        raise InvalidArgumentError(f"Slot id must be between 1 and 6: {slot_id}")
    return slot_id


def normalize_time(raw_time: str) -> str:
    """Validate a wall-clock time and return it as zero-padded HH:MM."""
    match = _TIME_PATTERN.match(raw_time.strip())
    if match is None:
        raise InvalidArgumentError(f"Invalid time: {raw_time!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:  # noqa: PLR2004
        raise InvalidArgumentError(f"Invalid time: {raw_time!r}")
    return f"{hours:02d}:{minutes:02d}"


def minutes_since_midnight(raw_time: str) -> int:
    hours, minutes = normalize_time(raw_time).split(":")
    return int(hours) * 60 + int(minutes)


def infer_slot_id(
    raw_time: str, default_times: dict[int, str] = DEFAULT_SLOT_TIMES
) -> int:
    """Return the slot whose default time is nearest to raw_time.

    Distance is the absolute difference in minutes since midnight, without
    wrapping around midnight. Ties go to the lowest slot id.
    """
    target = minutes_since_midnight(raw_time)
    return min(
        sorted(default_times),
        key=lambda slot_id: abs(
            minutes_since_midnight(default_times[slot_id]) - target
        ),
    )


def is_default_time(slot_id: int, slot_time: str) -> bool:
    return DEFAULT_SLOT_TIMES[slot_id] == slot_time


def _placeholder_order(row: PlaceholderRow) -> tuple[float, int]:
    created = row.created_at.timestamp() if row.created_at else float("-inf")
    return (created, row.id)


def latest_placeholder(rows: list[PlaceholderRow]) -> PlaceholderRow:
    """Return the most recently created placeholder."""
    return max(rows, key=_placeholder_order)


def slot_from_rows(slot_id: int, rows: list[SlotRow]) -> Slot:
    """Resolve the stored rows of one slot into its content.

    Real entries win: their time is the slot time (earliest entry first) and
    any leftover placeholder is ignored. Otherwise the newest placeholder
    supplies the time, and with no rows at all the positional default applies.
    """
    entries = sorted(
        (row for row in rows if isinstance(row, MealEntry)), key=lambda row: row.id
    )
    if entries:
        return Slot(
            slot_id=slot_id,
            content=PopulatedSlot(time=entries[0].slot_time, items=tuple(entries)),
        )
    placeholders = [row for row in rows if isinstance(row, PlaceholderRow)]
    if placeholders:
        return Slot(
            slot_id=slot_id,
            content=EmptySlot(time=latest_placeholder(placeholders).slot_time),
        )
    return Slot(slot_id=slot_id, content=EmptySlot(time=DEFAULT_SLOT_TIMES[slot_id]))


def assemble_slots(rows: list[SlotRow]) -> list[Slot]:
    """Group a day's rows into exactly six slots ordered by slot id.

    Rows without a slot id are skipped.
    """
    by_slot: dict[int, list[SlotRow]] = {slot_id: [] for slot_id in SLOT_IDS}
    for row in rows:
        if row.slot_id in by_slot:
            by_slot[row.slot_id].append(row)
    return [slot_from_rows(slot_id, by_slot[slot_id]) for slot_id in SLOT_IDS]
