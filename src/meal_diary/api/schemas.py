"""Pydantic request and response models for the HTTP API."""

from pydantic import BaseModel, Field

from meal_diary.domain.catalog import FoodData, FoodView
from meal_diary.domain.macros import DailyMacroTargets
from meal_diary.domain.slots import DayPlan, MacroTotals, MealEntry, MealItemData, Slot


class FoodPayload(BaseModel):
    """Food definition sent by clients."""

    name: str = Field(min_length=1)
    serving_amount: str | None = None
    calories: float = Field(default=0.0, ge=0)
    carbs: float = Field(default=0.0, ge=0)
    protein: float = Field(default=0.0, ge=0)
    protein_general: float = Field(default=0.0, ge=0)
    fat: float = Field(default=0.0, ge=0)

    def to_domain(self) -> FoodData:
        return FoodData(**self.model_dump())


class FoodOut(BaseModel):
    """Effective catalog entry."""

    id: int
    source: str
    editable: bool
    is_custom: bool
    name: str
    serving_amount: str | None
    calories: float
    carbs: float
    protein: float
    protein_general: float
    fat: float

    @classmethod
    def from_view(cls, view: FoodView) -> "FoodOut":
        return cls(
            id=view.id,
            source=view.source.value,
            editable=view.editable,
            is_custom=view.is_custom,
            name=view.name,
            serving_amount=view.serving_amount,
            calories=view.calories,
            carbs=view.carbs,
            protein=view.protein,
            protein_general=view.protein_general,
            fat=view.fat,
        )


class MealItemPayload(BaseModel):
    """Nutrition snapshot of a food logged into a slot."""

    name: str = Field(min_length=1)
    amount: float = 0.0
    calories: float = 0.0
    carbs: float = 0.0
    protein: float = 0.0
    protein_general: float = 0.0
    fat: float = 0.0

    def to_domain(self) -> MealItemData:
        return MealItemData(**self.model_dump())


class MealItemOut(BaseModel):
    """Logged item."""

    id: int
    name: str
    amount: float
    calories: float
    carbs: float
    protein: float
    protein_general: float
    fat: float

    @classmethod
    def from_entry(cls, entry: MealEntry) -> "MealItemOut":
        return cls(
            id=entry.id,
            name=entry.name,
            amount=entry.amount,
            calories=entry.calories,
            carbs=entry.carbs,
            protein=entry.protein,
            protein_general=entry.protein_general,
            fat=entry.fat,
        )


class TotalsOut(BaseModel):
    """Summed nutrition."""

    calories: float
    carbs: float
    protein: float
    protein_general: float
    fat: float

    @classmethod
    def from_totals(cls, totals: MacroTotals) -> "TotalsOut":
        return cls(
            calories=totals.calories,
            carbs=totals.carbs,
            protein=totals.protein,
            protein_general=totals.protein_general,
            fat=totals.fat,
        )


class SlotOut(BaseModel):
    """One of the day's six slots."""

    id: int
    time: str
    items: list[MealItemOut]
    totals: TotalsOut

    @classmethod
    def from_slot(cls, slot: Slot) -> "SlotOut":
        return cls(
            id=slot.slot_id,
            time=slot.time,
            items=[MealItemOut.from_entry(item) for item in slot.items],
            totals=TotalsOut.from_totals(slot.totals),
        )


class MacroTargetsPayload(BaseModel):
    """Per-day macro targets."""

    protein_level: float | None = Field(default=None, gt=0)
    fat_level: float | None = Field(default=None, gt=0)
    calorie_adjustment: int = 0

    def to_domain(self) -> DailyMacroTargets:
        return DailyMacroTargets(**self.model_dump())

    @classmethod
    def from_domain(cls, targets: DailyMacroTargets) -> "MacroTargetsPayload":
        return cls(
            protein_level=targets.protein_level,
            fat_level=targets.fat_level,
            calorie_adjustment=targets.calorie_adjustment,
        )


class DayPlanOut(BaseModel):
    """A day's slots with its macro targets."""

    day: str
    protein_level: float | None
    fat_level: float | None
    calorie_adjustment: int
    meals: list[SlotOut]
    totals: TotalsOut

    @classmethod
    def from_plan(cls, plan: DayPlan) -> "DayPlanOut":
        return cls(
            day=plan.day,
            protein_level=plan.targets.protein_level,
            fat_level=plan.targets.fat_level,
            calorie_adjustment=plan.targets.calorie_adjustment,
            meals=[SlotOut.from_slot(slot) for slot in plan.slots],
            totals=TotalsOut.from_totals(plan.totals),
        )


class SlotTimePayload(BaseModel):
    """New time for a slot."""

    time: str
