"""Domain models for per-day macro targets."""

from dataclasses import dataclass

from meal_diary.domain.errors import InvalidArgumentError


@dataclass(frozen=True)
class DailyMacroTargets:
    """Protein/fat targets in g per kg of bodyweight and a calorie offset."""

    protein_level: float | None = None
    fat_level: float | None = None
    calorie_adjustment: int = 0

    def validated(self) -> "DailyMacroTargets":
        """Return a normalized copy or raise InvalidArgumentError."""
        for field_name in ("protein_level", "fat_level"):
            value = getattr(self, field_name)
            if value is not None and value <= 0:
                raise InvalidArgumentError(f"{field_name} must be positive")
        return DailyMacroTargets(
            protein_level=(
                float(self.protein_level) if self.protein_level is not None else None
            ),
            fat_level=float(self.fat_level) if self.fat_level is not None else None,
            calorie_adjustment=int(self.calorie_adjustment or 0),
        )
