"""Supabase repository for daily macro targets."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from meal_diary.adapters.supabase_store import store_call
from meal_diary.domain.macros import DailyMacroTargets
from meal_diary.services.macros import DailyMacroRepository

_TABLE = "user_daily_macros"


@dataclass
class SupabaseDailyMacroRepository(DailyMacroRepository):
    """Supabase implementation for daily macro targets."""

    client: Client

    @store_call
    def get_targets(self, user_id: UUID, day: str) -> DailyMacroTargets | None:
        """Return stored targets for a user and weekday."""
        response = (
            self.client.table(_TABLE)
            .select("protein_level, fat_level, calorie_adjustment")
            .eq("user_id", str(user_id))
            .eq("day", day)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        protein_level = row.get("protein_level")
        fat_level = row.get("fat_level")
        return DailyMacroTargets(
            protein_level=float(protein_level) if protein_level is not None else None,
            fat_level=float(fat_level) if fat_level is not None else None,
            calorie_adjustment=int(row.get("calorie_adjustment") or 0),
        )

    @store_call
    def upsert_targets(
        self, user_id: UUID, day: str, targets: DailyMacroTargets
    ) -> None:
        """Insert or replace the row keyed by user and weekday in one statement."""
        self.client.table(_TABLE).upsert(
            {
                "user_id": str(user_id),
                "day": day,
                "protein_level": targets.protein_level,
                "fat_level": targets.fat_level,
                "calorie_adjustment": targets.calorie_adjustment,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id,day",
        ).execute()
