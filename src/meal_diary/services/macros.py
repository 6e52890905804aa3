"""Per-day macro target service."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from meal_diary.domain.errors import StoreUnavailableError
from meal_diary.domain.macros import DailyMacroTargets
from meal_diary.domain.slots import normalize_day

_logger = logging.getLogger(__name__)


class DailyMacroRepository(Protocol):
    """Persistence interface for daily macro targets."""

    def get_targets(self, user_id: UUID, day: str) -> DailyMacroTargets | None:
        """Return stored targets for a user and weekday, if any."""

    def upsert_targets(
        self, user_id: UUID, day: str, targets: DailyMacroTargets
    ) -> None:
        """Insert or replace the targets row keyed by user and weekday."""


@dataclass
class DailyMacroService:
    """Service for per-day protein, fat and calorie targets."""

    repository: DailyMacroRepository

    def get(self, user_id: UUID, day: str) -> DailyMacroTargets:
        """Return the day's targets, or empty defaults when none are stored."""
        normalized = normalize_day(day)
        try:
            stored = self.repository.get_targets(user_id, normalized)
        except StoreUnavailableError as exc:
            _logger.warning(
                "Macro targets unavailable for user_id=%s day=%s: %s",
                user_id,
                normalized,
                exc,
            )
            return DailyMacroTargets()
        return stored or DailyMacroTargets()

    def save(
        self, user_id: UUID, day: str, targets: DailyMacroTargets
    ) -> DailyMacroTargets:
        """Persist the day's targets, replacing any previous values."""
        normalized = normalize_day(day)
        validated = targets.validated()
        self.repository.upsert_targets(user_id, normalized, validated)
        _logger.info(
            "Macro targets saved: user_id=%s day=%s protein=%s fat=%s calories=%s",
            user_id,
            normalized,
            validated.protein_level,
            validated.fat_level,
            validated.calorie_adjustment,
        )
        return validated
