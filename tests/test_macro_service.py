"""Tests for per-day macro targets."""

from uuid import uuid4

import pytest

from meal_diary.domain.errors import InvalidArgumentError, StoreUnavailableError
from meal_diary.domain.macros import DailyMacroTargets
from meal_diary.services.macros import DailyMacroService
from tests.conftest import InMemoryDailyMacroRepository


def test_get_defaults_when_nothing_stored(macro_service: DailyMacroService) -> None:
    targets = macro_service.get(uuid4(), "monday")

    assert targets == DailyMacroTargets(None, None, 0)


def test_rapid_saves_leave_one_row_with_latest_values(
    macro_service: DailyMacroService,
    macro_repository: InMemoryDailyMacroRepository,
) -> None:
    user_id = uuid4()

    macro_service.save(user_id, "Wednesday", DailyMacroTargets(2.0, 1.0, 0))
    macro_service.save(user_id, "wednesday", DailyMacroTargets(2.2, 0.8, -250))

    assert list(macro_repository.rows) == [(user_id, "wednesday")]
    assert macro_service.get(user_id, "wednesday") == DailyMacroTargets(
        2.2, 0.8, -250
    )


def test_save_keeps_unset_levels_empty(macro_service: DailyMacroService) -> None:
    saved = macro_service.save(
        uuid4(), "friday", DailyMacroTargets(calorie_adjustment=200)
    )

    assert saved.protein_level is None
    assert saved.fat_level is None


@pytest.mark.parametrize(
    "targets",
    [DailyMacroTargets(protein_level=0), DailyMacroTargets(fat_level=-1.5)],
)
def test_save_rejects_non_positive_levels(
    macro_service: DailyMacroService, targets: DailyMacroTargets
) -> None:
    with pytest.raises(InvalidArgumentError):
        macro_service.save(uuid4(), "friday", targets)


def test_save_rejects_unknown_day(macro_service: DailyMacroService) -> None:
    with pytest.raises(InvalidArgumentError):
        macro_service.save(uuid4(), "someday", DailyMacroTargets())


def test_store_outage_reads_defaults_and_fails_writes(
    macro_service: DailyMacroService,
    macro_repository: InMemoryDailyMacroRepository,
) -> None:
    macro_repository.unavailable = True

    assert macro_service.get(uuid4(), "monday") == DailyMacroTargets()
    with pytest.raises(StoreUnavailableError):
        macro_service.save(uuid4(), "monday", DailyMacroTargets(2.0))
