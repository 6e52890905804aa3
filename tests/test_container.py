"""Tests for container wiring and store initialization."""

from uuid import uuid4

import pytest

from meal_diary.containers import AppContainer, build_container
from meal_diary.domain.errors import StoreUnavailableError
from meal_diary.domain.readiness import StoreReadiness
from tests.conftest import InMemorySlotRepository


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.catalog_service.search_limit == settings.search_result_limit
    assert container.slot_scheduler.macro_service is container.macro_service
    assert container.readiness is None


def test_initialize_repairs_legacy_rows_when_ready(
    container: AppContainer, slot_repository: InMemorySlotRepository
) -> None:
    slot_repository.add_legacy_entry(uuid4(), "monday", "08:20", "Porridge")

    readiness = container.initialize()

    assert readiness.ready is True
    assert container.readiness == readiness
    assert [slot_id for _, slot_id in slot_repository.assigned] == [1]


def test_initialize_skips_repair_when_store_down(
    container: AppContainer, slot_repository: InMemorySlotRepository
) -> None:
    slot_repository.add_legacy_entry(uuid4(), "monday", "08:20", "Porridge")
    container.probe_store = lambda: StoreReadiness(ready=False, detail="timeout")

    readiness = container.initialize()

    assert readiness == StoreReadiness(ready=False, detail="timeout")
    assert slot_repository.assigned == []


def test_initialize_records_readiness_before_repair(
    container: AppContainer, slot_repository: InMemorySlotRepository
) -> None:
    slot_repository.unavailable = True

    with pytest.raises(StoreUnavailableError):
        container.initialize()

    assert container.readiness == StoreReadiness(ready=True)
