"""Dependency container wiring for the application."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from supabase import create_client

from meal_diary.adapters.supabase_catalog_repository import SupabaseCatalogRepository
from meal_diary.adapters.supabase_daily_macro_repository import (
    SupabaseDailyMacroRepository,
)
from meal_diary.adapters.supabase_slot_repository import SupabaseSlotRepository
from meal_diary.adapters.supabase_store import SupabaseStoreProbe
from meal_diary.config import Settings
from meal_diary.domain.readiness import StoreReadiness
from meal_diary.services.catalog import FoodCatalogService
from meal_diary.services.macros import DailyMacroService
from meal_diary.services.slots import MealSlotScheduler

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    catalog_service: FoodCatalogService
    macro_service: DailyMacroService
    slot_scheduler: MealSlotScheduler
    probe_store: Callable[[], StoreReadiness]
    readiness: StoreReadiness | None = None

    def initialize(self) -> StoreReadiness:
        """Probe the store and, when it is reachable, repair legacy slot rows."""
        readiness = self.probe_store()
        self.readiness = readiness
        if not readiness.ready:
            _logger.warning("Store not ready: %s", readiness.detail)
            return readiness
        _logger.info("Store ready")
        self.slot_scheduler.repair_legacy_rows()
        return readiness


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    catalog_repository = SupabaseCatalogRepository(supabase_client)
    slot_repository = SupabaseSlotRepository(supabase_client)
    macro_repository = SupabaseDailyMacroRepository(supabase_client)
    catalog_service = FoodCatalogService(
        repository=catalog_repository,
        search_limit=resolved_settings.search_result_limit,
    )
    macro_service = DailyMacroService(macro_repository)
    slot_scheduler = MealSlotScheduler(
        repository=slot_repository,
        macro_service=macro_service,
    )
    probe = SupabaseStoreProbe(supabase_client)

    return AppContainer(
        settings=resolved_settings,
        catalog_service=catalog_service,
        macro_service=macro_service,
        slot_scheduler=slot_scheduler,
        probe_store=probe.check,
    )
