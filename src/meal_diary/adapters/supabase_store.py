"""Shared Supabase helpers: transport error translation and readiness probe."""

import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import ParamSpec, TypeVar

import httpx
from supabase import Client

from meal_diary.domain.errors import StoreUnavailableError
from meal_diary.domain.readiness import StoreReadiness

_logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def store_call(func: Callable[P, R]) -> Callable[P, R]:
    """Translate Supabase transport failures into StoreUnavailableError."""

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except httpx.TransportError as exc:
            raise StoreUnavailableError(str(exc) or type(exc).__name__) from exc

    return wrapper


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO timestamp column, tolerating empty values."""
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None


@dataclass
class SupabaseStoreProbe:
    """Checks that the catalog and slot tables are reachable."""

    client: Client
    tables: tuple[str, ...] = ("foods", "user_foods", "meal_slot_entries")

    def check(self) -> StoreReadiness:
        """Run a cheap select against each table."""
        for table in self.tables:
            try:
                self.client.table(table).select("id").limit(1).execute()
            except Exception as exc:
                _logger.exception("Store readiness probe failed on table=%s", table)
                return StoreReadiness(ready=False, detail=f"{table}: {exc}")
        return StoreReadiness(ready=True)
