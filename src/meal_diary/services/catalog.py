"""Per-user overlay over the shared food catalog."""

import logging
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from meal_diary.domain.catalog import (
    FoodData,
    FoodRef,
    FoodSource,
    FoodView,
    GlobalFood,
    UserFoodOverlay,
    merge_catalog,
)
from meal_diary.domain.errors import (
    InvalidArgumentError,
    NotFoundError,
    StoreUnavailableError,
)
from meal_diary.services.locks import KeyedLocks

_logger = logging.getLogger(__name__)


class CatalogRepository(Protocol):
    """Persistence interface for shared foods and user overlay rows."""

    def list_global_foods(self) -> list[GlobalFood]:
        """Return every shared catalog row."""

    def search_global_foods(self, term: str) -> list[GlobalFood]:
        """Return shared rows whose name contains term, ignoring case."""

    def get_global_food(self, food_id: int) -> GlobalFood | None:
        """Return a shared row by id, if present."""

    def find_global_foods_by_name(self, name: str) -> list[GlobalFood]:
        """Return shared rows with exactly this name."""

    def list_overlays(self, user_id: UUID) -> list[UserFoodOverlay]:
        """Return all overlay rows of a user, tombstones included."""

    def search_overlays(self, user_id: UUID, term: str) -> list[UserFoodOverlay]:
        """Return a user's overlay rows whose name contains term, ignoring case."""

    def get_overlay(self, user_id: UUID, overlay_id: int) -> UserFoodOverlay | None:
        """Return one of a user's overlay rows by id, if present."""

    def find_overlays_by_name(
        self, user_id: UUID, name: str
    ) -> list[UserFoodOverlay]:
        """Return a user's overlay rows with exactly this name."""

    def create_overlay(
        self, user_id: UUID, food: FoodData, *, is_custom: bool, is_deleted: bool
    ) -> UserFoodOverlay:
        """Insert an overlay row and return it."""

    def update_overlay(self, overlay_id: int, food: FoodData) -> UserFoodOverlay:
        """Replace the food fields of an overlay row, leaving it live, and return it."""

    def delete_overlay(self, overlay_id: int) -> None:
        """Hard-delete an overlay row."""


@dataclass
class FoodCatalogService:
    """Resolves and mutates a user's effective food catalog.

    Shared rows are never modified. Editing one inserts a private copy for
    the user and deleting one inserts a tombstone that hides it for that user
    only. Every mutation of one user's catalog runs under that user's lock.
    """

    repository: CatalogRepository
    search_limit: int = 50
    locks: KeyedLocks = field(default_factory=KeyedLocks)

    def list_effective(self, user_id: UUID) -> list[FoodView]:
        """Return the user's merged catalog sorted by name."""
        try:
            return self._effective(user_id)
        except StoreUnavailableError as exc:
            _logger.warning("Catalog unavailable for user_id=%s: %s", user_id, exc)
            return []

    def search(
        self, term: str, user_id: UUID, limit: int | None = None
    ) -> list[FoodView]:
        """Search the effective catalog by case-insensitive substring."""
        cap = self.search_limit if limit is None else limit
        cleaned = term.strip()
        try:
            if not cleaned:
                views = self._effective(user_id)
            else:
                views = merge_catalog(
                    self.repository.search_global_foods(cleaned),
                    self.repository.search_overlays(user_id, cleaned),
                )
        except StoreUnavailableError as exc:
            _logger.warning(
                "Catalog search unavailable for user_id=%s: %s", user_id, exc
            )
            return []
        return views[:cap]

    def add_custom(self, user_id: UUID, food: FoodData) -> FoodView:
        """Create a user-authored item. Duplicate names are allowed."""
        food = food.validated()
        with self.locks.hold(user_id):
            created = self.repository.create_overlay(
                user_id, food, is_custom=True, is_deleted=False
            )
        _logger.info(
            "Catalog custom item added: user_id=%s name=%s", user_id, food.name
        )
        return FoodView.from_overlay(created)

    def update(self, user_id: UUID, ref: FoodRef, food: FoodData) -> FoodView:
        """Edit an entry, copying shared rows on first write."""
        food = food.validated()
        with self.locks.hold(user_id):
            return self._update(user_id, ref, food)

    def delete(self, user_id: UUID, ref: FoodRef) -> None:
        """Remove an entry from the user's catalog."""
        with self.locks.hold(user_id):
            self._delete(user_id, ref)

    def update_at(self, user_id: UUID, index: int, food: FoodData) -> FoodView:
        """Edit the entry at a position of the freshly merged catalog."""
        food = food.validated()
        with self.locks.hold(user_id):
            ref = self._ref_at(user_id, index)
            return self._update(user_id, ref, food)

    def delete_at(self, user_id: UUID, index: int) -> None:
        """Remove the entry at a position of the freshly merged catalog."""
        with self.locks.hold(user_id):
            ref = self._ref_at(user_id, index)
            self._delete(user_id, ref)

    def _effective(self, user_id: UUID) -> list[FoodView]:
        return merge_catalog(
            self.repository.list_global_foods(),
            self.repository.list_overlays(user_id),
        )

    def _ref_at(self, user_id: UUID, index: int) -> FoodRef:
        views = self._effective(user_id)
        if index < 0 or index >= len(views):
            raise NotFoundError(f"No catalog entry at position {index}")
        return views[index].ref

    def _update(self, user_id: UUID, ref: FoodRef, food: FoodData) -> FoodView:
        if ref.source is FoodSource.USER:
            overlay = self._require_overlay(user_id, ref.id)
            renamed = not overlay.is_custom and overlay.name != food.name
            if renamed:
                tombstone = self._tombstone_holding(user_id, food.name, overlay.id)
                if tombstone is not None:
                    # The renamed copy takes over hiding the shared row.
                    self.repository.delete_overlay(tombstone.id)
            updated = self.repository.update_overlay(overlay.id, food)
            if renamed:
                self._hide_shared_name(user_id, overlay.name)
            return FoodView.from_overlay(updated)

        shared = self._require_visible_global(user_id, ref.id)
        tombstone = None
        if food.name != shared.name:
            tombstone = self._tombstone_holding(user_id, food.name)
        if tombstone is not None:
            copy = self.repository.update_overlay(tombstone.id, food)
        else:
            copy = self.repository.create_overlay(
                user_id, food, is_custom=False, is_deleted=False
            )
        if food.name != shared.name:
            self._hide_shared_name(user_id, shared.name)
        _logger.info(
            "Catalog copy-on-write: user_id=%s food_id=%s name=%s",
            user_id,
            shared.id,
            food.name,
        )
        return FoodView.from_overlay(copy)

    def _tombstone_holding(
        self, user_id: UUID, name: str, current_id: int | None = None
    ) -> UserFoodOverlay | None:
        """Return the tombstone holding name, if any.

        At most one non-custom row may carry a name per user, so a live copy
        already holding it is an InvalidArgumentError.
        """
        for overlay in self.repository.find_overlays_by_name(user_id, name):
            if overlay.is_custom or overlay.id == current_id:
                continue
            if not overlay.is_deleted:
                raise InvalidArgumentError(f"A copy named {name!r} already exists")
            return overlay
        return None

    def _delete(self, user_id: UUID, ref: FoodRef) -> None:
        if ref.source is FoodSource.USER:
            overlay = self._require_overlay(user_id, ref.id)
            self.repository.delete_overlay(overlay.id)
            _logger.info(
                "Catalog overlay deleted: user_id=%s overlay_id=%s", user_id, overlay.id
            )
            return

        shared = self._require_visible_global(user_id, ref.id)
        self._write_tombstone(user_id, shared.name)

    def _require_overlay(self, user_id: UUID, overlay_id: int) -> UserFoodOverlay:
        overlay = self.repository.get_overlay(user_id, overlay_id)
        if overlay is None or overlay.is_deleted:
            raise NotFoundError(f"No user food with id {overlay_id}")
        return overlay

    def _require_visible_global(self, user_id: UUID, food_id: int) -> GlobalFood:
        shared = self.repository.get_global_food(food_id)
        if shared is None:
            raise NotFoundError(f"No catalog food with id {food_id}")
        if self.repository.find_overlays_by_name(user_id, shared.name):
            # Already copied, replaced or hidden for this user.
            raise NotFoundError(f"Catalog food {food_id} is shadowed for this user")
        return shared

    def _hide_shared_name(self, user_id: UUID, name: str) -> None:
        if not self.repository.find_global_foods_by_name(name):
            return
        if self.repository.find_overlays_by_name(user_id, name):
            return
        self._write_tombstone(user_id, name)

    def _write_tombstone(self, user_id: UUID, name: str) -> None:
        self.repository.create_overlay(
            user_id, FoodData(name=name), is_custom=False, is_deleted=True
        )
        _logger.info("Catalog tombstone written: user_id=%s name=%s", user_id, name)
