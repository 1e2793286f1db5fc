"""Local-first document store with whole-document sync."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from cutboard.adapters.file_cache import JsonFileCache
from cutboard.adapters.sync_client import HttpxSyncClient, SyncClient, SyncError
from cutboard.domain.document import (
    AppData,
    DayType,
    default_document,
    parse_timestamp,
    utc_timestamp,
)
from cutboard.domain.plans import DaySnapshot, ItemOverride, MealPlan, round_half_up
from cutboard.services import analytics, operations
from cutboard.services.cache import InMemoryLocalCache, LocalCache
from cutboard.services.migrations import DocumentError, migrate_document

SYNC_FAILED_MESSAGE = "Sync failed"

_logger = logging.getLogger(__name__)


def is_local_newer(local: AppData | None, server: AppData) -> bool:
    """Return True when both sides carry lastSync and local is strictly newer."""
    if local is None:
        return False
    local_sync = parse_timestamp(local.last_sync)
    server_sync = parse_timestamp(server.last_sync)
    if local_sync is None or server_sync is None:
        return False
    return local_sync > server_sync


@dataclass
class DataStore:
    """Holds the user document, caches it locally and mirrors it remotely.

    Mutations are optimistic: the new document is visible and cached before
    the remote save completes. A failed save restores the previous document
    in memory and in the cache and records ``last_sync_error``.
    """

    cache: LocalCache
    sync_client: SyncClient
    stale_after_seconds: float = 60
    clock: Callable[[], float] = time.monotonic
    data: AppData = field(init=False)
    is_loading: bool = field(init=False, default=False)
    is_syncing: bool = field(init=False, default=False)
    last_sync_error: str | None = field(init=False, default=None)
    _fetched_at: float | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        self.data = self._read_local() or default_document()

    @classmethod
    def create(
        cls, base_url: str, token: str, cache_path: Path | None = None
    ) -> "DataStore":
        """Create a store talking to a CutBoard server."""
        cache: LocalCache = (
            JsonFileCache(cache_path) if cache_path else InMemoryLocalCache()
        )
        return cls(cache=cache, sync_client=HttpxSyncClient.create(base_url, token))

    async def load(self, force: bool = False) -> AppData:
        """Reconcile local and remote documents unless the last fetch is fresh."""
        if not force and self._is_fresh():
            return self.data
        self.is_loading = True
        try:
            self.data = await self._fetch()
            self._fetched_at = self.clock()
        finally:
            self.is_loading = False
        return self.data

    async def force_sync(self) -> AppData:
        """Refetch regardless of freshness."""
        return await self.load(force=True)

    async def close(self) -> None:
        """Close the sync client."""
        await self.sync_client.close()

    async def update(self, updater: Callable[[AppData], AppData]) -> AppData:
        """Apply a pure update, then persist it with rollback on failure.

        Saving and rollback only touch memory while no newer mutation has
        replaced this update; the newer one saves its own document.
        """
        previous = self.data
        updated = updater(previous)
        if updated is previous:
            return previous

        self.data = updated
        self.cache.write(updated.to_json_dict())
        self.is_syncing = True
        try:
            saved = await self._save(updated)
            self.last_sync_error = None
            if self.data is updated:
                self.data = saved
        except SyncError:
            _logger.exception("Sync error, rolling back")
            if self.data is updated:
                self.data = previous
            self.last_sync_error = SYNC_FAILED_MESSAGE
        finally:
            self.is_syncing = False
        self.cache.write(self.data.to_json_dict())
        return self.data

    async def update_profile(self, **changes: object) -> AppData:
        return await self.update(lambda doc: operations.update_profile(doc, **changes))

    async def add_weight(self, day: str, weight: float) -> AppData:
        return await self.update(lambda doc: operations.add_weight(doc, day, weight))

    async def toggle_checklist_item(self, day: str, item_id: str) -> AppData:
        return await self.update(
            lambda doc: operations.toggle_checklist_item(doc, day, item_id)
        )

    async def set_checklist_items(self, day: str, items: list[str]) -> AppData:
        return await self.update(
            lambda doc: operations.set_checklist_items(doc, day, items)
        )

    async def set_extra_calories(self, day: str, calories: float) -> AppData:
        return await self.update(
            lambda doc: operations.set_extra_calories(doc, day, calories)
        )

    async def set_day_type(self, day: str, value: DayType) -> AppData:
        return await self.update(lambda doc: operations.set_day_type(doc, day, value))

    async def create_plan(self, plan: MealPlan) -> AppData:
        return await self.update(lambda doc: operations.save_plan(doc, plan))

    async def update_plan(self, plan: MealPlan) -> AppData:
        return await self.update(lambda doc: operations.save_plan(doc, plan))

    async def delete_plan(self, plan_id: str) -> AppData:
        return await self.update(lambda doc: operations.delete_plan(doc, plan_id))

    async def set_day_plan_id(self, day: str, plan_id: str) -> AppData:
        return await self.update(
            lambda doc: operations.set_day_plan_id(doc, day, plan_id)
        )

    async def set_day_override(
        self,
        day: str,
        item_id: str,
        quantity: float | None = None,
        alternative_id: str | None = None,
    ) -> AppData:
        return await self.update(
            lambda doc: operations.set_day_override(
                doc, day, item_id, quantity=quantity, alternative_id=alternative_id
            )
        )

    async def remove_day_override(self, day: str, item_id: str) -> AppData:
        return await self.update(
            lambda doc: operations.remove_day_override(doc, day, item_id)
        )

    async def ensure_day_snapshot(self, day: str) -> AppData:
        return await self.update(lambda doc: operations.ensure_day_snapshot(doc, day))

    async def set_shopping_plan_days(self, plan_id: str, days: int) -> AppData:
        return await self.update(
            lambda doc: operations.set_shopping_plan_days(doc, plan_id, days)
        )

    async def set_shopping_at_home(self, item_key: str, quantity: float) -> AppData:
        return await self.update(
            lambda doc: operations.set_shopping_at_home(doc, item_key, quantity)
        )

    async def toggle_shopping_item(self, item_key: str) -> AppData:
        return await self.update(
            lambda doc: operations.toggle_shopping_item(doc, item_key)
        )

    async def reset_shopping(self) -> AppData:
        return await self.update(operations.reset_shopping)

    async def refresh_calculated_tdee(self, today: date | None = None) -> AppData:
        """Store the adaptive TDEE estimate on the profile when one exists."""
        estimate = analytics.adaptive_tdee(self.data, today=today)
        if estimate is None:
            return self.data
        calculated = int(round_half_up(estimate.tdee))
        if self.data.profile.calculated_tdee == calculated:
            return self.data
        return await self.update_profile(calculated_tdee=calculated)

    def checklist_items(self, day: str, plan_id: str | None = None) -> list[str]:
        return operations.checklist_items(self.data, day, plan_id)

    def day_type(self, day: str) -> DayType:
        return operations.day_type(self.data, day)

    def day_plan_id(self, day: str) -> str:
        return operations.day_plan_id(self.data, day)

    def day_plan(self, day: str) -> MealPlan:
        return operations.day_plan(self.data, day)

    def day_snapshot(self, day: str, plan_id: str | None = None) -> DaySnapshot | None:
        return operations.day_snapshot(self.data, day, plan_id)

    def day_overrides(self, day: str) -> list[ItemOverride]:
        return operations.day_overrides(self.data, day)

    def _is_fresh(self) -> bool:
        if self._fetched_at is None:
            return False
        return self.clock() - self._fetched_at < self.stale_after_seconds

    def _read_local(self) -> AppData | None:
        raw = self.cache.read()
        if raw is None:
            return None
        try:
            return migrate_document(raw)
        except DocumentError:
            _logger.exception("Failed to load cached document")
            return None

    async def _fetch(self) -> AppData:
        local = self._read_local()
        try:
            raw = await self.sync_client.fetch()
            if raw:
                server = migrate_document(raw)
                if is_local_newer(local, server):
                    _logger.info("Local data is newer, keeping it")
                    return local
                self.cache.write(server.to_json_dict())
                return server
        except (SyncError, DocumentError):
            _logger.exception("Failed to fetch from server")
        return local or default_document()

    async def _save(self, doc: AppData) -> AppData:
        stamped = doc.model_copy(update={"last_sync": utc_timestamp()})
        self.cache.write(stamped.to_json_dict())
        last_sync = await self.sync_client.push(stamped.to_json_dict())
        final = stamped.model_copy(update={"last_sync": last_sync})
        self.cache.write(final.to_json_dict())
        return final
