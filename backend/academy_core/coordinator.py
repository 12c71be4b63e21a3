from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, TypeVar, cast

import httpx

from .collection import EntityCollection
from .config import Settings, load_settings
from .errors import SyncError
from .gateway import RemoteRecordGateway, StorageHealth
from .kinds import EntityKind
from .local_cache import DurableLocalCache
from .models import BRANDING_ROW_ID, BrandingSettings, Officer, Record, Student
from .rules import attendance_for_date, sort_officers, toggle_attendance
from .seeds import seed_records
from .store import AcademyStore, Listener

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)


@dataclass
class LoadReport:
    """Where each kind's startup data came from (``remote`` or ``cache``)."""

    sources: Dict[EntityKind, str] = field(default_factory=dict)
    errors: Dict[EntityKind, str] = field(default_factory=dict)


class PersistenceCoordinator:
    """Routes every mutation through the remote service or the local cache.

    Whether the remote path is used is decided once, from configuration, when
    the coordinator is built. With the remote path active, a failed remote
    write raises :class:`RemoteRequestFailed` and leaves local state alone;
    in local-only mode writes always succeed.
    """

    def __init__(
        self,
        gateway: RemoteRecordGateway,
        cache: DurableLocalCache,
        store: AcademyStore | None = None,
    ) -> None:
        self.gateway = gateway
        self.cache = cache
        self.store = store or AcademyStore()
        self.remote_enabled = gateway.is_available()

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "PersistenceCoordinator":
        settings = settings or load_settings()
        gateway = RemoteRecordGateway(settings, transport=transport)
        cache = DurableLocalCache(settings.data_dir, settings.cache_prefix)
        return cls(gateway, cache)

    # ------------------------------------------------------------------
    # Startup

    async def load_all(self) -> LoadReport:
        """Populate every collection once, remote first, then cache or seed."""
        report = LoadReport()
        kinds = list(EntityKind)
        outcomes = await asyncio.gather(*(self._load_kind(kind) for kind in kinds))
        for kind, (source, error) in zip(kinds, outcomes):
            report.sources[kind] = source
            if error:
                report.errors[kind] = error
        return report

    async def _load_kind(self, kind: EntityKind) -> tuple[str, Optional[str]]:
        error: Optional[str] = None
        if self.remote_enabled:
            try:
                fetched = await self.gateway.fetch_all(kind)
            except SyncError as exc:
                logger.warning("Supabase fetch for %s failed (%s); using local fallback", kind.value, exc)
                error = str(exc)
            except Exception as exc:  # pragma: no cover - logging side effect
                logger.exception("Unexpected error fetching %s; using local fallback", kind.value)
                error = str(exc) or type(exc).__name__
            else:
                if fetched:
                    collection = self.store.snapshot(kind).replace_all(fetched)
                    self.store.replace(kind, collection)
                    self.cache.save(kind, collection.records())
                    return "remote", None
                logger.info("Supabase returned no %s rows; using local fallback", kind.value)

        records = self.cache.load(kind, seed_records(kind))
        self.store.replace(kind, self.store.snapshot(kind).replace_all(records))
        return "cache", error

    # ------------------------------------------------------------------
    # Mutations

    async def save(self, kind: EntityKind | str, record: R) -> R:
        """Upsert ``record`` and return the form that ended up in the store."""
        kind = EntityKind.lookup(kind)
        if not isinstance(record, kind.record_type):
            raise TypeError(f"{kind.value} expects {kind.record_type.__name__}, got {type(record).__name__}")

        saved: Record = record
        if self.remote_enabled:
            saved = await self.gateway.upsert_one(kind, record)

        self._apply(kind, self.store.snapshot(kind).upsert(saved))
        logger.debug("Saved %s %s", kind.value, saved.id)
        return cast(R, saved)

    async def delete(self, kind: EntityKind | str, record_id: str) -> None:
        kind = EntityKind.lookup(kind)
        if self.remote_enabled:
            await self.gateway.delete_one(kind, record_id)

        self._apply(kind, self.store.snapshot(kind).remove(record_id))
        logger.debug("Deleted %s %s", kind.value, record_id)

    async def save_branding(
        self,
        name: str,
        logo_url: str | None = None,
        banner_url: str | None = None,
    ) -> BrandingSettings:
        settings = BrandingSettings(id=BRANDING_ROW_ID, name=name, logo_url=logo_url, banner_url=banner_url)
        return await self.save(EntityKind.BRANDING, settings)

    async def toggle_attendance(self, student_id: str, date: str) -> Student:
        student = self.get(EntityKind.STUDENTS, student_id)
        if not isinstance(student, Student):
            raise KeyError(f"Unknown student: {student_id}")
        updated = student.model_copy(update={"attendance": toggle_attendance(student.attendance, date)})
        return await self.save(EntityKind.STUDENTS, updated)

    def _apply(self, kind: EntityKind, collection: EntityCollection[Record]) -> None:
        self.store.replace(kind, collection)
        self.cache.save(kind, collection.records())

    # ------------------------------------------------------------------
    # Reads

    def collection(self, kind: EntityKind | str) -> EntityCollection[Record]:
        return self.store.snapshot(EntityKind.lookup(kind))

    def get(self, kind: EntityKind | str, record_id: str) -> Optional[Record]:
        return self.collection(kind).get(record_id)

    @property
    def branding(self) -> BrandingSettings:
        current = self.get(EntityKind.BRANDING, BRANDING_ROW_ID)
        return current if isinstance(current, BrandingSettings) else BrandingSettings()

    def sorted_officers(self) -> List[Officer]:
        return sort_officers(cast(List[Officer], list(self.collection(EntityKind.OFFICERS))))

    def attendance_on(self, date: str) -> Dict[str, Optional[str]]:
        return attendance_for_date(cast(List[Student], list(self.collection(EntityKind.STUDENTS))), date)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.store.subscribe(listener)

    async def check_storage(self) -> StorageHealth:
        return await self.gateway.check_storage_health()
