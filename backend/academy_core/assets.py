from __future__ import annotations

import asyncio
import base64
import logging
import re
import time
from dataclasses import dataclass
from typing import Callable, Optional, Set

from .coordinator import PersistenceCoordinator
from .errors import AssetUploadFailed, RemoteRequestFailed, RemoteUnavailable, StorageMisconfigured
from .kinds import EntityKind
from .models import Record

logger = logging.getLogger(__name__)


def encode_placeholder(data: bytes, content_type: str = "image/png") -> str:
    """Return a ``data:`` URL that can be displayed before the upload finishes."""
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


def is_placeholder(value: object) -> bool:
    return isinstance(value, str) and value.startswith("data:")


def sanitize_name(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "_", name, flags=re.IGNORECASE).lower()


def asset_path(kind: EntityKind, display_name: str, now: float | None = None) -> str:
    """Storage path ``{folder}/{sanitized-name}-{epoch-seconds}.png``."""
    timestamp = int(time.time() if now is None else now)
    name = sanitize_name(display_name.strip()) or f"new_{kind.profile.singular}"
    return f"{kind.asset_folder}/{name}-{timestamp}.png"


@dataclass(frozen=True)
class AssetResolution:
    """Outcome of a finished upload, applied back onto the record by id."""

    kind: EntityKind
    record_id: str
    field: str
    placeholder: str
    url: str


@dataclass
class PendingUpload:
    record: Record
    task: Optional["asyncio.Task[Optional[Record]]"] = None


class AssetUploadPipeline:
    def __init__(
        self,
        coordinator: PersistenceCoordinator,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.coordinator = coordinator
        self._clock = clock
        # The event loop only keeps weak references to tasks.
        self._tasks: Set["asyncio.Task[Optional[Record]]"] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def attach_image(
        self,
        kind: EntityKind | str,
        record: Record,
        data: bytes,
        field: str | None = None,
        display_name: str | None = None,
        content_type: str = "image/png",
    ) -> PendingUpload:
        """Show ``data`` on ``record`` right away and resolve it in the background.

        The placeholder is written through the normal save path. When the
        remote service is available an upload task is started; it swaps the
        placeholder for the durable URL once storage answers. Upload failures
        keep the placeholder and are only logged.
        """
        kind = EntityKind.lookup(kind)
        field = field or kind.profile.image_field
        if not field or field not in type(record).model_fields:
            raise ValueError(f"{kind.value} records have no image field {field!r}")

        placeholder = encode_placeholder(data, content_type)
        staged = record.model_copy(update={field: placeholder})
        saved = await self.coordinator.save(kind, staged)

        if not self.coordinator.gateway.is_available():
            return PendingUpload(saved)

        name = display_name or self._default_name(kind, record, field)
        path = asset_path(kind, name, self._clock())
        task = asyncio.create_task(
            self._upload_and_apply(kind, saved, field, placeholder, path, data, content_type),
            name=f"asset-upload:{kind.value}:{record.id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return PendingUpload(saved, task)

    async def upload(
        self,
        kind: EntityKind,
        record_id: str,
        field: str,
        placeholder: str,
        path: str,
        data: bytes,
        content_type: str = "image/png",
    ) -> Optional[AssetResolution]:
        try:
            url = await self.coordinator.gateway.upload_asset(path, data, content_type)
        except StorageMisconfigured as exc:
            logger.warning("Image for %s %s kept locally: %s", kind.value, record_id, exc.diagnostic)
            return None
        except AssetUploadFailed as exc:
            logger.warning("Image upload for %s %s failed: %s", kind.value, record_id, exc.diagnostic)
            return None
        except RemoteUnavailable:
            logger.info("Supabase is not configured; image for %s %s stays local", kind.value, record_id)
            return None
        return AssetResolution(kind, record_id, field, placeholder, url)

    async def apply_resolution(
        self,
        resolution: AssetResolution,
    ) -> Optional[Record]:
        """Splice the durable URL into the *current* copy of the record."""
        current = self.coordinator.get(resolution.kind, resolution.record_id)
        if current is None:
            logger.info("%s %s disappeared before its upload finished", resolution.kind.value, resolution.record_id)
            return None
        if getattr(current, resolution.field, None) != resolution.placeholder:
            # A newer image replaced this placeholder in the meantime.
            return None

        updated = current.model_copy(update={resolution.field: resolution.url})
        try:
            return await self.coordinator.save(resolution.kind, updated)
        except RemoteRequestFailed as exc:
            logger.warning(
                "Could not store uploaded image URL for %s %s: %s",
                resolution.kind.value,
                resolution.record_id,
                exc.diagnostic,
            )
            return None

    async def _upload_and_apply(
        self,
        kind: EntityKind,
        placeholder_record: Record,
        field: str,
        placeholder: str,
        path: str,
        data: bytes,
        content_type: str,
    ) -> Optional[Record]:
        resolution = await self.upload(kind, placeholder_record.id, field, placeholder, path, data, content_type)
        if resolution is None:
            return None
        return await self.apply_resolution(resolution)

    @staticmethod
    def _default_name(kind: EntityKind, record: Record, field: str) -> str:
        if kind is EntityKind.BRANDING:
            return f"academy_{field.removesuffix('_url')}"
        return str(getattr(record, "name", "") or "")
