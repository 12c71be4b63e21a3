from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence, TypeVar

from pydantic import ValidationError

from .errors import LocalCacheCorrupt
from .kinds import EntityKind
from .models import Record

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)


class DurableLocalCache:
    """Mirrors each entity collection as a JSON snapshot on disk.

    Snapshots live at ``{data_dir}/{prefix}_{cache_key}.json``. The branding
    singleton is stored as a single object under its own key; every other
    kind is stored as a list of records, keyed the same way as remote rows.
    """

    def __init__(self, data_dir: Path, prefix: str = "talons") -> None:
        self.data_dir = Path(data_dir)
        self.prefix = prefix

    def key_for(self, kind: EntityKind | str) -> str:
        return f"{self.prefix}_{EntityKind.lookup(kind).cache_key}"

    def path_for(self, kind: EntityKind | str) -> Path:
        return self.data_dir / f"{self.key_for(kind)}.json"

    def save(self, kind: EntityKind | str, records: Sequence[Record]) -> bool:
        """Write the full collection for ``kind``; returns ``False`` on I/O failure."""
        kind = EntityKind.lookup(kind)
        payload: Any
        rows = [kind.dump(record) for record in records]
        if kind.is_singleton:
            payload = rows[0] if rows else None
        else:
            payload = rows

        path = self.path_for(kind)
        try:
            self._write_json_file(path, payload)
        except OSError as exc:
            logger.warning("Local cache write failed for %s: %s", path, exc)
            return False
        return True

    def load(self, kind: EntityKind | str, fallback: List[R]) -> List[R]:
        """Return the stored collection for ``kind`` or ``fallback``.

        Missing, empty, ``null`` or malformed snapshots all yield ``fallback``.
        Invalid rows are skipped; the rest of the snapshot still loads.
        """
        kind = EntityKind.lookup(kind)
        path = self.path_for(kind)
        try:
            records = self._decode(kind, path)
        except LocalCacheCorrupt as exc:
            logger.warning("Falling back to default for %s: %s", path, exc.reason)
            return fallback
        if records is None:
            return fallback
        return records  # type: ignore[return-value]

    def clear(self, kind: EntityKind | str) -> None:
        path = self.path_for(kind)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:  # pragma: no cover - unlikely but logged for diagnosis
            logger.warning("Failed to remove local cache %s: %s", path, exc)

    # ------------------------------------------------------------------

    def _decode(self, kind: EntityKind, path: Path) -> Optional[List[Record]]:
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise LocalCacheCorrupt(path, f"read error: {exc}") from exc

        if not text.strip():
            return None
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise LocalCacheCorrupt(path, f"malformed JSON: {exc}") from exc

        if data is None:
            return None
        if kind.is_singleton and isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            raise LocalCacheCorrupt(path, f"expected a list, found {type(data).__name__}")

        records: List[Record] = []
        for index, row in enumerate(data):
            try:
                records.append(kind.parse(row))
            except ValidationError as exc:
                logger.warning("Skipping invalid row %d in %s: %s", index, path, exc.error_count())
        if data and not records:
            raise LocalCacheCorrupt(path, f"none of {len(data)} row(s) are valid records")
        return records

    def _write_json_file(self, path: Path, data: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2, sort_keys=True)
        tmp_path.replace(path)
