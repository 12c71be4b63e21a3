from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

from .kinds import EntityKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Connection and storage settings, read once at startup."""

    supabase_url: str = ""
    supabase_key: str = ""
    supabase_schema: str = "public"
    assets_bucket: str = "academy-assets"
    data_dir: Path = Path("data")
    cache_prefix: str = "talons"
    http_timeout: float = 10.0
    tables: Dict[EntityKind, str] = field(default_factory=dict)

    @property
    def remote_configured(self) -> bool:
        url = self.supabase_url
        return bool(
            url
            and self.supabase_key
            and url.startswith("https://")
            and "placeholder" not in url
            and not any(ch.isspace() for ch in url)
        )

    def table_for(self, kind: EntityKind) -> str:
        return self.tables.get(kind) or kind.value


def load_settings() -> Settings:
    """Build :class:`Settings` from the process environment."""

    supabase_url = os.getenv("SUPABASE_URL", "").strip()
    supabase_key = (
        os.getenv("SUPABASE_SERVICE_ROLE_KEY")
        or os.getenv("SUPABASE_SERVICE_KEY")
        or os.getenv("SUPABASE_ANON_KEY")
        or ""
    ).strip()

    if any(ch.isspace() for ch in supabase_url + supabase_key):
        logger.error(
            "Supabase configuration contains spaces; check SUPABASE_URL and the Supabase key"
        )

    tables: Dict[EntityKind, str] = {}
    for kind in EntityKind:
        override = os.getenv(f"SUPABASE_{kind.name}_TABLE", "").strip()
        if override:
            tables[kind] = override

    timeout_raw = os.getenv("ACADEMY_HTTP_TIMEOUT", "").strip()
    try:
        http_timeout = float(timeout_raw) if timeout_raw else 10.0
    except ValueError:
        logger.warning("Ignoring invalid ACADEMY_HTTP_TIMEOUT=%r", timeout_raw)
        http_timeout = 10.0

    return Settings(
        supabase_url=supabase_url,
        supabase_key=supabase_key,
        supabase_schema=os.getenv("SUPABASE_SCHEMA", "public").strip() or "public",
        assets_bucket=os.getenv("SUPABASE_ASSETS_BUCKET", "academy-assets").strip() or "academy-assets",
        data_dir=Path(os.getenv("ACADEMY_DATA_DIR", "data")),
        cache_prefix=os.getenv("ACADEMY_CACHE_PREFIX", "talons").strip() or "talons",
        http_timeout=http_timeout,
        tables=tables,
    )
