from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from .config import Settings
from .errors import (
    AssetUploadFailed,
    RemoteRequestFailed,
    RemoteUnavailable,
    StorageMisconfigured,
)
from .kinds import EntityKind
from .models import Record

logger = logging.getLogger(__name__)


class StorageStatus(str, Enum):
    OK = "ok"
    MISCONFIGURED = "misconfigured"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True)
class StorageHealth:
    status: StorageStatus
    message: str

    @property
    def ok(self) -> bool:
        return self.status is StorageStatus.OK


class RemoteRecordGateway:
    """Per-kind access to the Supabase tables and the asset bucket.

    Every call opens a short-lived ``httpx.AsyncClient``. ``transport`` is
    handed to the client unchanged, which lets callers point the gateway at
    an in-process fake.
    """

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.settings = settings
        self._transport = transport

    def is_available(self) -> bool:
        """Configuration-only capability check; never touches the network."""
        return self.settings.remote_configured

    # ------------------------------------------------------------------
    # Records

    async def fetch_all(self, kind: EntityKind) -> List[Record]:
        self._require_configured()
        table = self.settings.table_for(kind)
        endpoint = self._supabase_endpoint(table)
        headers = self._supabase_headers(include_content_profile=False)

        try:
            async with self._client() as client:
                response = await client.get(endpoint, params={"select": "*"}, headers=headers)
                response.raise_for_status()
                rows = response.json()
        except httpx.HTTPStatusError as exc:
            raise self._rejected("fetch", table, exc) from exc
        except httpx.HTTPError as exc:
            raise self._transport_failed("fetch", table, exc) from exc
        except ValueError as exc:
            raise RemoteRequestFailed(f"Supabase returned invalid JSON for '{table}'") from exc

        if not isinstance(rows, list):
            raise RemoteRequestFailed(
                f"Supabase returned unexpected payload for '{table}': {type(rows).__name__}"
            )

        records: List[Record] = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            try:
                records.append(kind.parse(row))
            except ValidationError as exc:
                logger.warning("Skipping invalid %s row %r: %s", table, row.get("id"), exc)
        return records

    async def upsert_one(self, kind: EntityKind, record: Record) -> Record:
        """Insert or update ``record`` and return the stored representation."""
        self._require_configured()
        table = self.settings.table_for(kind)
        endpoint = self._supabase_endpoint(table)
        headers = self._supabase_headers("resolution=merge-duplicates,return=representation")
        headers["Content-Type"] = "application/json"
        payload = kind.dump(record)

        try:
            async with self._client() as client:
                response = await client.post(
                    endpoint, params={"on_conflict": "id"}, json=payload, headers=headers
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise self._rejected("upsert", table, exc) from exc
        except httpx.HTTPError as exc:
            raise self._transport_failed("upsert", table, exc) from exc

        try:
            rows = response.json()
        except ValueError:
            rows = None

        row: Optional[Dict[str, Any]] = None
        if isinstance(rows, list) and rows and isinstance(rows[0], dict):
            row = rows[0]
        elif isinstance(rows, dict):
            row = rows
        if row is None:
            return record

        try:
            return kind.parse(row)
        except ValidationError as exc:
            logger.warning("Supabase returned an unparseable %s row; keeping sent record: %s", table, exc)
            return record

    async def delete_one(self, kind: EntityKind, record_id: str) -> None:
        self._require_configured()
        table = self.settings.table_for(kind)
        endpoint = self._supabase_endpoint(table)
        headers = self._supabase_headers()

        try:
            async with self._client() as client:
                response = await client.delete(endpoint, params={"id": f"eq.{record_id}"}, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise self._rejected("delete", table, exc) from exc
        except httpx.HTTPError as exc:
            raise self._transport_failed("delete", table, exc) from exc

    # ------------------------------------------------------------------
    # Assets

    def public_url(self, path: str) -> str:
        base = self.settings.supabase_url.rstrip("/")
        return f"{base}/storage/v1/object/public/{self.settings.assets_bucket}/{quote(path)}"

    async def upload_asset(self, path: str, data: bytes, content_type: str = "image/png") -> str:
        """Upload ``data`` to the asset bucket (replacing any object at ``path``)."""
        if not self.is_available():
            raise RemoteUnavailable("Supabase is not configured; image stays local")

        bucket = self.settings.assets_bucket
        base = self.settings.supabase_url.rstrip("/")
        endpoint = f"{base}/storage/v1/object/{bucket}/{quote(path)}"
        headers = {
            "apikey": self.settings.supabase_key,
            "Authorization": f"Bearer {self.settings.supabase_key}",
            "Content-Type": content_type,
            "cache-control": "3600",
            "x-upsert": "true",
        }

        try:
            async with self._client() as client:
                response = await client.post(endpoint, content=data, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            detail = self._extract_supabase_detail(exc.response) or f"HTTP {status_code}"
            if self._is_missing_bucket(status_code, detail):
                raise StorageMisconfigured(self._missing_bucket_message(), status_code) from exc
            raise AssetUploadFailed(f"Upload failed: {detail}", status_code) from exc
        except httpx.HTTPError as exc:
            raise AssetUploadFailed(f"CORS/Network error during upload: {self._describe(exc)}") from exc

        return self.public_url(path)

    async def check_storage_health(self) -> StorageHealth:
        if not self.is_available():
            return StorageHealth(StorageStatus.MISCONFIGURED, "Remote storage is not configured.")

        bucket = self.settings.assets_bucket
        endpoint = f"{self.settings.supabase_url.rstrip('/')}/storage/v1/bucket/{bucket}"
        headers = self._supabase_headers(include_content_profile=False)

        try:
            async with self._client() as client:
                response = await client.get(endpoint, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            detail = self._extract_supabase_detail(exc.response) or f"HTTP {status_code}"
            if self._is_missing_bucket(status_code, detail):
                return StorageHealth(StorageStatus.MISCONFIGURED, self._missing_bucket_message())
            if status_code >= 500:
                return StorageHealth(
                    StorageStatus.UNREACHABLE, f"STORAGE UNAVAILABLE: Supabase answered {status_code}."
                )
            return StorageHealth(StorageStatus.MISCONFIGURED, f"STORAGE ERROR: {detail}")
        except httpx.HTTPError as exc:
            logger.warning("Storage health probe failed (%s)", exc)
            return StorageHealth(
                StorageStatus.UNREACHABLE,
                "CORS/NETWORK ERROR: the storage service could not be reached. "
                "Check network access and 'Allowed Origins' in Supabase.",
            )

        return StorageHealth(StorageStatus.OK, "Storage is correctly configured and accessible!")

    # ---- internal Supabase helpers -------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.settings.http_timeout, transport=self._transport)

    def _require_configured(self) -> None:
        if not self.is_available():
            raise RemoteUnavailable("Supabase is not configured")

    def _supabase_endpoint(self, table: str) -> str:
        return f"{self.settings.supabase_url.rstrip('/')}/rest/v1/{table}"

    def _supabase_headers(self, prefer: str | None = None, include_content_profile: bool = True) -> Dict[str, str]:
        key = self.settings.supabase_key
        schema = self.settings.supabase_schema
        headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Accept": "application/json",
        }
        if include_content_profile and schema and schema != "public":
            headers["Content-Profile"] = schema
        if schema and schema != "public":
            headers["Accept-Profile"] = schema
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _missing_bucket_message(self) -> str:
        return (
            f"BUCKET MISSING: Create a bucket named '{self.settings.assets_bucket}' in Supabase Storage."
        )

    @staticmethod
    def _is_missing_bucket(status_code: int, detail: str) -> bool:
        message = detail.lower()
        return "bucket not found" in message or (status_code == 404 and "not found" in message)

    def _rejected(self, action: str, table: str, exc: httpx.HTTPStatusError) -> RemoteRequestFailed:
        status_code = exc.response.status_code
        detail = self._extract_supabase_detail(exc.response) or f"HTTP {status_code}"
        return RemoteRequestFailed(
            f"Supabase rejected {action} on '{table}' ({status_code}): {detail}", status_code
        )

    def _transport_failed(self, action: str, table: str, exc: httpx.HTTPError) -> RemoteRequestFailed:
        return RemoteRequestFailed(f"Supabase {action} on '{table}' failed: {self._describe(exc)}")

    @staticmethod
    def _describe(exc: Exception) -> str:
        text = str(exc).strip()
        return f"{type(exc).__name__}: {text}" if text else type(exc).__name__

    def _extract_supabase_detail(self, response: httpx.Response | None) -> str | None:
        if response is None:
            return None
        try:
            payload = response.json()
        except ValueError:
            text = (response.text or "").strip()
            return text or None

        if isinstance(payload, list) and payload:
            payload = payload[0]
        if isinstance(payload, dict):
            for key in ("message", "detail", "error", "hint", "code"):
                value = payload.get(key)
                if isinstance(value, str) and value.strip():
                    return value.strip()
        return None
