from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Set

import httpx
import pytest

from academy_core import Settings

SUPABASE_URL = "https://example.supabase.co"

_ENV_VARS = [
    "SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "SUPABASE_SERVICE_KEY",
    "SUPABASE_ANON_KEY",
    "SUPABASE_SCHEMA",
    "SUPABASE_ASSETS_BUCKET",
    "SUPABASE_STUDENTS_TABLE",
    "ACADEMY_DATA_DIR",
    "ACADEMY_CACHE_PREFIX",
    "ACADEMY_HTTP_TIMEOUT",
]


@pytest.fixture(autouse=True)
def reset_env(monkeypatch: pytest.MonkeyPatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield


class FakeSupabase:
    """In-process stand-in for the PostgREST and storage endpoints."""

    def __init__(self, bucket: str = "academy-assets") -> None:
        self.bucket = bucket
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.objects: Dict[str, bytes] = {}
        self.requests: List[httpx.Request] = []
        self.offline = False
        self.bucket_exists = True
        self.failing_tables: Set[str] = set()
        self.upload_status: int | None = None

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def seed(self, table: str, rows: List[Dict[str, Any]]) -> None:
        self.tables[table] = {row["id"]: dict(row) for row in rows}

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return list(self.tables.get(table, {}).values())

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("Connection refused", request=request)

        path = request.url.path
        if path.startswith("/rest/v1/"):
            return self._rest(request, path[len("/rest/v1/"):])
        if path.startswith("/storage/v1/bucket/"):
            if self.bucket_exists and path.endswith(f"/{self.bucket}"):
                return httpx.Response(200, json={"id": self.bucket, "public": True})
            return httpx.Response(404, json={"statusCode": "404", "error": "Bucket not found", "message": "Bucket not found"})
        if path.startswith("/storage/v1/object/"):
            return self._upload(request, path[len("/storage/v1/object/"):])
        return httpx.Response(404, json={"message": "unknown route"})

    def _rest(self, request: httpx.Request, table: str) -> httpx.Response:
        if table in self.failing_tables:
            return httpx.Response(500, json={"message": f"relation {table} is broken"})
        if table not in self.tables:
            return httpx.Response(
                404, json={"code": "42P01", "message": f'relation "public.{table}" does not exist'}
            )
        rows = self.tables[table]

        if request.method == "GET":
            return httpx.Response(200, json=list(rows.values()))
        if request.method == "POST":
            payload = json.loads(request.content)
            items = payload if isinstance(payload, list) else [payload]
            stored = []
            for item in items:
                row = {**item, "updated_at": "2024-06-01T00:00:00Z"}
                rows[row["id"]] = row
                stored.append(row)
            return httpx.Response(201, json=stored)
        if request.method == "DELETE":
            target = request.url.params.get("id", "")
            rows.pop(target.removeprefix("eq."), None)
            return httpx.Response(204)
        return httpx.Response(405)

    def _upload(self, request: httpx.Request, object_path: str) -> httpx.Response:
        if not self.bucket_exists:
            return httpx.Response(400, json={"statusCode": "404", "error": "Bucket not found", "message": "Bucket not found"})
        if self.upload_status is not None:
            return httpx.Response(self.upload_status, json={"message": "new row violates row-level security policy"})
        bucket, _, key = object_path.partition("/")
        self.objects[key] = request.content
        return httpx.Response(200, json={"Key": f"{bucket}/{key}"})


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    supabase = FakeSupabase()
    for table in (
        "students",
        "coaches",
        "officers",
        "tournaments",
        "announcements",
        "sessions",
        "daily_plans",
        "academy_settings",
    ):
        supabase.seed(table, [])
    return supabase


@pytest.fixture
def remote_settings(tmp_path: Path) -> Settings:
    return Settings(supabase_url=SUPABASE_URL, supabase_key="test-key", data_dir=tmp_path)


@pytest.fixture
def local_settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=tmp_path)
