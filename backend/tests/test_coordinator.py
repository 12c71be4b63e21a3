from __future__ import annotations

import asyncio
from typing import List, Tuple

import pytest

from academy_core import (
    BrandingSettings,
    DurableLocalCache,
    EntityKind,
    PersistenceCoordinator,
    RemoteRequestFailed,
    Settings,
    StorageStatus,
    Student,
    Tournament,
)
from academy_core.seeds import INITIAL_STUDENTS

from conftest import FakeSupabase


@pytest.fixture
def local_coordinator(local_settings: Settings) -> PersistenceCoordinator:
    return PersistenceCoordinator.from_settings(local_settings)


@pytest.fixture
def remote_coordinator(remote_settings: Settings, fake_supabase: FakeSupabase) -> PersistenceCoordinator:
    return PersistenceCoordinator.from_settings(remote_settings, transport=fake_supabase.transport)


@pytest.mark.asyncio
async def test_local_only_load_uses_seeds(local_coordinator: PersistenceCoordinator) -> None:
    report = await local_coordinator.load_all()

    assert not local_coordinator.remote_enabled
    assert set(report.sources.values()) == {"cache"}
    assert report.errors == {}
    assert list(local_coordinator.collection(EntityKind.STUDENTS)) == INITIAL_STUDENTS
    assert local_coordinator.branding == BrandingSettings()


@pytest.mark.asyncio
async def test_local_only_save_survives_restart(local_settings: Settings, local_coordinator: PersistenceCoordinator) -> None:
    await local_coordinator.load_all()
    student = Student(id="s100", name="Test Athlete")

    saved = await local_coordinator.save("students", student)

    assert saved == student
    assert local_coordinator.collection(EntityKind.STUDENTS).ids()[0] == "s100"
    assert student in DurableLocalCache(local_settings.data_dir).load("students", [])

    restarted = PersistenceCoordinator.from_settings(local_settings)
    await restarted.load_all()
    assert restarted.get(EntityKind.STUDENTS, "s100") == student


@pytest.mark.asyncio
async def test_local_only_delete_is_silent(local_settings: Settings, local_coordinator: PersistenceCoordinator) -> None:
    await local_coordinator.load_all()

    await local_coordinator.delete(EntityKind.STUDENTS, "s1")
    await local_coordinator.delete(EntityKind.STUDENTS, "does-not-exist")

    assert "s1" not in local_coordinator.collection(EntityKind.STUDENTS)
    cached = DurableLocalCache(local_settings.data_dir).load(EntityKind.STUDENTS, [])
    assert [s.id for s in cached] == ["s2"]


@pytest.mark.asyncio
async def test_remote_load_is_isolated_per_kind(
    remote_coordinator: PersistenceCoordinator, fake_supabase: FakeSupabase, remote_settings: Settings
) -> None:
    fake_supabase.seed("students", [{"id": "s9", "name": "Remote Kid"}, {"id": "s9", "name": "Remote Kid 2"}])
    fake_supabase.seed("tournaments", [{"id": "t9", "name": "Cloud Cup"}])
    fake_supabase.failing_tables.add("coaches")

    report = await remote_coordinator.load_all()

    assert report.sources[EntityKind.STUDENTS] == "remote"
    assert report.sources[EntityKind.TOURNAMENTS] == "remote"
    assert report.sources[EntityKind.COACHES] == "cache"
    assert report.sources[EntityKind.OFFICERS] == "cache"
    assert "coaches" in report.errors[EntityKind.COACHES]
    assert EntityKind.OFFICERS not in report.errors

    assert remote_coordinator.collection(EntityKind.STUDENTS).ids() == ["s9"]
    assert remote_coordinator.collection(EntityKind.COACHES).ids() == ["c1", "c2"]
    assert len(remote_coordinator.sorted_officers()) == 7

    cached = DurableLocalCache(remote_settings.data_dir).load(EntityKind.TOURNAMENTS, [])
    assert cached == [Tournament(id="t9", name="Cloud Cup")]


@pytest.mark.asyncio
async def test_remote_unreachable_at_startup_falls_back(
    remote_coordinator: PersistenceCoordinator, fake_supabase: FakeSupabase, remote_settings: Settings
) -> None:
    DurableLocalCache(remote_settings.data_dir).save(EntityKind.STUDENTS, [Student(id="s50", name="Cached")])
    fake_supabase.offline = True

    report = await remote_coordinator.load_all()

    assert set(report.sources.values()) == {"cache"}
    assert len(report.errors) == len(EntityKind)
    assert remote_coordinator.collection(EntityKind.STUDENTS).ids() == ["s50"]


@pytest.mark.asyncio
async def test_remote_save_merges_canonical_record_and_mirrors(
    remote_coordinator: PersistenceCoordinator, fake_supabase: FakeSupabase, remote_settings: Settings
) -> None:
    await remote_coordinator.load_all()
    student = Student(id="s100", name="Test Athlete")

    await remote_coordinator.save(EntityKind.STUDENTS, student)

    assert fake_supabase.tables["students"]["s100"]["name"] == "Test Athlete"
    assert remote_coordinator.collection(EntityKind.STUDENTS).ids()[0] == "s100"
    cached = DurableLocalCache(remote_settings.data_dir).load(EntityKind.STUDENTS, [])
    assert cached[0] == student


@pytest.mark.asyncio
async def test_degraded_save_leaves_state_unchanged(
    remote_coordinator: PersistenceCoordinator, fake_supabase: FakeSupabase, remote_settings: Settings
) -> None:
    await remote_coordinator.load_all()
    await remote_coordinator.save(EntityKind.STUDENTS, Student(id="s1", name="Juan"))
    before = remote_coordinator.collection(EntityKind.STUDENTS)
    cache_path = DurableLocalCache(remote_settings.data_dir).path_for(EntityKind.STUDENTS)
    cache_before = cache_path.read_text()
    fake_supabase.offline = True

    with pytest.raises(RemoteRequestFailed) as excinfo:
        await remote_coordinator.save(EntityKind.STUDENTS, Student(id="s100", name="Test Athlete"))

    assert excinfo.value.diagnostic
    assert remote_coordinator.collection(EntityKind.STUDENTS) is before
    assert cache_path.read_text() == cache_before


@pytest.mark.asyncio
async def test_remote_delete_failure_keeps_record(
    remote_coordinator: PersistenceCoordinator, fake_supabase: FakeSupabase
) -> None:
    fake_supabase.seed("students", [{"id": "s1", "name": "Juan"}])
    await remote_coordinator.load_all()
    fake_supabase.failing_tables.add("students")

    with pytest.raises(RemoteRequestFailed):
        await remote_coordinator.delete(EntityKind.STUDENTS, "s1")
    assert "s1" in remote_coordinator.collection(EntityKind.STUDENTS)

    fake_supabase.failing_tables.clear()
    await remote_coordinator.delete(EntityKind.STUDENTS, "s1")
    assert "s1" not in remote_coordinator.collection(EntityKind.STUDENTS)
    assert fake_supabase.rows("students") == []


@pytest.mark.asyncio
async def test_toggle_attendance_flows_through_save(local_coordinator: PersistenceCoordinator) -> None:
    await local_coordinator.load_all()

    first = await local_coordinator.toggle_attendance("s2", "2024-06-01")
    second = await local_coordinator.toggle_attendance("s2", "2024-06-01")

    assert first.attendance[0].status == "present"
    assert second.attendance[0].status == "absent"
    assert local_coordinator.collection(EntityKind.STUDENTS).ids()[0] == "s2"
    assert local_coordinator.attendance_on("2024-06-01") == {"s2": "absent", "s1": None}

    with pytest.raises(KeyError):
        await local_coordinator.toggle_attendance("ghost", "2024-06-01")


@pytest.mark.asyncio
async def test_save_branding_uses_singleton_row(
    remote_coordinator: PersistenceCoordinator, fake_supabase: FakeSupabase
) -> None:
    await remote_coordinator.load_all()

    await remote_coordinator.save_branding("Eagles Academy", logo_url="https://cdn/logo.png")

    assert remote_coordinator.branding.name == "Eagles Academy"
    assert fake_supabase.tables["academy_settings"]["main"]["logo_url"] == "https://cdn/logo.png"


@pytest.mark.asyncio
async def test_save_rejects_wrong_record_type(local_coordinator: PersistenceCoordinator) -> None:
    with pytest.raises(TypeError):
        await local_coordinator.save(EntityKind.COACHES, Student(id="s1"))


@pytest.mark.asyncio
async def test_subscribers_see_every_change(local_coordinator: PersistenceCoordinator) -> None:
    seen: List[Tuple[EntityKind, List[str]]] = []
    unsubscribe = local_coordinator.subscribe(lambda kind, collection: seen.append((kind, collection.ids())))

    await local_coordinator.save(EntityKind.TOURNAMENTS, Tournament(id="t5", name="Open"))
    unsubscribe()
    await local_coordinator.save(EntityKind.TOURNAMENTS, Tournament(id="t6", name="Closed"))

    assert seen == [(EntityKind.TOURNAMENTS, ["t5"])]


@pytest.mark.asyncio
async def test_racing_saves_for_same_id_last_completed_wins(
    remote_coordinator: PersistenceCoordinator,
) -> None:
    await asyncio.gather(
        remote_coordinator.save(EntityKind.STUDENTS, Student(id="s1", name="First")),
        remote_coordinator.save(EntityKind.STUDENTS, Student(id="s1", name="Second")),
    )

    collection = remote_coordinator.collection(EntityKind.STUDENTS)
    assert collection.ids().count("s1") == 1
    assert collection.get("s1").name in {"First", "Second"}


@pytest.mark.asyncio
async def test_check_storage_reports_missing_bucket(
    remote_coordinator: PersistenceCoordinator, fake_supabase: FakeSupabase
) -> None:
    fake_supabase.bucket_exists = False

    health = await remote_coordinator.check_storage()

    assert health.status is StorageStatus.MISCONFIGURED
