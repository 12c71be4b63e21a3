"""Record synchronisation core for the academy roster tool."""

from .assets import AssetResolution, AssetUploadPipeline, PendingUpload, asset_path, encode_placeholder
from .collection import EntityCollection
from .config import Settings, load_settings
from .coordinator import LoadReport, PersistenceCoordinator
from .errors import (
    AssetUploadFailed,
    LocalCacheCorrupt,
    RemoteRequestFailed,
    RemoteUnavailable,
    StorageMisconfigured,
    SyncError,
)
from .gateway import RemoteRecordGateway, StorageHealth, StorageStatus
from .kinds import EntityKind
from .local_cache import DurableLocalCache
from .models import (
    Announcement,
    AttendanceRecord,
    BrandingSettings,
    Coach,
    DailyPlan,
    Exercise,
    HealthStatus,
    Officer,
    SkillLevel,
    Student,
    Tournament,
    TrainingSession,
    new_record_id,
)
from .rules import attendance_for_date, sort_officers, toggle_attendance
from .store import AcademyStore

__all__ = [
    "AcademyStore",
    "Announcement",
    "AssetResolution",
    "AssetUploadFailed",
    "AssetUploadPipeline",
    "AttendanceRecord",
    "BrandingSettings",
    "Coach",
    "DailyPlan",
    "DurableLocalCache",
    "EntityCollection",
    "EntityKind",
    "Exercise",
    "HealthStatus",
    "LoadReport",
    "LocalCacheCorrupt",
    "Officer",
    "PendingUpload",
    "PersistenceCoordinator",
    "RemoteRecordGateway",
    "RemoteRequestFailed",
    "RemoteUnavailable",
    "Settings",
    "SkillLevel",
    "StorageHealth",
    "StorageMisconfigured",
    "StorageStatus",
    "Student",
    "SyncError",
    "Tournament",
    "TrainingSession",
    "asset_path",
    "attendance_for_date",
    "encode_placeholder",
    "load_settings",
    "new_record_id",
    "sort_officers",
    "toggle_attendance",
]
