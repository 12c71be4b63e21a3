from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Type

from .models import (
    Announcement,
    BrandingSettings,
    Coach,
    DailyPlan,
    Officer,
    Record,
    Student,
    Tournament,
    TrainingSession,
)


@dataclass(frozen=True)
class KindProfile:
    record_type: Type[Record]
    cache_key: str
    id_prefix: str
    singular: str
    image_field: Optional[str] = None
    # Remote columns and cache files use the camelCase aliases.
    wire_aliases: bool = True


class EntityKind(str, Enum):
    """Entity kinds; the value is the default remote table name."""

    STUDENTS = "students"
    COACHES = "coaches"
    OFFICERS = "officers"
    TOURNAMENTS = "tournaments"
    ANNOUNCEMENTS = "announcements"
    SESSIONS = "sessions"
    DAILY_PLANS = "daily_plans"
    BRANDING = "academy_settings"

    @property
    def profile(self) -> KindProfile:
        return _PROFILES[self]

    @property
    def record_type(self) -> Type[Record]:
        return self.profile.record_type

    @property
    def cache_key(self) -> str:
        return self.profile.cache_key

    @property
    def asset_folder(self) -> str:
        return self.profile.cache_key

    @property
    def is_singleton(self) -> bool:
        return self is EntityKind.BRANDING

    def parse(self, payload: object) -> Record:
        return self.record_type.model_validate(payload)

    def dump(self, record: Record) -> Dict[str, Any]:
        return record.model_dump(mode="json", by_alias=self.profile.wire_aliases)

    @classmethod
    def lookup(cls, name: "EntityKind | str") -> "EntityKind":
        """Resolve a kind from itself, its table name, member name or cache key."""
        if isinstance(name, cls):
            return name
        key = str(name).strip()
        for kind in cls:
            if key in (kind.value, kind.cache_key) or key.upper() == kind.name:
                return kind
        raise ValueError(f"Unknown entity kind: {name!r}")


_PROFILES: Dict[EntityKind, KindProfile] = {
    EntityKind.STUDENTS: KindProfile(Student, "students", "s", "student", "profile_pic"),
    EntityKind.COACHES: KindProfile(Coach, "coaches", "c", "coach", "profile_pic"),
    EntityKind.OFFICERS: KindProfile(Officer, "officers", "o", "officer", "profile_pic"),
    EntityKind.TOURNAMENTS: KindProfile(Tournament, "tournaments", "t", "tournament"),
    EntityKind.ANNOUNCEMENTS: KindProfile(Announcement, "announcements", "a", "announcement"),
    EntityKind.SESSIONS: KindProfile(TrainingSession, "sessions", "sess", "session"),
    # Daily plans have always been cached under "plans".
    EntityKind.DAILY_PLANS: KindProfile(DailyPlan, "plans", "dp", "plan"),
    EntityKind.BRANDING: KindProfile(BrandingSettings, "branding", "", "branding", "logo_url", wire_aliases=False),
}
