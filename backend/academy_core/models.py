from __future__ import annotations

import time
import uuid
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ACADEMY_NAME = "TALONS ACADEMY"
BRANDING_ROW_ID = "main"
DEFAULT_AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed=new"


def new_record_id(prefix: str) -> str:
    """Mint a client-side identifier such as ``s1718000000000-3fa2c1``."""
    return f"{prefix}{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


class SkillLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    ELITE = "Elite"


class HealthStatus(str, Enum):
    FIT = "Fit to Play"
    INJURY = "Minor Injury"
    RESTING = "Resting"
    MEDICAL = "Under Medical Supervision"
    DISMISSED = "Dismissed"


AttendanceStatus = Literal["present", "absent", "late"]


class Record(BaseModel):
    """Base for every synchronised entity; only ``id`` is interpreted by the core."""

    id: str

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class AttendanceRecord(BaseModel):
    date: str
    status: AttendanceStatus = "present"

    model_config = ConfigDict(frozen=True)


class Exercise(BaseModel):
    name: str
    duration: str = ""
    description: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class Student(Record):
    name: str = ""
    age: int = 0
    birthday: str = ""
    profile_pic: str = Field(default=DEFAULT_AVATAR_URL, alias="profilePic")
    level: SkillLevel = SkillLevel.BEGINNER
    health_status: HealthStatus = Field(default=HealthStatus.FIT, alias="healthStatus")
    attendance: List[AttendanceRecord] = Field(default_factory=list)
    tournament_ids: List[str] = Field(default_factory=list, alias="tournamentIds")
    training_plan_id: Optional[str] = Field(default=None, alias="trainingPlanId")
    notes: str = ""


class Coach(Record):
    name: str = ""
    email: str = ""
    password: Optional[str] = None
    specialization: str = ""
    profile_pic: str = Field(default=DEFAULT_AVATAR_URL, alias="profilePic")
    age: int = 0
    phone: str = ""


class Officer(Record):
    name: str = ""
    role: str = ""
    profile_pic: str = Field(default=DEFAULT_AVATAR_URL, alias="profilePic")
    contact: Optional[str] = None


class Tournament(Record):
    name: str = ""
    date: str = ""
    location: str = ""
    categories: List[str] = Field(default_factory=list)
    description: Optional[str] = None


class Announcement(Record):
    title: str = ""
    content: str = ""
    date: str = ""
    author: str = ""


class TrainingSession(Record):
    title: str = ""
    date: str = ""
    start_time: str = Field(default="", alias="startTime")
    end_time: str = Field(default="", alias="endTime")
    focus: str = ""
    type: Literal["Regular", "Special", "Tournament Prep"] = "Regular"
    target_levels: List[SkillLevel] = Field(default_factory=list, alias="targetLevels")


class DailyPlan(Record):
    date: str = ""
    start_time: str = Field(default="", alias="startTime")
    end_time: str = Field(default="", alias="endTime")
    total_duration: str = Field(default="", alias="totalDuration")
    title: str = ""
    exercises: List[Exercise] = Field(default_factory=list)
    notes: Optional[str] = None


class BrandingSettings(Record):
    """Academy identity, stored as a singleton row."""

    id: str = BRANDING_ROW_ID
    name: str = DEFAULT_ACADEMY_NAME
    logo_url: Optional[str] = Field(default=None, alias="logoUrl")
    banner_url: Optional[str] = Field(default=None, alias="bannerUrl")
