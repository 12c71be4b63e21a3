"""Default records used when neither the remote service nor the cache has data."""

from __future__ import annotations

from typing import Dict, List

from .kinds import EntityKind
from .models import (
    Announcement,
    AttendanceRecord,
    BrandingSettings,
    Coach,
    DailyPlan,
    Exercise,
    HealthStatus,
    Officer,
    Record,
    SkillLevel,
    Student,
    Tournament,
    TrainingSession,
)

INITIAL_COACHES = [
    Coach(
        id="c1",
        name="Coach Ricardo Santos",
        email="coach.rick@talons.com",
        password="password",
        specialization="Advanced Footwork & Strategy",
        profile_pic="https://picsum.photos/seed/coach1/400/400",
        age=38,
        phone="0917-123-4567",
    ),
    Coach(
        id="c2",
        name="Coach Elena Cruz",
        email="coach.elena@talons.com",
        password="password",
        specialization="Junior Development & Agility",
        profile_pic="https://picsum.photos/seed/coach2/400/400",
        age=29,
        phone="0918-987-6543",
    ),
]

INITIAL_OFFICERS = [
    Officer(id=f"o{index}", name=name, role=role, profile_pic=f"https://picsum.photos/seed/off{index}/400/400", contact=contact)
    for index, (name, role, contact) in enumerate(
        [
            ("Marcus Aurelius", "President", "09123456789"),
            ("Sophia Loren", "Vice President", "09123456788"),
            ("Lester Bangs", "Secretary", "09123456787"),
            ("Clara Oswald", "Treasurer", "09123456786"),
            ("Danny Pink", "Auditor", "09123456785"),
            ("Amy Pond", "P.I.O.", "09123456784"),
            ("Rory Williams", "Sgt. at Arms", "09123456783"),
        ],
        start=1,
    )
]

INITIAL_TOURNAMENTS = [
    Tournament(
        id="t1",
        name="Dumaguete City Open 2024",
        date="2024-06-12",
        location="Lamberto Macias Sports Complex",
        categories=["Mens Singles Open", "Mixed Doubles U-17", "Boys Singles U-15"],
        description="The premier city-wide open tournament for all Dumaguete badminton enthusiasts.",
    ),
    Tournament(
        id="t2",
        name="Negros Oriental Regional Meet",
        date="2024-07-05",
        location="Silliman Gym",
        categories=["Boys Singles U-15", "Girls Singles U-15", "Mens Doubles Open"],
        description="Regional level competition bringing together top talents from all over Negros Oriental.",
    ),
]

INITIAL_STUDENTS = [
    Student(
        id="s1",
        name="Juan Dela Cruz",
        age=14,
        birthday="2010-05-15",
        profile_pic="https://picsum.photos/seed/s1/400/400",
        level=SkillLevel.INTERMEDIATE,
        health_status=HealthStatus.FIT,
        attendance=[AttendanceRecord(date="2024-05-25", status="present")],
        tournament_ids=["t1"],
        notes="Strong smash, needs improvement on backhand clears.",
    ),
    Student(
        id="s2",
        name="Maria Clara",
        age=12,
        birthday="2012-11-20",
        profile_pic="https://picsum.photos/seed/s2/400/400",
        level=SkillLevel.BEGINNER,
        health_status=HealthStatus.INJURY,
        notes="Very fast on court, focusing on basic net play.",
    ),
]

INITIAL_ANNOUNCEMENTS = [
    Announcement(
        id="a1",
        title="New Training Schedule for June",
        content="Starting next Monday, all intermediate classes will be moved to 4 PM.",
        date="2024-05-20",
        author="Coach Rick",
    )
]

INITIAL_SESSIONS = [
    TrainingSession(
        id="sess1",
        title="Morning Elite Drills",
        date="2024-05-25",
        start_time="08:00 AM",
        end_time="10:00 AM",
        focus="Multi-shuttle smash accuracy",
        type="Regular",
        target_levels=[SkillLevel.ELITE, SkillLevel.ADVANCED],
    )
]

INITIAL_DAILY_PLANS = [
    DailyPlan(
        id="dp1",
        date="2024-05-25",
        start_time="08:00 AM",
        end_time="10:00 AM",
        total_duration="120 mins",
        title="High-Intensity Smash Block",
        exercises=[
            Exercise(name="Warm-up: Dynamic Stretching", duration="15 mins"),
            Exercise(name="Footwork: 6-Point Shadow", duration="20 mins"),
            Exercise(name="Drill: Multi-shuttle Attacking", duration="45 mins"),
            Exercise(name="Match: Tactical Half-Court", duration="30 mins"),
            Exercise(name="Cool down: Static Stretching", duration="10 mins"),
        ],
        notes="Today's focus is exclusively on steepness of the smash.",
    )
]

_SEEDS: Dict[EntityKind, List[Record]] = {
    EntityKind.STUDENTS: INITIAL_STUDENTS,
    EntityKind.COACHES: INITIAL_COACHES,
    EntityKind.OFFICERS: INITIAL_OFFICERS,
    EntityKind.TOURNAMENTS: INITIAL_TOURNAMENTS,
    EntityKind.ANNOUNCEMENTS: INITIAL_ANNOUNCEMENTS,
    EntityKind.SESSIONS: INITIAL_SESSIONS,
    EntityKind.DAILY_PLANS: INITIAL_DAILY_PLANS,
    EntityKind.BRANDING: [BrandingSettings()],
}


def seed_records(kind: EntityKind) -> List[Record]:
    return list(_SEEDS[kind])
