"""Pure business rules computed from collection state."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Sequence

from .models import AttendanceRecord, Officer, Student

OFFICER_RANKS: Dict[str, int] = {
    "president": 1,
    "vice president": 2,
    "secretary": 3,
    "treasurer": 4,
    "auditor": 5,
    "pio": 6,
    "public information officer": 6,
    "sgt at arms": 7,
    "sergeant at arms": 7,
}
UNRANKED = 99


def toggle_attendance(entries: Sequence[AttendanceRecord], date: str) -> List[AttendanceRecord]:
    """Flip the entry for ``date`` between present and absent, or prepend a present one."""
    if not any(entry.date == date for entry in entries):
        return [AttendanceRecord(date=date, status="present"), *entries]

    toggled: List[AttendanceRecord] = []
    for entry in entries:
        if entry.date == date:
            status = "absent" if entry.status == "present" else "present"
            entry = entry.model_copy(update={"status": status})
        toggled.append(entry)
    return toggled


def attendance_status(student: Student, date: str) -> Optional[str]:
    return next((entry.status for entry in student.attendance if entry.date == date), None)


def attendance_for_date(students: Iterable[Student], date: str) -> Dict[str, Optional[str]]:
    return {student.id: attendance_status(student, date) for student in students}


def _normalise_title(title: str) -> str:
    cleaned = re.sub(r"[.\-_]+", " ", title.casefold())
    cleaned = " ".join(cleaned.split())
    # "p i o" is what "P.I.O." collapses to
    return cleaned.replace("p i o", "pio")


def officer_rank(title: str) -> int:
    return OFFICER_RANKS.get(_normalise_title(title or ""), UNRANKED)


def sort_officers(officers: Iterable[Officer]) -> List[Officer]:
    # sorted() is stable, so equal ranks keep their input order.
    return sorted(officers, key=lambda officer: officer_rank(officer.role))
