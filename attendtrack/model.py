"""
Central data model definitions used across the project.

This module defines the canonical structure of schedule entries, conflicts and
attendance records so that:
- all modules share the same field names
- JSON blobs keep the camelCase keys used by the web frontend (startTime, ...)
- extraction, conflict handling, storage and the CLI agree on one shape
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def new_id() -> str:
    """
    Return a process-unique identifier for new entries, records and conflicts.
    """
    return str(uuid.uuid4())


def _opt_str(x: Any) -> Optional[str]:
    if x is None:
        return None
    s = str(x).strip()
    return s or None


@dataclass(frozen=True)
class GroupTag:
    """
    Cohort tag of an entry: either universal (no tag) or tagged with a name.

    Keeps "no group" apart from any real group name, so a blank string can
    never be mistaken for a cohort called "".
    """

    tag: Optional[str] = None

    @classmethod
    def of(cls, raw: Optional[str]) -> "GroupTag":
        return cls(_opt_str(raw))

    @property
    def is_universal(self) -> bool:
        return self.tag is None


UNIVERSAL = GroupTag()


@dataclass
class ScheduleEntry:
    """
    One timetabled class occurrence (weekly, identified by day + time slot).
    """

    id: str
    day: str
    start_time: str
    end_time: str
    subject: str
    room: Optional[str] = None
    group: Optional[str] = None

    @property
    def slot(self) -> tuple[str, str, str]:
        return (self.day, self.start_time, self.end_time)

    @property
    def group_tag(self) -> GroupTag:
        return GroupTag.of(self.group)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "day": self.day,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "subject": self.subject,
            "room": self.room,
            "group": self.group,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], assign_id: bool = True) -> "ScheduleEntry":
        """
        Build an entry from a JSON row (camelCase or snake_case keys).

        Raises KeyError / ValueError if a required field is missing or blank.
        """
        entry_id = _opt_str(data.get("id"))
        if entry_id is None:
            if not assign_id:
                raise KeyError("id")
            entry_id = new_id()

        def required(*keys: str) -> str:
            for k in keys:
                v = _opt_str(data.get(k))
                if v is not None:
                    return v
            raise ValueError(f"Missing field: {keys[0]}")

        return cls(
            id=entry_id,
            day=required("day"),
            start_time=required("startTime", "start_time"),
            end_time=required("endTime", "end_time"),
            subject=required("subject"),
            room=_opt_str(data.get("room")),
            group=_opt_str(data.get("group")),
        )


@dataclass
class ConflictOption:
    group: str
    items: list[ScheduleEntry] = field(default_factory=list)


@dataclass
class Conflict:
    """
    Two or more distinct groups sharing one (day, start, end) slot.

    Derived from a schedule snapshot; never persisted.
    """

    id: str
    day: str
    start_time: str
    end_time: str
    options: list[ConflictOption] = field(default_factory=list)

    @property
    def groups(self) -> list[str]:
        return [opt.group for opt in self.options]


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EXCUSED = "EXCUSED"
    CANCELLED = "CANCELLED"

    @classmethod
    def parse(cls, raw: str) -> "AttendanceStatus":
        """
        Parse a status name case-insensitively. Raises ValueError if unknown.
        """
        return cls(str(raw).strip().upper())


@dataclass
class AttendanceRecord:
    """
    Attendance of one schedule entry on one concrete date (YYYY-MM-DD).
    """

    id: str
    schedule_item_id: str
    date: str
    status: AttendanceStatus
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "scheduleItemId": self.schedule_item_id,
            "date": self.date,
            "status": self.status.value,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AttendanceRecord":
        item_id = _opt_str(data.get("scheduleItemId", data.get("schedule_item_id")))
        date = _opt_str(data.get("date"))
        if item_id is None or date is None:
            raise ValueError("Record needs scheduleItemId and date")
        return cls(
            id=_opt_str(data.get("id")) or new_id(),
            schedule_item_id=item_id,
            date=date,
            status=AttendanceStatus.parse(data.get("status", "")),
            timestamp=int(data.get("timestamp") or 0),
        )


@dataclass
class DailyStats:
    total: int
    present: int
    absent: int
    late: int


@dataclass
class OverallStats:
    percentage: float
    total_classes: int
    attended_classes: int
    missed_classes: int
    cancelled_classes: int


@dataclass
class UserData:
    """
    Everything persisted for one user: the weekly schedule and attendance records.
    """

    schedule: list[ScheduleEntry] = field(default_factory=list)
    records: list[AttendanceRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "schedule": [e.to_dict() for e in self.schedule],
            "records": [r.to_dict() for r in self.records],
        }
