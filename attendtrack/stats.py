"""
Daily attendance marking and aggregate statistics.

Records are keyed by (schedule entry, date): marking the same class twice on
one date replaces the earlier record instead of adding a second one.
"""

from __future__ import annotations

import time
from datetime import date as date_cls
from datetime import datetime
from typing import Iterable, Optional, Sequence

from attendtrack.model import (
    WEEKDAYS,
    AttendanceRecord,
    AttendanceStatus,
    DailyStats,
    OverallStats,
    ScheduleEntry,
    new_id,
)


_TIME_FORMATS = ("%I:%M %p", "%I:%M%p", "%H:%M", "%I %p", "%I%p")


def _time_to_minutes(text: str) -> Optional[int]:
    """
    Convert '9:00 AM' / '14:30' style strings to minutes since midnight.
    Returns None if no known format matches.
    """
    s = text.strip().upper()
    for fmt in _TIME_FORMATS:
        try:
            t = datetime.strptime(s, fmt)
        except ValueError:
            continue
        return t.hour * 60 + t.minute
    return None


def _start_key(entry: ScheduleEntry) -> tuple[int, int, str]:
    # unparsable times sort after parsable ones, by their display string
    minutes = _time_to_minutes(entry.start_time)
    if minutes is None:
        return (1, 0, entry.start_time)
    return (0, minutes, entry.start_time)


def weekday_name(d: date_cls) -> str:
    return WEEKDAYS[d.weekday()]


def classes_on(schedule: Iterable[ScheduleEntry], day: str) -> list[ScheduleEntry]:
    """
    Entries held on the given weekday, in start-time order.
    """
    wanted = day.strip().lower()
    todays = [e for e in schedule if e.day.strip().lower() == wanted]
    return sorted(todays, key=_start_key)


def record_for(records: Iterable[AttendanceRecord], entry_id: str, date: str) -> Optional[AttendanceRecord]:
    for r in records:
        if r.schedule_item_id == entry_id and r.date == date:
            return r
    return None


def mark_attendance(
    records: Sequence[AttendanceRecord],
    entry: ScheduleEntry,
    date: str,
    status: AttendanceStatus,
    now: Optional[int] = None,
) -> list[AttendanceRecord]:
    """
    Return a new record list with the attendance of `entry` on `date` set to `status`.

    An existing record for the same class and date is replaced and keeps its id.
    """
    existing = record_for(records, entry.id, date)
    new_record = AttendanceRecord(
        id=existing.id if existing else new_id(),
        schedule_item_id=entry.id,
        date=date,
        status=status,
        timestamp=now if now is not None else int(time.time() * 1000),
    )
    kept = [r for r in records if not (r.schedule_item_id == entry.id and r.date == date)]
    kept.append(new_record)
    return kept


def compute_overall_stats(records: Iterable[AttendanceRecord]) -> OverallStats:
    """
    Attendance percentage over all non-cancelled classes.

    Present and late both count as attended. With no classes yet, 100%.
    """
    records = list(records)
    cancelled = sum(1 for r in records if r.status == AttendanceStatus.CANCELLED)
    total = len(records) - cancelled
    attended = sum(1 for r in records if r.status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE))
    percentage = (attended / total) * 100 if total > 0 else 100.0

    return OverallStats(
        percentage=percentage,
        total_classes=total,
        attended_classes=attended,
        missed_classes=total - attended,
        cancelled_classes=cancelled,
    )


def daily_stats(records: Iterable[AttendanceRecord], date: str) -> DailyStats:
    todays = [r for r in records if r.date == date and r.status != AttendanceStatus.CANCELLED]
    return DailyStats(
        total=len(todays),
        present=sum(1 for r in todays if r.status == AttendanceStatus.PRESENT),
        absent=sum(1 for r in todays if r.status == AttendanceStatus.ABSENT),
        late=sum(1 for r in todays if r.status == AttendanceStatus.LATE),
    )


def motivational_message(percentage: float) -> str:
    if percentage >= 90:
        return "Excellent! Keep it up!"
    if percentage >= 75:
        return "Good job, you're on track."
    if percentage >= 60:
        return "Attendance is slipping."
    return "You need to attend more classes."
