import unittest
from datetime import date

from attendtrack.model import AttendanceRecord, AttendanceStatus, ScheduleEntry
from attendtrack.stats import (
    classes_on,
    compute_overall_stats,
    daily_stats,
    mark_attendance,
    motivational_message,
    record_for,
    weekday_name,
)


def _rec(status: AttendanceStatus, date_str: str = "2026-02-16", item: str = "e1") -> AttendanceRecord:
    return AttendanceRecord(id=f"{item}-{date_str}", schedule_item_id=item, date=date_str, status=status, timestamp=0)


class TestOverallStats(unittest.TestCase):
    def test_no_records_is_full_attendance(self) -> None:
        stats = compute_overall_stats([])
        self.assertEqual(stats.total_classes, 0)
        self.assertEqual(stats.percentage, 100.0)

    def test_late_counts_as_attended_and_cancelled_is_ignored(self) -> None:
        records = [
            _rec(AttendanceStatus.PRESENT, item="a"),
            _rec(AttendanceStatus.LATE, item="b"),
            _rec(AttendanceStatus.ABSENT, item="c"),
            _rec(AttendanceStatus.EXCUSED, item="d"),
            _rec(AttendanceStatus.CANCELLED, item="e"),
        ]
        stats = compute_overall_stats(records)
        self.assertEqual(stats.total_classes, 4)
        self.assertEqual(stats.attended_classes, 2)
        self.assertEqual(stats.missed_classes, 2)
        self.assertEqual(stats.cancelled_classes, 1)
        self.assertAlmostEqual(stats.percentage, 50.0)

    def test_daily_stats_only_counts_that_date(self) -> None:
        records = [
            _rec(AttendanceStatus.PRESENT, item="a"),
            _rec(AttendanceStatus.ABSENT, item="b"),
            _rec(AttendanceStatus.PRESENT, "2026-02-17", item="c"),
        ]
        day = daily_stats(records, "2026-02-16")
        self.assertEqual((day.total, day.present, day.absent, day.late), (2, 1, 1, 0))

    def test_motivational_message_thresholds(self) -> None:
        self.assertEqual(motivational_message(95), "Excellent! Keep it up!")
        self.assertEqual(motivational_message(75), "Good job, you're on track.")
        self.assertEqual(motivational_message(60), "Attendance is slipping.")
        self.assertEqual(motivational_message(10), "You need to attend more classes.")


class TestMarkAttendance(unittest.TestCase):
    def setUp(self) -> None:
        self.entry = ScheduleEntry(id="e1", day="Monday", start_time="9:00 AM", end_time="10:00 AM", subject="Math")

    def test_adds_new_record(self) -> None:
        out = mark_attendance([], self.entry, "2026-02-16", AttendanceStatus.PRESENT, now=42)
        self.assertEqual(len(out), 1)
        self.assertEqual(out[0].schedule_item_id, "e1")
        self.assertEqual(out[0].timestamp, 42)

    def test_replaces_record_for_same_date_and_keeps_id(self) -> None:
        first = mark_attendance([], self.entry, "2026-02-16", AttendanceStatus.PRESENT, now=1)
        other_day = mark_attendance(first, self.entry, "2026-02-23", AttendanceStatus.ABSENT, now=2)
        updated = mark_attendance(other_day, self.entry, "2026-02-16", AttendanceStatus.LATE, now=3)

        self.assertEqual(len(updated), 2)
        rec = record_for(updated, "e1", "2026-02-16")
        assert rec is not None
        self.assertEqual(rec.status, AttendanceStatus.LATE)
        self.assertEqual(rec.id, first[0].id)
        # input list untouched
        self.assertEqual(first[0].status, AttendanceStatus.PRESENT)


class TestClassesOn(unittest.TestCase):
    def test_filters_by_day_and_sorts_across_noon(self) -> None:
        schedule = [
            ScheduleEntry(id="3", day="Monday", start_time="1:00 PM", end_time="2:00 PM", subject="C"),
            ScheduleEntry(id="1", day="monday", start_time="9:00 AM", end_time="10:00 AM", subject="A"),
            ScheduleEntry(id="2", day="Monday", start_time="11:00 AM", end_time="12:00 PM", subject="B"),
            ScheduleEntry(id="x", day="Tuesday", start_time="9:00 AM", end_time="10:00 AM", subject="X"),
        ]
        self.assertEqual([e.id for e in classes_on(schedule, "Monday")], ["1", "2", "3"])

    def test_weekday_name(self) -> None:
        self.assertEqual(weekday_name(date(2026, 2, 16)), "Monday")
        self.assertEqual(weekday_name(date(2026, 2, 22)), "Sunday")


if __name__ == "__main__":
    unittest.main()
