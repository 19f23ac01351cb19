"""
Tests for the shared data model: JSON field mapping and the group tag variants.
"""

import unittest

from attendtrack.model import UNIVERSAL, AttendanceStatus, GroupTag, ScheduleEntry, new_id


class TestGroupTag(unittest.TestCase):
    def test_missing_or_blank_is_universal(self) -> None:
        self.assertEqual(GroupTag.of(None), UNIVERSAL)
        self.assertEqual(GroupTag.of("   "), UNIVERSAL)
        self.assertTrue(GroupTag.of("").is_universal)

    def test_real_tag(self) -> None:
        tag = GroupTag.of(" G1 ")
        self.assertFalse(tag.is_universal)
        self.assertEqual(tag.tag, "G1")
        self.assertNotEqual(tag, GroupTag.of("G2"))


class TestScheduleEntry(unittest.TestCase):
    def test_from_dict_accepts_camel_case_and_assigns_id(self) -> None:
        e = ScheduleEntry.from_dict({"day": "Monday", "startTime": "9:00 AM", "endTime": "10:00 AM", "subject": "Math"})
        self.assertTrue(e.id)
        self.assertEqual(e.slot, ("Monday", "9:00 AM", "10:00 AM"))
        self.assertIsNone(e.group)
        self.assertEqual(e.to_dict()["startTime"], "9:00 AM")

    def test_from_dict_without_id_can_be_rejected(self) -> None:
        with self.assertRaises(KeyError):
            ScheduleEntry.from_dict({"day": "Monday"}, assign_id=False)

    def test_missing_required_field(self) -> None:
        with self.assertRaises(ValueError):
            ScheduleEntry.from_dict({"day": "Monday", "start_time": "9:00", "end_time": "10:00"})

    def test_new_ids_are_unique(self) -> None:
        self.assertEqual(len({new_id() for _ in range(100)}), 100)


class TestAttendanceStatus(unittest.TestCase):
    def test_parse_is_case_insensitive(self) -> None:
        self.assertIs(AttendanceStatus.parse(" late "), AttendanceStatus.LATE)
        with self.assertRaises(ValueError):
            AttendanceStatus.parse("asleep")


if __name__ == "__main__":
    unittest.main()
