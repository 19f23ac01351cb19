"""
Tests for the interactive conflict review and menu.

Prompts are scripted through prompt_fn; the store is an in-memory fake.
"""

import unittest

from attendtrack.conflicts import detect_conflicts
from attendtrack.interactive import console, review_conflicts, review_schedule, run_interactive
from attendtrack.model import AttendanceStatus, ScheduleEntry, UserData


def _script(*answers: str):
    it = iter(answers)
    return lambda _msg: next(it)


def _schedule() -> list:
    return [
        ScheduleEntry(id="m", day="Monday", start_time="9:00 AM", end_time="10:00 AM", subject="Math", group="G1"),
        ScheduleEntry(id="p", day="Monday", start_time="9:00 AM", end_time="10:00 AM", subject="Physics", group="G2"),
        ScheduleEntry(id="s", day="Monday", start_time="9:00 AM", end_time="10:00 AM", subject="Seminar"),
    ]


class MemoryStore:
    def __init__(self, data: UserData) -> None:
        self.data = data
        self.saves = 0

    def load(self, user_id: str) -> UserData:
        return UserData(schedule=list(self.data.schedule), records=list(self.data.records))

    def save(self, user_id: str, data: UserData) -> None:
        self.data = data
        self.saves += 1


class TestReview(unittest.TestCase):
    def test_pick_by_number_or_name(self) -> None:
        conflicts = detect_conflicts(_schedule())
        self.assertEqual(review_conflicts(conflicts, _script("2")), {conflicts[0].id: "G2"})
        self.assertEqual(review_conflicts(conflicts, _script("g1")), {conflicts[0].id: "G1"})

    def test_invalid_answer_is_asked_again(self) -> None:
        conflicts = detect_conflicts(_schedule())
        self.assertEqual(review_conflicts(conflicts, _script("7", "G3", "1")), {conflicts[0].id: "G1"})

    def test_enter_skips_conflict(self) -> None:
        conflicts = detect_conflicts(_schedule())
        self.assertEqual(review_conflicts(conflicts, _script("")), {})

    def test_review_schedule_filters_entries(self) -> None:
        out = review_schedule(_schedule(), _script("1"))
        self.assertEqual([e.id for e in out], ["m", "s"])

    def test_brackets_in_extracted_text_are_printed_literally(self) -> None:
        entries = [
            ScheduleEntry(
                id="a", day="Monday", start_time="9:00 AM", end_time="10:00 AM", subject="Lab [/b]", group="G1"
            ),
            ScheduleEntry(
                id="b", day="Monday", start_time="9:00 AM", end_time="10:00 AM", subject="[Lab]", group="G2", room="[R1]"
            ),
        ]
        with console.capture() as captured:
            out = review_schedule(entries, _script("1"))
        self.assertEqual([e.id for e in out], ["a"])
        self.assertIn("Lab [/b]", captured.get())
        self.assertIn("[Lab]", captured.get())

    def test_day_view_and_marking_with_bracketed_room(self) -> None:
        entry = ScheduleEntry(
            id="r", day="Monday", start_time="9:00 AM", end_time="10:00 AM", subject="Chem [/i]", room="[B2]"
        )
        store = MemoryStore(UserData(schedule=[entry]))
        with console.capture() as captured:
            run_interactive(store, "[u]", _script("5", "2026-02-16", "1", "2", "1", "late", "0"))
        text = captured.get()
        self.assertIn("[B2]", text)
        self.assertIn("Marked Chem [/i]: LATE", text)
        self.assertEqual(store.data.records[0].status, AttendanceStatus.LATE)

    def test_review_schedule_without_conflicts(self) -> None:
        entries = _schedule()[:1]
        self.assertEqual(review_schedule(entries, _script()), entries)


class TestMenu(unittest.TestCase):
    def test_mark_attendance_on_chosen_date(self) -> None:
        store = MemoryStore(UserData(schedule=_schedule()))
        # change date to a Monday, mark class #1 present, exit
        run_interactive(store, "u", _script("5", "2026-02-16", "2", "1", "present", "0"))

        self.assertEqual(store.saves, 1)
        self.assertEqual(len(store.data.records), 1)
        rec = store.data.records[0]
        self.assertEqual(rec.date, "2026-02-16")
        self.assertEqual(rec.status, AttendanceStatus.PRESENT)

    def test_review_conflicts_from_menu(self) -> None:
        store = MemoryStore(UserData(schedule=_schedule()))
        run_interactive(store, "u", _script("4", "G2", "0"))
        self.assertEqual([e.id for e in store.data.schedule], ["p", "s"])

    def test_stats_and_invalid_choice(self) -> None:
        store = MemoryStore(UserData(schedule=_schedule()))
        run_interactive(store, "u", _script("3", "9", "1", "0"))
        self.assertEqual(store.saves, 0)


if __name__ == "__main__":
    unittest.main()
