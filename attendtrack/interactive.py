"""
Interactive mode (rich console).

- Conflict review after an upload: one prompt per conflicting slot
- Menu for the daily workflow: classes of a date, attendance marking, stats

Text coming from extraction or user files is escaped before it reaches rich
markup, so brackets in subjects or rooms are printed as-is.
"""

from __future__ import annotations

from datetime import date as date_cls
from datetime import datetime
from typing import Callable, Optional, Protocol, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from attendtrack.conflicts import detect_conflicts, resolve_conflicts
from attendtrack.model import AttendanceStatus, Conflict, ScheduleEntry, UserData
from attendtrack.stats import (
    classes_on,
    compute_overall_stats,
    daily_stats,
    mark_attendance,
    motivational_message,
    record_for,
    weekday_name,
)


console = Console()

PromptFn = Callable[[str], str]


class Store(Protocol):
    def load(self, user_id: str) -> UserData: ...

    def save(self, user_id: str, data: UserData) -> None: ...


def _println(msg: str = "") -> None:
    console.print(msg)


def _prompt(msg: str) -> str:
    return console.input(msg)


def entry_line(entry: ScheduleEntry) -> str:
    bits = [f"{entry.start_time}-{entry.end_time}", entry.subject]
    if entry.group:
        bits.append(f"({entry.group})")
    if entry.room:
        bits.append(f"@ {entry.room}")
    return " | ".join(bits)


def print_conflicts(conflicts: Sequence[Conflict]) -> None:
    table = Table(box=box.SIMPLE, title=f"Conflicts ({len(conflicts)})")
    table.add_column("#", justify="right")
    table.add_column("Slot")
    table.add_column("Options")

    for i, conflict in enumerate(conflicts, start=1):
        slot = f"[bold cyan]{escape(conflict.day)}[/] {escape(conflict.start_time)}-{escape(conflict.end_time)}"
        options = "\n".join(
            f"[yellow]{escape(opt.group)}[/]: " + escape(", ".join(item.subject for item in opt.items))
            for opt in conflict.options
        )
        table.add_row(str(i), slot, options)

    console.print(table)


def _pick_option(conflict: Conflict, answer: str) -> Optional[str]:
    """
    Map a typed answer (option number or group name) to a group, or None.
    """
    answer = answer.strip()
    if answer.isdigit():
        k = int(answer)
        if 1 <= k <= len(conflict.options):
            return conflict.options[k - 1].group
        return None
    for group in conflict.groups:
        if group.lower() == answer.lower():
            return group
    return None


def review_conflicts(conflicts: Sequence[Conflict], prompt_fn: PromptFn = _prompt) -> dict[str, str]:
    """
    Ask the user to pick one group per conflict.

    An empty answer skips the conflict, leaving it unresolved.
    """
    resolutions: dict[str, str] = {}

    for i, conflict in enumerate(conflicts, start=1):
        slot = escape(f"{conflict.day} {conflict.start_time}-{conflict.end_time}")
        _println(f"\n[bold]Conflict {i}/{len(conflicts)}[/]: {slot}")
        for k, option in enumerate(conflict.options, start=1):
            subjects = ", ".join(item.subject for item in option.items)
            _println(f"  [{k}] [yellow]{escape(option.group)}[/]: {escape(subjects)}")

        while True:
            answer = prompt_fn("Your group (number or name, Enter to skip): ")
            if not answer.strip():
                break
            group = _pick_option(conflict, answer)
            if group is None:
                _println("Invalid choice.")
                continue
            resolutions[conflict.id] = group
            break

    return resolutions


def review_schedule(entries: Sequence[ScheduleEntry], prompt_fn: PromptFn = _prompt) -> list[ScheduleEntry]:
    """
    Detect conflicts in freshly extracted entries and let the user resolve them.
    """
    conflicts = detect_conflicts(entries)
    if not conflicts:
        return list(entries)

    print_conflicts(conflicts)
    resolutions = review_conflicts(conflicts, prompt_fn)
    return resolve_conflicts(entries, conflicts, resolutions)


# ---------------------------------------------------------------------------
# Menu
# ---------------------------------------------------------------------------


def run_interactive(store: Store, user_id: str, prompt_fn: PromptFn = _prompt) -> None:
    """
    Interactive menu loop: daily classes, attendance marking, stats, conflicts.
    """
    selected_date = date_cls.today()

    while True:
        data = store.load(user_id)
        _print_header(user_id, data, selected_date)

        choice = prompt_fn(
            "\n[1] Classes for selected date\n"
            "[2] Mark attendance\n"
            "[3] Statistics\n"
            "[4] Review conflicts\n"
            "[5] Change date\n"
            "[0] Exit\n"
            "Select: "
        ).strip()

        if choice == "0":
            _println("Bye.")
            return

        if choice == "1":
            _flow_day(data, selected_date)
        elif choice == "2":
            _flow_mark(store, user_id, data, selected_date, prompt_fn)
        elif choice == "3":
            _flow_stats(data, selected_date)
        elif choice == "4":
            _flow_conflicts(store, user_id, data, prompt_fn)
        elif choice == "5":
            selected_date = _flow_change_date(selected_date, prompt_fn)
        else:
            _println("Invalid choice.")


def _print_header(user_id: str, data: UserData, selected_date: date_cls) -> None:
    _println("\n=== attendtrack (interactive) ===")
    _println(f"User: {escape(user_id)} | Classes per week: {len(data.schedule)} | Records: {len(data.records)}")
    _println(f"Selected date: {selected_date.isoformat()} ({weekday_name(selected_date)})")


def _flow_day(data: UserData, selected_date: date_cls) -> None:
    todays = classes_on(data.schedule, weekday_name(selected_date))
    if not todays:
        _println("No classes scheduled. Enjoy your free time!")
        return

    day_str = selected_date.isoformat()
    table = Table(box=box.SIMPLE, title=f"{weekday_name(selected_date)} {day_str}")
    table.add_column("#", justify="right")
    table.add_column("Time")
    table.add_column("Subject")
    table.add_column("Room")
    table.add_column("Status")

    for i, entry in enumerate(todays, start=1):
        rec = record_for(data.records, entry.id, day_str)
        status = rec.status.value if rec else "-"
        table.add_row(
            str(i), escape(f"{entry.start_time}-{entry.end_time}"), escape(entry.subject), escape(entry.room or ""), status
        )

    console.print(table)


def _flow_mark(store: Store, user_id: str, data: UserData, selected_date: date_cls, prompt_fn: PromptFn) -> None:
    todays = classes_on(data.schedule, weekday_name(selected_date))
    if not todays:
        _println("No classes scheduled on this day.")
        return

    for i, entry in enumerate(todays, start=1):
        _println(f"{i}) {escape(entry_line(entry))}")

    pick = prompt_fn("Class number (0 to go back): ").strip()
    if pick in ("", "0"):
        return
    if not pick.isdigit() or not (1 <= int(pick) <= len(todays)):
        _println("Out of range.")
        return
    entry = todays[int(pick) - 1]

    names = ", ".join(s.value.lower() for s in AttendanceStatus)
    raw = prompt_fn(f"Status ({names}): ")
    try:
        status = AttendanceStatus.parse(raw)
    except ValueError:
        _println(escape(f"Unknown status: {raw.strip()!r}"))
        return

    data.records = mark_attendance(data.records, entry, selected_date.isoformat(), status)
    store.save(user_id, data)
    _println(f"Marked {escape(entry.subject)}: {status.value}")


def _flow_stats(data: UserData, selected_date: date_cls) -> None:
    stats = compute_overall_stats(data.records)
    if stats.total_classes == 0 and stats.cancelled_classes == 0:
        _println("No data yet. Mark attendance to see stats.")
        return

    _println(f"Overall attendance: [bold]{round(stats.percentage)}%[/]  {motivational_message(stats.percentage)}")

    table = Table(box=box.SIMPLE, title="Breakdown")
    table.add_column("Present", justify="right")
    table.add_column("Absent", justify="right")
    table.add_column("Cancelled", justify="right")
    table.add_row(
        f"[green]{stats.attended_classes}[/]", f"[red]{stats.missed_classes}[/]", f"[yellow]{stats.cancelled_classes}[/]"
    )
    console.print(table)

    day = daily_stats(data.records, selected_date.isoformat())
    _println(f"{selected_date.isoformat()}: {day.present} present, {day.late} late, {day.absent} absent of {day.total}")


def _flow_conflicts(store: Store, user_id: str, data: UserData, prompt_fn: PromptFn) -> None:
    conflicts = detect_conflicts(data.schedule)
    if not conflicts:
        _println("No conflicts found.")
        return

    print_conflicts(conflicts)
    resolutions = review_conflicts(conflicts, prompt_fn)
    if not resolutions:
        return

    before = len(data.schedule)
    data.schedule = resolve_conflicts(data.schedule, conflicts, resolutions)
    store.save(user_id, data)
    _println(f"Removed {before - len(data.schedule)} classes from other groups.")


def _flow_change_date(current: date_cls, prompt_fn: PromptFn) -> date_cls:
    raw = prompt_fn("Date (YYYY-MM-DD, +N / -N days, Enter for today): ").strip()
    if not raw:
        return date_cls.today()
    if raw[0] in "+-" and raw[1:].isdigit():
        return date_cls.fromordinal(current.toordinal() + int(raw))
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        _println("Invalid date.")
        return current
