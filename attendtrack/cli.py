"""
CLI (Command Line Interface).

Terminal commands around one user's timetable and attendance, e.g.:

    attendtrack upload timetable.png
    attendtrack import extracted.json --pick 1=G1 --pick 2=G2 --strict
    attendtrack conflicts
    attendtrack show --day Monday
    attendtrack mark <entry_id> present --date 2026-02-19
    attendtrack stats
    attendtrack reset
    attendtrack interactive

Note:
- The interactive menu and the conflict review prompts live in attendtrack/interactive.py
- Commands print plain text and return an exit code
"""

from __future__ import annotations

import argparse
from datetime import date as date_cls
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from attendtrack.config import Settings
from attendtrack.conflicts import detect_conflicts, resolve_conflicts, unresolved_conflicts
from attendtrack.errors import AttendtrackError, EmptyScheduleError
from attendtrack.extract import extract_schedule, guess_mime_type, load_entries_file
from attendtrack.interactive import Store, entry_line, review_schedule, run_interactive
from attendtrack.model import WEEKDAYS, AttendanceStatus, Conflict, ScheduleEntry, UserData
from attendtrack.stats import classes_on, compute_overall_stats, mark_attendance, motivational_message, weekday_name
from attendtrack.storage import GitHubStore, LocalStore


def _settings(args: argparse.Namespace) -> Settings:
    """
    Environment settings with CLI overrides applied.
    """
    settings = Settings.from_env()
    if args.data_dir:
        settings.data_dir = Path(args.data_dir)
    if args.user:
        settings.user_id = args.user.strip()
    return settings


def open_store(settings: Settings) -> Store:
    if settings.uses_github:
        return GitHubStore(str(settings.github_token), str(settings.github_owner), str(settings.github_repo))
    return LocalStore(settings.data_dir)


def _print_conflicts(conflicts: Sequence[Conflict]) -> None:
    for i, conflict in enumerate(conflicts, start=1):
        groups = " | ".join(
            f"{opt.group}: " + ", ".join(item.subject for item in opt.items) for opt in conflict.options
        )
        print(f"{i}) {conflict.day} {conflict.start_time}-{conflict.end_time}  {groups}")


def _parse_picks(picks: Sequence[str], conflicts: Sequence[Conflict]) -> dict[str, str]:
    """
    Turn ["1=G1", "2=G2"] (1-based conflict numbers) into a resolution map.

    Groups match the conflict's options case-insensitively. Raises ValueError
    for malformed picks, out-of-range numbers or groups the conflict lacks.
    """
    resolutions: dict[str, str] = {}
    for pick in picks:
        num, sep, group = pick.partition("=")
        if not sep or not num.strip().isdigit() or not group.strip():
            raise ValueError(f"Invalid pick {pick!r} (expected CONFLICT#=GROUP)")
        k = int(num)
        if not (1 <= k <= len(conflicts)):
            raise ValueError(f"No conflict number {k}")
        conflict = conflicts[k - 1]
        wanted = group.strip().lower()
        matches = [g for g in conflict.groups if g.lower() == wanted]
        if not matches:
            options = ", ".join(conflict.groups)
            raise ValueError(f"Conflict {k} has no group {group.strip()!r} (options: {options})")
        resolutions[conflict.id] = matches[0]
    return resolutions


def _store_schedule(store: Store, user_id: str, schedule: list[ScheduleEntry]) -> None:
    # A new timetable keeps previously recorded attendance
    data = store.load(user_id)
    data.schedule = schedule
    store.save(user_id, data)
    print(f"Saved {len(schedule)} classes for user {user_id}.")


def _cmd_upload(args: argparse.Namespace, settings: Settings, store: Store) -> int:
    """
    Extract classes from a timetable image, review conflicts, save the result.
    """
    path = Path(args.image)
    try:
        image = path.read_bytes()
    except OSError as exc:
        print(f"Cannot read image: {exc}")
        return 1

    print("Analyzing timetable...")
    try:
        entries = extract_schedule(image, settings.api_key, model=settings.model, mime_type=guess_mime_type(path))
    except EmptyScheduleError as exc:
        print(str(exc))
        return 1
    print(f"Found {len(entries)} classes.")

    schedule = review_schedule(entries)
    _store_schedule(store, settings.user_id, schedule)
    return 0


def _cmd_import(args: argparse.Namespace, settings: Settings, store: Store) -> int:
    """
    Import extracted classes from a JSON file; conflicts are resolved via --pick.
    """
    entries = load_entries_file(args.file)
    if not entries:
        print("No classes found in file.")
        return 1

    conflicts = detect_conflicts(entries)
    try:
        resolutions = _parse_picks(args.pick or [], conflicts)
    except ValueError as exc:
        print(str(exc))
        return 1

    open_conflicts = unresolved_conflicts(conflicts, resolutions)
    if open_conflicts and args.strict:
        print(f"Unresolved conflicts: {len(open_conflicts)} (use --pick CONFLICT#=GROUP)")
        _print_conflicts(conflicts)
        return 1

    schedule = resolve_conflicts(entries, conflicts, resolutions)
    if open_conflicts:
        print(f"Warning: {len(open_conflicts)} conflicts left unresolved; all their groups are kept.")
    _store_schedule(store, settings.user_id, schedule)
    return 0


def _cmd_conflicts(args: argparse.Namespace, settings: Settings, store: Store) -> int:
    """
    Print all group conflicts in the saved schedule.
    """
    conflicts = detect_conflicts(store.load(settings.user_id).schedule)
    if not conflicts:
        print("No conflicts found.")
        return 0

    print(f"Conflicts found: {len(conflicts)}")
    _print_conflicts(conflicts)
    return 0


def _cmd_show(args: argparse.Namespace, settings: Settings, store: Store) -> int:
    schedule = store.load(settings.user_id).schedule
    if not schedule:
        print("No schedule saved yet. Run 'attendtrack upload <image>' first.")
        return 0

    days = [args.day.strip().capitalize()] if args.day else WEEKDAYS
    for day in days:
        todays = classes_on(schedule, day)
        if not todays:
            continue
        print(f"\n{day}")
        for entry in todays:
            print(f"  [{entry.id[:8]}] {entry_line(entry)}")
    return 0


def _find_entry(schedule: Sequence[ScheduleEntry], ref: str) -> Optional[ScheduleEntry]:
    """
    Look up an entry by full id or unique id prefix.
    """
    ref = ref.strip()
    if not ref:
        return None
    exact = [e for e in schedule if e.id == ref]
    if exact:
        return exact[0]
    matches = [e for e in schedule if e.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None


def _cmd_mark(args: argparse.Namespace, settings: Settings, store: Store) -> int:
    """
    Record attendance for one class on one date (default: today).
    """
    try:
        status = AttendanceStatus.parse(args.status)
    except ValueError:
        print(f"Unknown status: {args.status!r}")
        return 1

    if args.date:
        try:
            day = datetime.strptime(args.date.strip(), "%Y-%m-%d").date()
        except ValueError:
            print(f"Invalid date: {args.date!r} (expected YYYY-MM-DD)")
            return 1
    else:
        day = date_cls.today()

    data = store.load(settings.user_id)
    entry = _find_entry(data.schedule, args.entry_id)
    if entry is None:
        print(f"No class with id {args.entry_id!r}.")
        return 1

    if entry.day.strip().lower() != weekday_name(day).lower():
        print(f"Warning: {entry.subject} is on {entry.day}, {day.isoformat()} is a {weekday_name(day)}.")

    data.records = mark_attendance(data.records, entry, day.isoformat(), status)
    store.save(settings.user_id, data)
    print(f"Marked {entry.subject} on {day.isoformat()}: {status.value}")
    return 0


def _cmd_stats(args: argparse.Namespace, settings: Settings, store: Store) -> int:
    stats = compute_overall_stats(store.load(settings.user_id).records)
    if stats.total_classes == 0 and stats.cancelled_classes == 0:
        print("No data yet. Mark attendance to see stats.")
        return 0

    print(f"Overall attendance: {round(stats.percentage)}%")
    print(motivational_message(stats.percentage))
    print(
        f"Attended: {stats.attended_classes} | Missed: {stats.missed_classes} | "
        f"Cancelled: {stats.cancelled_classes} | Total: {stats.total_classes}"
    )
    return 0


def _cmd_reset(args: argparse.Namespace, settings: Settings, store: Store) -> int:
    store.save(settings.user_id, UserData())
    print(f"Cleared all data for user {settings.user_id}.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="attendtrack", description="Timetable attendance tracker")
    parser.add_argument("--data-dir", type=str, default=None, help="Directory for local user data")
    parser.add_argument("--user", type=str, default=None, help="User id (default: $ATTENDTRACK_USER or 'local')")
    sub = parser.add_subparsers(dest="command", required=True)

    p_upload = sub.add_parser("upload", help="Extract classes from a timetable image")
    p_upload.add_argument("image", type=str, help="Timetable image (png/jpg/webp)")

    p_import = sub.add_parser("import", help="Import extracted classes from a JSON file")
    p_import.add_argument("file", type=str, help="JSON file with a list of classes")
    p_import.add_argument(
        "--pick", action="append", metavar="CONFLICT#=GROUP", help="Keep GROUP for conflict number CONFLICT#"
    )
    p_import.add_argument("--strict", action="store_true", help="Fail if any conflict is left unresolved")

    sub.add_parser("conflicts", help="Show group conflicts in the saved schedule")

    p_show = sub.add_parser("show", help="Show the saved schedule")
    p_show.add_argument("--day", type=str, default=None, help="Only this weekday (e.g. Monday)")

    p_mark = sub.add_parser("mark", help="Mark attendance for a class")
    p_mark.add_argument("entry_id", type=str, help="Class id (or unique prefix, see 'show')")
    p_mark.add_argument("status", type=str, help="present, absent, late, excused or cancelled")
    p_mark.add_argument("--date", type=str, default=None, help="Date YYYY-MM-DD (default: today)")

    sub.add_parser("stats", help="Show attendance statistics")
    sub.add_parser("reset", help="Clear schedule and attendance records")
    sub.add_parser("interactive", help="Interactive menu mode")

    return parser


COMMANDS = {
    "upload": _cmd_upload,
    "import": _cmd_import,
    "conflicts": _cmd_conflicts,
    "show": _cmd_show,
    "mark": _cmd_mark,
    "stats": _cmd_stats,
    "reset": _cmd_reset,
}


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = _settings(args)

    try:
        store = open_store(settings)

        if args.command == "interactive":
            run_interactive(store, settings.user_id)
            raise SystemExit(0)

        handler = COMMANDS.get(args.command)
        if handler is None:
            raise SystemExit(2)
        raise SystemExit(handler(args, settings, store))
    except AttendtrackError as exc:
        print(f"Error: {exc}")
        raise SystemExit(1)
