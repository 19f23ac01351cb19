"""
Conflict detection and resolution.

Given the weekly schedule extracted from a timetable image, detect slots that
are claimed by more than one cohort group.

Conflict rule:
    same (day, start, end) AND at least 2 distinct group tags
Entries without a group apply to every cohort and never conflict.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Mapping, Sequence

from attendtrack.model import Conflict, ConflictOption, GroupTag, ScheduleEntry, new_id


def _bucket_by_slot(entries: Iterable[ScheduleEntry]) -> dict[tuple[str, str, str], list[ScheduleEntry]]:
    # dicts keep insertion order -> buckets come out in first-seen slot order
    buckets: dict[tuple[str, str, str], list[ScheduleEntry]] = {}
    for entry in entries:
        buckets.setdefault(entry.slot, []).append(entry)
    return buckets


def _bucket_by_group(items: list[ScheduleEntry]) -> dict[GroupTag, list[ScheduleEntry]]:
    by_group: dict[GroupTag, list[ScheduleEntry]] = defaultdict(list)
    for entry in items:
        by_group[entry.group_tag].append(entry)
    return by_group


def detect_conflicts(entries: Sequence[ScheduleEntry]) -> list[Conflict]:
    """
    Find slots where two or more distinct groups have classes at the same time.

    Each slot yields at most one Conflict. Options follow the first-seen order
    of their group; universal (untagged) entries are left out of every option.
    """
    conflicts: list[Conflict] = []

    for (day, start, end), items in _bucket_by_slot(entries).items():
        by_group = _bucket_by_group(items)
        tagged = [tag for tag in by_group if not tag.is_universal]
        if len(tagged) < 2:
            continue

        conflicts.append(
            Conflict(
                id=new_id(),
                day=day,
                start_time=start,
                end_time=end,
                options=[ConflictOption(group=str(tag.tag), items=list(by_group[tag])) for tag in tagged],
            )
        )

    return conflicts


def resolve_conflicts(
    entries: Sequence[ScheduleEntry],
    conflicts: Sequence[Conflict],
    resolutions: Mapping[str, str],
) -> list[ScheduleEntry]:
    """
    Filter the schedule down to the groups the user picked.

    For every conflict with a selection, the entries of all other options are
    dropped. Conflicts without a selection are passed through untouched, and
    selections for unknown conflict ids or groups are ignored. Order is preserved.
    """
    exclude_ids: set[str] = set()

    for conflict in conflicts:
        selected = resolutions.get(conflict.id)
        if selected not in conflict.groups:
            continue
        for option in conflict.options:
            if option.group != selected:
                exclude_ids.update(item.id for item in option.items)

    return [entry for entry in entries if entry.id not in exclude_ids]


def unresolved_conflicts(conflicts: Sequence[Conflict], resolutions: Mapping[str, str]) -> list[Conflict]:
    """
    Return conflicts that lack a selection matching one of their options.

    Callers that need a fully resolved schedule check this before resolving.
    """
    return [c for c in conflicts if resolutions.get(c.id) not in c.groups]
