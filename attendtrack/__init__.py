"""
attendtrack: timetable extraction, group conflict resolution and attendance tracking.
"""

from attendtrack.conflicts import detect_conflicts, resolve_conflicts, unresolved_conflicts

__all__ = ["detect_conflicts", "resolve_conflicts", "unresolved_conflicts"]
