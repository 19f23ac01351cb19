"""
Exceptions raised by the I/O-facing parts of attendtrack.

Conflict handling and statistics are pure and raise nothing; these cover
extraction and remote storage, which can fail for reasons outside our control.
"""

from __future__ import annotations


class AttendtrackError(Exception):
    """Base class for all attendtrack errors."""


class ExtractionError(AttendtrackError):
    """The timetable image could not be turned into schedule entries."""


class EmptyScheduleError(ExtractionError):
    """Extraction succeeded but found no classes."""

    def __init__(self, message: str = "No classes found. Please upload a clearer image.") -> None:
        super().__init__(message)


class StorageError(AttendtrackError):
    """The remote store is misconfigured or a request to it failed."""
