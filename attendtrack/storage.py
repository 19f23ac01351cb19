"""
Persistent storage for each user's schedule and attendance records.

Every user gets one JSON blob:

    <data_dir>/storage_<user_id>.json
    {"schedule": [...], "records": [...]}

Two backends share this layout:
- local files (default)
- a GitHub repository, via the contents API (data/storage_<user_id>.json)

Missing state is never an error: it loads as an empty schedule with no records.
"""

from __future__ import annotations

import base64
import json
import re
from pathlib import Path
from typing import Any, Optional

import requests

from attendtrack.config import default_data_dir
from attendtrack.errors import StorageError
from attendtrack.model import AttendanceRecord, ScheduleEntry, UserData


GITHUB_API = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"


def _safe_user_id(user_id: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9_-]", "_", str(user_id).strip())
    return cleaned or "local"


def storage_filename(user_id: str) -> str:
    return f"storage_{_safe_user_id(user_id)}.json"


def user_data_from_json(data: Any) -> UserData:
    """
    Convert a decoded JSON blob into UserData.

    Deliberately forgiving: a wrong top-level shape gives empty state and
    malformed rows are skipped instead of failing the whole load.
    """
    if not isinstance(data, dict):
        return UserData()

    schedule: list[ScheduleEntry] = []
    raw_schedule = data.get("schedule", [])
    for row in raw_schedule if isinstance(raw_schedule, list) else []:
        if not isinstance(row, dict):
            continue
        try:
            schedule.append(ScheduleEntry.from_dict(row, assign_id=False))
        except (KeyError, ValueError):
            continue

    records: list[AttendanceRecord] = []
    raw_records = data.get("records", [])
    for row in raw_records if isinstance(raw_records, list) else []:
        if not isinstance(row, dict):
            continue
        try:
            records.append(AttendanceRecord.from_dict(row))
        except (TypeError, ValueError):
            continue

    return UserData(schedule=schedule, records=records)


def _dump(data: UserData) -> str:
    return json.dumps(data.to_dict(), indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Local files
# ---------------------------------------------------------------------------


def user_data_path(user_id: str, data_dir: str | Path | None = None) -> Path:
    base = Path(data_dir) if data_dir is not None else default_data_dir()
    return base / storage_filename(user_id)


def load_user_data(user_id: str, data_dir: str | Path | None = None) -> UserData:
    """
    Load a user's schedule and records.

    Returns empty state if the file does not exist or is invalid.
    """
    path = user_data_path(user_id, data_dir)

    # First run: nothing saved yet
    if not path.exists():
        return UserData()

    try:
        return user_data_from_json(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError):
        return UserData()


def save_user_data(user_id: str, data: UserData, data_dir: str | Path | None = None) -> None:
    """
    Save a user's schedule and records. Creates parent directories if needed.
    """
    path = user_data_path(user_id, data_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(_dump(data), encoding="utf-8")


# ---------------------------------------------------------------------------
# GitHub repository
# ---------------------------------------------------------------------------


class GitHubStore:
    """
    Keeps user blobs as files in a GitHub repository (one commit per save).
    """

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        session: Optional[requests.Session] = None,
        timeout: float = 30,
    ) -> None:
        if not (token and owner and repo):
            raise StorageError("GITHUB_TOKEN, GITHUB_OWNER and GITHUB_REPO must all be set")
        self.owner = owner
        self.repo = repo
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            }
        )

    def _url(self, path: str) -> str:
        return f"{GITHUB_API}/repos/{self.owner}/{self.repo}/contents/{path}"

    @staticmethod
    def _path(user_id: str) -> str:
        return f"data/{storage_filename(user_id)}"

    def _get_file(self, path: str) -> Optional[dict[str, Any]]:
        try:
            resp = self.session.get(self._url(path), timeout=self.timeout)
            if resp.status_code == 404:
                return None
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as exc:
            raise StorageError(f"Failed to fetch {path}: {exc}") from exc

    def load(self, user_id: str) -> UserData:
        file_data = self._get_file(self._path(user_id))
        if not file_data:
            return UserData()
        try:
            content = base64.b64decode(file_data.get("content", "")).decode("utf-8")
            return user_data_from_json(json.loads(content))
        except (ValueError, UnicodeDecodeError):
            return UserData()

    def save(self, user_id: str, data: UserData) -> None:
        path = self._path(user_id)
        existing = self._get_file(path)

        body: dict[str, Any] = {
            "message": f"Update data for user {user_id}",
            "content": base64.b64encode(_dump(data).encode("utf-8")).decode("ascii"),
        }
        if existing and existing.get("sha"):
            body["sha"] = existing["sha"]

        try:
            resp = self.session.put(self._url(path), json=body, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise StorageError(f"Failed to save {path}: {exc}") from exc


class LocalStore:
    """
    Same interface as GitHubStore, backed by load_user_data / save_user_data.
    """

    def __init__(self, data_dir: str | Path | None = None) -> None:
        self.data_dir = data_dir

    def load(self, user_id: str) -> UserData:
        return load_user_data(user_id, self.data_dir)

    def save(self, user_id: str, data: UserData) -> None:
        save_user_data(user_id, data, self.data_dir)
