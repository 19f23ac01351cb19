"""
Runtime configuration.

Paths default to locations inside the package; credentials come from the
environment. CLI flags (--data-dir, --user) override both.

Environment variables:
    ATTENDTRACK_DATA_DIR   directory holding storage_<user>.json files
    ATTENDTRACK_USER       user id (default: "local")
    GEMINI_API_KEY         key for the extraction API (API_KEY also accepted)
    ATTENDTRACK_MODEL      extraction model name
    GITHUB_TOKEN / GITHUB_OWNER / GITHUB_REPO
                           store user data in a GitHub repository instead
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional


PACKAGE_DIR = Path(__file__).resolve().parent

DEFAULT_USER = "local"
DEFAULT_MODEL = "gemini-2.0-flash"


def default_data_dir() -> Path:
    """
    Return the default directory for per-user JSON files inside the package.

    A function instead of a constant so tests can override the location.
    """
    return PACKAGE_DIR / "data" / "users"


def _env(environ: Mapping[str, str], *names: str) -> Optional[str]:
    for name in names:
        value = (environ.get(name) or "").strip()
        if value:
            return value
    return None


@dataclass
class Settings:
    data_dir: Path
    user_id: str = DEFAULT_USER
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    github_token: Optional[str] = None
    github_owner: Optional[str] = None
    github_repo: Optional[str] = None

    @property
    def uses_github(self) -> bool:
        return bool(self.github_token and self.github_owner and self.github_repo)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        data_dir = _env(env, "ATTENDTRACK_DATA_DIR")
        return cls(
            data_dir=Path(data_dir) if data_dir else default_data_dir(),
            user_id=_env(env, "ATTENDTRACK_USER") or DEFAULT_USER,
            api_key=_env(env, "GEMINI_API_KEY", "API_KEY"),
            model=_env(env, "ATTENDTRACK_MODEL") or DEFAULT_MODEL,
            github_token=_env(env, "GITHUB_TOKEN"),
            github_owner=_env(env, "GITHUB_OWNER"),
            github_repo=_env(env, "GITHUB_REPO"),
        )
