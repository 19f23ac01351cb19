"""
Timetable extraction (image -> schedule entries).

Sends the uploaded timetable image to a vision-language model (Gemini REST
API) and normalises its JSON answer into ScheduleEntry objects with fresh ids.

The same normaliser handles offline JSON files (`load_entries_file`), so the
review workflow can be run without network access.
"""

from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any, Optional

import requests

from attendtrack.config import DEFAULT_MODEL
from attendtrack.errors import EmptyScheduleError, ExtractionError
from attendtrack.model import ScheduleEntry


API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

EXTRACTION_PROMPT = """Analyze this timetable image VERY CAREFULLY. This is a grid where:
- The FIRST COLUMN contains day names (Monday, Tuesday, etc.)
- The HEADER ROW contains time slots (like 9-10, 10-11, 11-12, 12-01, 01-02, 02-03, 03-04)
- Each cell contains a class name, or is EMPTY

Rules:
1. Only extract visible text. Empty, blank or unreadable cells get NO entry.
2. Map times from the column headers, e.g. column "9-10" -> startTime "9:00 AM",
   endTime "10:00 AM"; column "12-01" -> "12:00 PM" to "1:00 PM".
3. A cell spanning two columns (labs) ends at the END of the second column.
4. Groups: for "G1", "G2", "Group 1" etc. fill the group field. "SC LAB G1" means
   subject "SC LAB" and group "G1".
5. One row = one day. Do not mix data from different rows.
6. Do not hallucinate. If uncertain about a cell, skip it.

Return a JSON array of objects with:
- day: string (Monday, Tuesday, ...)
- startTime: string (H:MM AM/PM)
- endTime: string (H:MM AM/PM)
- subject: string
- room: string or null
- group: string or null"""

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "day": {"type": "STRING"},
            "startTime": {"type": "STRING"},
            "endTime": {"type": "STRING"},
            "subject": {"type": "STRING"},
            "room": {"type": "STRING", "nullable": True},
            "group": {"type": "STRING", "nullable": True},
        },
        "required": ["day", "startTime", "endTime", "subject"],
    },
}


def guess_mime_type(path: str | Path) -> str:
    suffix = Path(path).suffix.lower()
    if suffix in (".jpg", ".jpeg"):
        return "image/jpeg"
    if suffix == ".webp":
        return "image/webp"
    return "image/png"


def build_request(image_bytes: bytes, mime_type: str = "image/png") -> dict[str, Any]:
    return {
        "contents": [
            {
                "parts": [
                    {
                        "inline_data": {
                            "mime_type": mime_type,
                            "data": base64.b64encode(image_bytes).decode("ascii"),
                        }
                    },
                    {"text": EXTRACTION_PROMPT},
                ]
            }
        ],
        "generationConfig": {
            "temperature": 0,
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
        },
    }


def _response_text(payload: dict[str, Any]) -> str:
    """
    Pull the model's text out of a generateContent response.
    """
    chunks: list[str] = []
    for cand in payload.get("candidates") or []:
        content = cand.get("content") or {}
        for part in content.get("parts") or []:
            text = part.get("text")
            if isinstance(text, str):
                chunks.append(text)
        if chunks:
            break
    return "".join(chunks)


def parse_extraction_response(payload: Any) -> list[ScheduleEntry]:
    """
    Normalise extracted rows into ScheduleEntry objects.

    Accepts the raw API response dict, the model's JSON text, or an already
    decoded list of rows. Rows missing a required field are dropped; rows
    without an id get a fresh one.
    """
    rows: Any = payload
    if isinstance(rows, dict) and "candidates" in rows:
        rows = _response_text(rows)
    if isinstance(rows, str):
        if not rows.strip():
            return []
        try:
            rows = json.loads(rows)
        except json.JSONDecodeError as exc:
            raise ExtractionError(f"Extraction returned invalid JSON: {exc}") from exc
    if isinstance(rows, dict):
        rows = rows.get("schedule", [])
    if not isinstance(rows, list):
        raise ExtractionError("Extraction did not return a list of classes.")

    entries: list[ScheduleEntry] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        try:
            entries.append(ScheduleEntry.from_dict(row))
        except (KeyError, ValueError):
            continue
    return entries


def extract_schedule(
    image_bytes: bytes,
    api_key: Optional[str],
    model: str = DEFAULT_MODEL,
    mime_type: str = "image/png",
    session: Optional[requests.Session] = None,
    timeout: float = 120,
) -> list[ScheduleEntry]:
    """
    Run the timetable image through the extraction model.

    Raises ExtractionError on a missing key, HTTP failure or unusable answer,
    and EmptyScheduleError when no classes were found.
    """
    if not api_key:
        raise ExtractionError("API key is missing. Set GEMINI_API_KEY.")

    http = session or requests.Session()
    try:
        resp = http.post(
            API_URL.format(model=model),
            headers={"x-goog-api-key": api_key},
            json=build_request(image_bytes, mime_type),
            timeout=timeout,
        )
        resp.raise_for_status()
        payload = resp.json()
    except requests.RequestException as exc:
        raise ExtractionError(f"Failed to process schedule image: {exc}") from exc
    except ValueError as exc:
        raise ExtractionError("Extraction API returned a non-JSON response.") from exc

    entries = parse_extraction_response(payload)
    if not entries:
        raise EmptyScheduleError()
    return entries


def load_entries_file(path: str | Path) -> list[ScheduleEntry]:
    """
    Load extracted rows from a JSON file (list of rows or {"schedule": [...]}).
    """
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ExtractionError(f"Cannot read {p}: {exc}") from exc
    return parse_extraction_response(text)
