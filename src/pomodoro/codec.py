"""Conversion between ledger objects and their persisted JSON-ready records."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from .ledger import Activity, Segment
from .modes import is_mode

logger = logging.getLogger("pomodoro.codec")


@dataclass(frozen=True)
class LegacySession:
    """Session record written by older releases (four pomodoros per entry)."""
    date: dt.datetime
    pomodoros: int


def format_timestamp(value: dt.datetime) -> str:
    return value.isoformat()


def parse_timestamp(value: Any, field: str) -> dt.datetime:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field} must be an ISO-8601 string.")
    try:
        parsed = dt.datetime.fromisoformat(value.strip())
    except ValueError as error:
        raise ValueError(f"{field} is not a valid ISO-8601 timestamp: {value!r}") from error
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


def segment_to_record(segment: Segment) -> dict[str, Any]:
    return {
        "start": format_timestamp(segment.start),
        "end": format_timestamp(segment.end),
        "elapsedSeconds": segment.elapsed_seconds,
    }


def segment_from_record(raw: Mapping[str, Any]) -> Segment:
    if not isinstance(raw, Mapping):
        raise ValueError("segment must be an object.")
    return Segment(
        start=parse_timestamp(raw.get("start"), "segment.start"),
        end=parse_timestamp(raw.get("end"), "segment.end"),
        elapsed_seconds=_as_int(raw.get("elapsedSeconds"), "segment.elapsedSeconds"),
    )


def activity_to_record(activity: Activity) -> dict[str, Any]:
    return {
        "id": activity.id,
        "mode": activity.mode,
        "title": activity.title,
        "start": format_timestamp(activity.start),
        "end": format_timestamp(activity.end) if activity.end is not None else None,
        "segments": [segment_to_record(segment) for segment in activity.segments],
        "elapsedSeconds": activity.elapsed_seconds,
        "completed": activity.completed,
        "segmentStart": (
            format_timestamp(activity.segment_start)
            if activity.segment_start is not None
            else None
        ),
    }


def activity_from_record(raw: Mapping[str, Any], *, fallback_id: int) -> Activity:
    if not isinstance(raw, Mapping):
        raise ValueError("activity must be an object.")

    mode = raw.get("mode")
    if not is_mode(mode):
        raise ValueError(f"activity.mode is not a known mode: {mode!r}")

    raw_id = raw.get("id")
    activity_id = _as_int(raw_id, "activity.id") if raw_id is not None else fallback_id

    title = raw.get("title")
    if title is not None and not isinstance(title, str):
        raise ValueError("activity.title must be a string or null.")

    raw_segments = raw.get("segments") or []
    if not isinstance(raw_segments, list):
        raise ValueError("activity.segments must be a list.")

    raw_completed = raw.get("completed", False)
    if not isinstance(raw_completed, bool):
        raise ValueError("activity.completed must be a boolean.")

    return Activity(
        id=activity_id,
        mode=mode,
        title=title,
        start=parse_timestamp(raw.get("start"), "activity.start"),
        end=_optional_timestamp(raw.get("end"), "activity.end"),
        segments=[segment_from_record(item) for item in raw_segments],
        elapsed_seconds=_as_int(raw.get("elapsedSeconds", 0), "activity.elapsedSeconds"),
        completed=raw_completed,
        segment_start=_optional_timestamp(raw.get("segmentStart"), "activity.segmentStart"),
    )


def activities_from_records(records: Iterable[Any]) -> list[Activity]:
    """Decode activity records, skipping malformed entries with a warning.

    Records written before activities carried ids, or whose id was already
    taken by an earlier record, get fresh ids that follow the largest
    persisted id. Only the last activity may still be open; an open entry
    followed by later activities is skipped.
    """
    raw_records = list(records)
    known_ids = [
        record["id"]
        for record in raw_records
        if isinstance(record, Mapping)
        and isinstance(record.get("id"), int)
        and not isinstance(record.get("id"), bool)
    ]
    next_id = max(known_ids, default=0) + 1

    decoded: list[tuple[int, Activity]] = []
    seen_ids: set[int] = set()
    for index, record in enumerate(raw_records):
        try:
            activity = activity_from_record(record, fallback_id=next_id)
        except ValueError as error:
            logger.warning("Skipping activity record #%d: %s", index, error)
            continue
        if activity.id in seen_ids:
            logger.warning(
                "Activity record #%d reuses id %d; assigning id %d",
                index,
                activity.id,
                next_id,
            )
            activity.id = next_id
        if activity.id == next_id:
            next_id += 1
        seen_ids.add(activity.id)
        decoded.append((index, activity))

    activities: list[Activity] = []
    for position, (index, activity) in enumerate(decoded):
        if activity.is_open and position < len(decoded) - 1:
            logger.warning(
                "Skipping activity record #%d: open activity %d is not the last entry",
                index,
                activity.id,
            )
            continue
        activities.append(activity)
    return activities


def legacy_sessions_from_records(records: Iterable[Any]) -> list[LegacySession]:
    sessions: list[LegacySession] = []
    for index, record in enumerate(records):
        try:
            if not isinstance(record, Mapping):
                raise ValueError("session must be an object.")
            sessions.append(
                LegacySession(
                    date=parse_timestamp(record.get("date"), "session.date"),
                    pomodoros=_as_int(record.get("pomodoros", 0), "session.pomodoros"),
                )
            )
        except ValueError as error:
            logger.warning("Skipping legacy session record #%d: %s", index, error)
    return sessions


def _optional_timestamp(value: Any, field: str) -> Optional[dt.datetime]:
    if value is None:
        return None
    return parse_timestamp(value, field)


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field} must be an integer.")
    return value
