"""Field-level rules shared by every path that writes schedule entries."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from schedule_assistant.core.enums import ScheduleCategory, SchedulePriority
from schedule_assistant.core.exceptions import ValidationAppError

logger = logging.getLogger(__name__)

DEFAULT_EVENT_DURATION = timedelta(minutes=60)
REPAIRED_EVENT_DURATION = timedelta(minutes=30)


class _Unchanged:
    def __repr__(self) -> str:
        return "UNCHANGED"


UNCHANGED = _Unchanged()


def resolve_zone(name: str | None) -> tzinfo:
    if not name or not name.strip():
        return timezone.utc
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def parse_timestamp(value: str | datetime | None, timezone_name: str | None = None) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are read in ``timezone_name`` (UTC if unknown)."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text[-1] in "Zz":
            text = f"{text[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=resolve_zone(timezone_name))
    return parsed


def _is_absent(value: str | datetime | None) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def normalize_time_range(
    start_input: str | datetime | None,
    end_input: str | datetime | None = None,
    timezone_name: str | None = None,
) -> tuple[datetime, datetime]:
    """Return a well-ordered (start, end) pair.

    A missing end means a one hour event. An end that does not come after the
    start is replaced by start + 30 minutes instead of failing.
    """
    start = parse_timestamp(start_input, timezone_name)
    if start is None:
        raise ValidationAppError("Invalid start time", details={"startTime": str(start_input)})

    if _is_absent(end_input):
        end = start + DEFAULT_EVENT_DURATION
    else:
        end = parse_timestamp(end_input, timezone_name)
        if end is None:
            raise ValidationAppError("Invalid end time", details={"endTime": str(end_input)})

    if end <= start:
        logger.warning(
            "End time is not after start time, range repaired",
            extra={"start_time": start.isoformat(), "end_time": end.isoformat()},
        )
        end = start + REPAIRED_EVENT_DURATION

    return start, end


def merge_metadata(
    existing: dict[str, Any] | None,
    incoming: dict[str, Any] | None = None,
    completed: bool | None = None,
) -> dict[str, Any] | None | _Unchanged:
    """Shallow key-wise merge, incoming keys win.

    Returns ``UNCHANGED`` when there is nothing to merge, so callers can leave
    the stored value alone. An empty merge result is ``None``.
    """
    if incoming is None and completed is None:
        return UNCHANGED

    merged = dict(existing or {})
    if incoming:
        merged.update(incoming)
    if completed is not None:
        merged["completed"] = completed
    return merged or None


def guard_category(value: Any) -> ScheduleCategory | None:
    if isinstance(value, ScheduleCategory):
        return value
    if not isinstance(value, str):
        return None
    try:
        return ScheduleCategory(value.strip().lower())
    except ValueError:
        return None


def guard_priority(value: Any) -> SchedulePriority | None:
    if isinstance(value, SchedulePriority):
        return value
    if not isinstance(value, str):
        return None
    try:
        return SchedulePriority(value.strip().lower())
    except ValueError:
        return None
