from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from schedule_assistant.core.enums import ScheduleCategory, ScheduleIntent, SchedulePriority

NO_EVENTS_LINE = "No upcoming events"


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _line_safe(text: str) -> str:
    return " ".join(str(text).replace("|", "/").split())


def format_event_line(event) -> str:
    return "|".join(
        [
            str(event.id),
            _line_safe(event.title),
            format_timestamp(event.start_time),
            format_timestamp(event.end_time),
        ]
    )


def _choices(values: Iterable) -> str:
    return "|".join(item.value for item in values)


def build_system_prompt(now: datetime, timezone_name: str, events: Iterable) -> str:
    event_lines = [format_event_line(event) for event in events]
    schema = f"""{{
  "reply": "Friendly acknowledgement and short summary for the user",
  "intent": "{_choices(ScheduleIntent)}",
  "confidence": 0.0-1.0,
  "follow_up_question": "question when missing_fields is not empty" | null,
  "missing_fields": ["field name"],
  "target_event_id": "id for update/delete" | null,
  "proposal": {{
    "title": "...",
    "description": "...",
    "startTime": "ISO timestamp",
    "endTime": "ISO timestamp",
    "location": "...",
    "attendees": "...",
    "category": "{_choices(ScheduleCategory)}",
    "priority": "{_choices(SchedulePriority)}",
    "isImportant": true|false,
    "isUrgent": true|false,
    "timezone": "{timezone_name}"
  }}
}}"""

    return "\n".join(
        [
            "You are an intelligent scheduling assistant.",
            f"Current server time: {format_timestamp(now)}",
            f"User timezone: {timezone_name}",
            "Upcoming user events (id|title|start|end):",
            "\n".join(event_lines) if event_lines else NO_EVENTS_LINE,
            "Always respond ONLY with JSON matching this schema, without any other text:",
            schema,
            "For update and delete set target_event_id to the id of one of the events listed above.",
            "If the request is ambiguous set missing_fields with required data and provide follow_up_question.",
        ]
    )
