from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable
from uuid import UUID

from schedule_assistant.core.enums import ScheduleCategory, ScheduleIntent, SchedulePriority
from schedule_assistant.core.exceptions import ValidationAppError
from schedule_assistant.models import ScheduleEvent
from schedule_assistant.schemas.ai_schedule import ExecuteScheduleRequest
from schedule_assistant.schemas.schedule import SchedulePayload
from schedule_assistant.services.schedule_fields import (
    UNCHANGED,
    guard_category,
    guard_priority,
    merge_metadata,
    normalize_time_range,
    parse_timestamp,
)
from schedule_assistant.services.schedules import ScheduleService

QUERY_WINDOW = timedelta(days=7)

_PASSTHROUGH_FIELDS = ("description", "location", "attendees", "timezone")


@dataclass(slots=True)
class ScheduleExecutionResult:
    intent: ScheduleIntent
    message: str
    event: ScheduleEvent | None = None
    events: list[ScheduleEvent] | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IntentExecutor:
    """Validates a confirmed proposal and applies it to the schedule store.

    Each branch performs all checks first and then exactly one store mutation
    or query; update and delete read the owned entry before touching it.
    """

    def __init__(self, schedules: ScheduleService, clock: Callable[[], datetime] = _utcnow) -> None:
        self.schedules = schedules
        self.clock = clock

    async def execute(self, owner_id: UUID, request: ExecuteScheduleRequest) -> ScheduleExecutionResult:
        try:
            intent = ScheduleIntent(str(request.intent).strip().lower())
        except ValueError as exc:
            raise ValidationAppError("Unsupported intent", details={"intent": request.intent}) from exc

        if intent == ScheduleIntent.CREATE:
            return await self.create(owner_id, request.data)
        if intent == ScheduleIntent.UPDATE:
            return await self.update(owner_id, request.schedule_id, request.data)
        if intent == ScheduleIntent.DELETE:
            return await self.delete(owner_id, request.schedule_id)
        return await self.query(owner_id, request.data)

    async def create(self, owner_id: UUID, data: SchedulePayload | None) -> ScheduleExecutionResult:
        title = (data.title or "").strip() if data else ""
        if data is None or not title or not data.start_time:
            raise ValidationAppError("Title and start time are required to create a schedule")

        start_time, end_time = normalize_time_range(data.start_time, data.end_time, data.timezone)
        metadata = merge_metadata(None, data.metadata, data.completed)

        fields: dict[str, Any] = {
            "title": title,
            "start_time": start_time,
            "end_time": end_time,
            "category": guard_category(data.category) or ScheduleCategory.WORK,
            "priority": guard_priority(data.priority) or SchedulePriority.MEDIUM,
            "is_important": data.is_important if data.is_important is not None else False,
            "is_urgent": data.is_urgent if data.is_urgent is not None else False,
            "extra_data": None if metadata is UNCHANGED else metadata,
        }
        for name in _PASSTHROUGH_FIELDS:
            fields[name] = getattr(data, name)

        event = await self.schedules.create_event(owner_id, fields)
        return ScheduleExecutionResult(intent=ScheduleIntent.CREATE, message="Schedule created", event=event)

    async def update(
        self,
        owner_id: UUID,
        schedule_id: UUID | None,
        data: SchedulePayload | None,
    ) -> ScheduleExecutionResult:
        if schedule_id is None:
            raise ValidationAppError("Schedule id is required for update")
        if data is None or not data.model_dump(exclude_none=True):
            raise ValidationAppError("Nothing to update")

        event = await self.schedules.fetch_owned(owner_id, schedule_id)

        fields: dict[str, Any] = {}
        title = (data.title or "").strip()
        if title:
            fields["title"] = title
        for name in _PASSTHROUGH_FIELDS:
            value = getattr(data, name)
            if value is not None:
                fields[name] = value

        category = guard_category(data.category)
        if category is not None:
            fields["category"] = category
        priority = guard_priority(data.priority)
        if priority is not None:
            fields["priority"] = priority
        if data.is_important is not None:
            fields["is_important"] = data.is_important
        if data.is_urgent is not None:
            fields["is_urgent"] = data.is_urgent

        # Both ends are re-checked together even if only one of them moved.
        if data.start_time or data.end_time:
            fields["start_time"], fields["end_time"] = normalize_time_range(
                data.start_time or event.start_time,
                data.end_time or event.end_time,
                data.timezone or event.timezone,
            )

        metadata = merge_metadata(event.extra_data, data.metadata, data.completed)
        if metadata is not UNCHANGED:
            fields["extra_data"] = metadata
        if not fields:
            raise ValidationAppError("Nothing to update")

        updated = await self.schedules.update_event(owner_id, schedule_id, fields)
        return ScheduleExecutionResult(intent=ScheduleIntent.UPDATE, message="Schedule updated", event=updated)

    async def delete(self, owner_id: UUID, schedule_id: UUID | None) -> ScheduleExecutionResult:
        if schedule_id is None:
            raise ValidationAppError("Schedule id is required for delete")

        event = await self.schedules.fetch_owned(owner_id, schedule_id)
        await self.schedules.soft_delete(event)
        return ScheduleExecutionResult(
            intent=ScheduleIntent.DELETE,
            message=f'Deleted "{event.title}"',
            event=event,
        )

    async def query(self, owner_id: UUID, data: SchedulePayload | None) -> ScheduleExecutionResult:
        timezone_name = data.timezone if data else None
        start_raw = data.start_time if data else None
        end_raw = data.end_time if data else None

        if start_raw:
            start = parse_timestamp(start_raw, timezone_name)
            if start is None:
                raise ValidationAppError("Invalid start time", details={"startTime": start_raw})
        else:
            start = self.clock()

        if end_raw:
            end = parse_timestamp(end_raw, timezone_name)
            if end is None:
                raise ValidationAppError("Invalid end time", details={"endTime": end_raw})
        else:
            end = start + QUERY_WINDOW

        events = await self.schedules.find_in_range(owner_id, start=start, end=end)
        return ScheduleExecutionResult(intent=ScheduleIntent.QUERY, message="Here are your schedules", events=events)
