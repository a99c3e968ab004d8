from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from schedule_assistant.api.deps import (
    get_ai_schedule_service,
    get_current_owner_id,
    get_intent_executor,
    get_schedule_service,
)
from schedule_assistant.core.responses import success_response
from schedule_assistant.schemas.ai_schedule import ExecuteScheduleRequest, ParseScheduleRequest, ScheduleExecutionRead
from schedule_assistant.schemas.schedule import ScheduleCreate, SchedulePayload, ScheduleRead
from schedule_assistant.services.ai.executor import IntentExecutor, ScheduleExecutionResult
from schedule_assistant.services.ai.service import AIScheduleService
from schedule_assistant.services.schedules import ScheduleService

router = APIRouter(prefix="/schedules", tags=["Schedules"])


def _dump_event(item) -> dict:
    return ScheduleRead.model_validate(item).model_dump(mode="json", by_alias=True)


def _dump_result(result: ScheduleExecutionResult) -> dict:
    return ScheduleExecutionRead(
        intent=result.intent,
        message=result.message,
        event=ScheduleRead.model_validate(result.event) if result.event is not None else None,
        events=[ScheduleRead.model_validate(item) for item in result.events] if result.events is not None else None,
    ).model_dump(mode="json", by_alias=True)


def _ensure_aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def resolve_range(
    day: date | None,
    start: datetime | None,
    end: datetime | None,
) -> tuple[datetime | None, datetime | None]:
    range_start: datetime | None = None
    range_end: datetime | None = None
    if day is not None:
        range_start = datetime.combine(day, time.min, tzinfo=timezone.utc)
        range_end = range_start + timedelta(days=1)
    if start is not None:
        range_start = _ensure_aware(start)
    if end is not None:
        range_end = _ensure_aware(end)
    if range_start is not None and range_end is not None and range_end < range_start:
        range_start, range_end = range_end, range_start
    return range_start, range_end


@router.get("")
async def list_schedules(
    request: Request,
    day: date | None = Query(default=None, alias="date"),
    start: datetime | None = None,
    end: datetime | None = None,
    owner_id: UUID = Depends(get_current_owner_id),
    schedules: ScheduleService = Depends(get_schedule_service),
):
    range_start, range_end = resolve_range(day, start, end)
    items = await schedules.find_in_range(owner_id, start=range_start, end=range_end)
    return success_response(data=[_dump_event(item) for item in items], request=request)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_schedule(
    payload: ScheduleCreate,
    request: Request,
    owner_id: UUID = Depends(get_current_owner_id),
    executor: IntentExecutor = Depends(get_intent_executor),
):
    result = await executor.create(owner_id, payload)
    return success_response(data=_dump_event(result.event), request=request)


@router.post("/parse")
async def parse_schedule(
    payload: ParseScheduleRequest,
    request: Request,
    owner_id: UUID = Depends(get_current_owner_id),
    service: AIScheduleService = Depends(get_ai_schedule_service),
):
    response = await service.parse(owner_id, payload)
    return success_response(data=response.model_dump(mode="json", by_alias=True), request=request)


@router.post("/execute")
async def execute_schedule(
    payload: ExecuteScheduleRequest,
    request: Request,
    owner_id: UUID = Depends(get_current_owner_id),
    service: AIScheduleService = Depends(get_ai_schedule_service),
):
    result = await service.execute(owner_id, payload)
    return success_response(data=_dump_result(result), request=request)


@router.patch("/{schedule_id}")
async def update_schedule(
    schedule_id: UUID,
    payload: SchedulePayload,
    request: Request,
    owner_id: UUID = Depends(get_current_owner_id),
    executor: IntentExecutor = Depends(get_intent_executor),
):
    result = await executor.update(owner_id, schedule_id, payload)
    return success_response(data=_dump_event(result.event), request=request)


@router.delete("/{schedule_id}")
async def delete_schedule(
    schedule_id: UUID,
    request: Request,
    owner_id: UUID = Depends(get_current_owner_id),
    executor: IntentExecutor = Depends(get_intent_executor),
):
    await executor.delete(owner_id, schedule_id)
    return success_response(data={"ok": True}, request=request)
