from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import Field

from schedule_assistant.core.enums import ScheduleIntent
from schedule_assistant.schemas.common import CamelModel
from schedule_assistant.schemas.schedule import SchedulePayload, ScheduleRead


class ParseScheduleRequest(CamelModel):
    message: str = Field(min_length=1, max_length=4000)
    timezone: str | None = Field(default=None, max_length=64)
    model_id: UUID | None = None
    now: datetime | None = None


class ExecuteScheduleRequest(CamelModel):
    # Kept as a plain string; unknown intents are rejected by the executor.
    intent: str
    schedule_id: UUID | None = None
    summary: str | None = None
    data: SchedulePayload | None = None
    context: dict[str, Any] | None = None


class AIScheduleProposal(CamelModel):
    intent: ScheduleIntent
    summary: str
    data: SchedulePayload
    confidence: float | None = None
    original_event_id: str | None = None
    missing_fields: list[str] = Field(default_factory=list)
    requires_clarification: bool = False
    follow_up_question: str | None = None


class AIScheduleResponse(CamelModel):
    reply: str
    requires_clarification: bool
    follow_up_question: str | None = None
    proposal: AIScheduleProposal | None = None
    raw: dict[str, Any] | None = None


class ScheduleExecutionRead(CamelModel):
    intent: ScheduleIntent
    message: str
    event: ScheduleRead | None = None
    events: list[ScheduleRead] | None = None
