from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, Field

from schedule_assistant.core.enums import ScheduleCategory, SchedulePriority
from schedule_assistant.schemas.common import BaseReadModel, CamelModel


class SchedulePayload(CamelModel):
    """Partially populated schedule fields, as proposed by the model or edited by the user.

    Timestamps stay raw strings here; they are parsed during execution so an
    unparseable value becomes a validation failure of the operation itself.
    Category and priority are free strings and are guarded against their enums
    on use.
    """

    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    location: str | None = Field(default=None, max_length=255)
    attendees: str | None = Field(default=None, max_length=512)
    category: str | None = None
    priority: str | None = None
    is_important: bool | None = None
    is_urgent: bool | None = None
    timezone: str | None = Field(default=None, max_length=64)
    completed: bool | None = None
    metadata: dict[str, Any] | None = None


class ScheduleCreate(SchedulePayload):
    title: str = Field(min_length=1, max_length=255)
    start_time: str = Field(min_length=1)


class ScheduleRead(BaseReadModel):
    id: UUID
    owner_id: UUID
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime
    category: ScheduleCategory
    priority: SchedulePriority
    is_important: bool
    is_urgent: bool
    location: str | None = None
    attendees: str | None = None
    timezone: str | None = None
    metadata: dict[str, Any] | None = Field(default=None, validation_alias=AliasChoices("extra_data", "metadata"))
    created_at: datetime | None = None
    updated_at: datetime | None = None
