from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from schedule_assistant.core.enums import ScheduleCategory, SchedulePriority
from schedule_assistant.db.base import Base
from schedule_assistant.db.types import db_enum
from schedule_assistant.models.mixins import TimestampMixin


class ScheduleEvent(Base, TimestampMixin):
    """A personal schedule entry, owned by exactly one user."""

    __tablename__ = "user_schedules"
    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_user_schedules_end_after_start"),
        Index("ix_user_schedules_owner_start", "owner_id", "start_time"),
        Index("ix_user_schedules_owner_category", "owner_id", "category"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), index=True, nullable=False)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    category: Mapped[ScheduleCategory] = mapped_column(
        db_enum(ScheduleCategory, "schedule_category"),
        default=ScheduleCategory.WORK,
        nullable=False,
    )
    priority: Mapped[SchedulePriority] = mapped_column(
        db_enum(SchedulePriority, "schedule_priority"),
        default=SchedulePriority.MEDIUM,
        nullable=False,
    )
    is_important: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_urgent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    attendees: Mapped[str | None] = mapped_column(String(512), nullable=True)
    # Timezone the entry was authored in, free-form label.
    timezone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    # "metadata" is reserved on declarative classes.
    extra_data: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSONB, nullable=True)

    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
