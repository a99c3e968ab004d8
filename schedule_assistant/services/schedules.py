from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from schedule_assistant.core.exceptions import NotFoundError
from schedule_assistant.models import ScheduleEvent
from schedule_assistant.repositories.schedule import ScheduleRepository


class ScheduleService:
    """Owner-scoped schedule storage. Tombstoned entries are invisible to every read."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.schedules = ScheduleRepository(session)

    async def create_event(self, owner_id: UUID, fields: dict[str, Any]) -> ScheduleEvent:
        event = ScheduleEvent(owner_id=owner_id, **fields)
        await self.schedules.create(event)
        await self.session.commit()
        await self.session.refresh(event)
        return event

    async def fetch_owned(self, owner_id: UUID, event_id: UUID) -> ScheduleEvent:
        event = await self.schedules.get_owned(owner_id, event_id)
        if event is None:
            raise NotFoundError("Schedule not found or not accessible")
        return event

    async def update_event(self, owner_id: UUID, event_id: UUID, fields: dict[str, Any]) -> ScheduleEvent:
        event = await self.fetch_owned(owner_id, event_id)
        for name, value in fields.items():
            setattr(event, name, value)
        await self.session.commit()
        await self.session.refresh(event)
        return event

    async def soft_delete(self, event: ScheduleEvent) -> None:
        event.deleted_at = datetime.now(timezone.utc)
        await self.session.commit()

    async def find_in_range(
        self,
        owner_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[ScheduleEvent]:
        return list(await self.schedules.list_in_range(owner_id, start=start, end=end))

    async def find_upcoming(self, owner_id: UUID, limit: int = 5, now: datetime | None = None) -> list[ScheduleEvent]:
        start = now or datetime.now(timezone.utc)
        return list(await self.schedules.list_in_range(owner_id, start=start, limit=limit))
