from __future__ import annotations

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_assistant.models import ScheduleEvent


class ScheduleRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _base_owner_query(self, owner_id: UUID) -> Select:
        return select(ScheduleEvent).where(ScheduleEvent.owner_id == owner_id, ScheduleEvent.deleted_at.is_(None))

    async def get_owned(self, owner_id: UUID, event_id: UUID) -> ScheduleEvent | None:
        stmt = self._base_owner_query(owner_id).where(ScheduleEvent.id == event_id)
        return await self.session.scalar(stmt)

    async def create(self, event: ScheduleEvent) -> ScheduleEvent:
        self.session.add(event)
        await self.session.flush()
        return event

    async def list_in_range(
        self,
        owner_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
    ) -> Sequence[ScheduleEvent]:
        stmt = self._base_owner_query(owner_id)
        if start is not None:
            stmt = stmt.where(ScheduleEvent.start_time >= start)
        if end is not None:
            stmt = stmt.where(ScheduleEvent.start_time < end)
        stmt = stmt.order_by(ScheduleEvent.start_time.asc())
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self.session.scalars(stmt)
        return result.all()
