from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_assistant.models import AIModel


class AIModelRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, model_id: UUID) -> AIModel | None:
        return await self.session.scalar(select(AIModel).where(AIModel.id == model_id))

    async def get_enabled(self, model_id: UUID) -> AIModel | None:
        stmt = select(AIModel).where(AIModel.id == model_id, AIModel.is_active.is_(True))
        return await self.session.scalar(stmt)

    async def get_top_active(self) -> AIModel | None:
        stmt = (
            select(AIModel)
            .where(AIModel.is_active.is_(True))
            .order_by(AIModel.sort_order.asc(), AIModel.created_at.desc())
            .limit(1)
        )
        return await self.session.scalar(stmt)

    async def get_any(self) -> AIModel | None:
        stmt = select(AIModel).order_by(AIModel.created_at.asc()).limit(1)
        return await self.session.scalar(stmt)
