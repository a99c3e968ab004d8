from __future__ import annotations

from typing import AsyncGenerator
from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_assistant.core.exceptions import UnauthorizedError
from schedule_assistant.db.session import get_session
from schedule_assistant.services.ai.executor import IntentExecutor
from schedule_assistant.services.ai.service import AIScheduleService
from schedule_assistant.services.schedules import ScheduleService


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


async def get_current_owner_id(x_user_id: str | None = Header(default=None)) -> UUID:
    # Identity is established upstream; this service only trusts the forwarded header.
    if not x_user_id:
        raise UnauthorizedError("X-User-Id header missing")
    try:
        return UUID(x_user_id)
    except (ValueError, TypeError) as exc:
        raise UnauthorizedError("Invalid X-User-Id header") from exc


async def get_schedule_service(session: AsyncSession = Depends(get_db_session)) -> ScheduleService:
    return ScheduleService(session)


async def get_intent_executor(schedules: ScheduleService = Depends(get_schedule_service)) -> IntentExecutor:
    return IntentExecutor(schedules)


async def get_ai_schedule_service(
    session: AsyncSession = Depends(get_db_session),
    schedules: ScheduleService = Depends(get_schedule_service),
) -> AIScheduleService:
    return AIScheduleService(session, schedules=schedules)
