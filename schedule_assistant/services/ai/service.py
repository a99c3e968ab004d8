from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from schedule_assistant.core.config import get_settings
from schedule_assistant.repositories.ai_model import AIModelRepository
from schedule_assistant.schemas.ai_schedule import AIScheduleResponse, ExecuteScheduleRequest, ParseScheduleRequest
from schedule_assistant.services.ai.executor import IntentExecutor, ScheduleExecutionResult
from schedule_assistant.services.ai.model_resolver import ModelResolver
from schedule_assistant.services.ai.parser import parse_assistant_content
from schedule_assistant.services.ai.prompt import build_system_prompt
from schedule_assistant.services.ai.proposal import build_schedule_response
from schedule_assistant.services.ai.providers import ModelGateway
from schedule_assistant.services.schedules import ScheduleService

logger = logging.getLogger(__name__)

UNAVAILABLE_REPLY = "Sorry, I could not understand this request right now. Please rephrase it or try again later."


class AIScheduleService:
    """Natural-language schedule assistant: ``parse`` proposes, ``execute`` applies."""

    def __init__(
        self,
        session: AsyncSession | None,
        *,
        schedules: ScheduleService | None = None,
        gateway: ModelGateway | None = None,
    ) -> None:
        self.settings = get_settings()
        self.schedules = schedules or ScheduleService(session)
        self.gateway = gateway or ModelGateway(
            ModelResolver(AIModelRepository(session), self.settings.ai_default_model_id),
            timeout_ms=self.settings.ai_completion_timeout_ms,
        )
        self.executor = IntentExecutor(self.schedules)

    @staticmethod
    def _unavailable_response() -> AIScheduleResponse:
        return AIScheduleResponse(reply=UNAVAILABLE_REPLY, requires_clarification=True)

    async def parse(self, owner_id: UUID, payload: ParseScheduleRequest) -> AIScheduleResponse:
        # Model lookup problems are the operator's, not the model's: they propagate.
        handle = await self.gateway.resolve_model(payload.model_id)
        timezone_name = (payload.timezone or "").strip() or self.settings.default_user_timezone
        now = payload.now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        upcoming = await self.schedules.find_upcoming(owner_id, self.settings.ai_upcoming_events_limit, now=now)
        system_prompt = build_system_prompt(now, timezone_name, upcoming)

        try:
            content = await asyncio.wait_for(
                self.gateway.complete(handle, system_prompt, payload.message.strip(), self.settings.ai_temperature),
                timeout=self.settings.completion_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error("AI completion timed out", extra={"model_id": str(handle.model_id)})
            return self._unavailable_response()
        except Exception:
            logger.exception("AI completion failed", extra={"model_id": str(handle.model_id)})
            return self._unavailable_response()

        parsed = parse_assistant_content(content)
        if not parsed:
            logger.warning("AI completion yielded no usable content", extra={"model_id": str(handle.model_id)})
            return self._unavailable_response()
        return build_schedule_response(parsed, timezone_name)

    async def execute(self, owner_id: UUID, request: ExecuteScheduleRequest) -> ScheduleExecutionResult:
        return await self.executor.execute(owner_id, request)
