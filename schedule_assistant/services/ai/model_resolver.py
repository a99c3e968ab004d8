from __future__ import annotations

import logging
from typing import Awaitable, Callable
from uuid import UUID

from schedule_assistant.core.exceptions import ConfigurationError, NotFoundError
from schedule_assistant.models import AIModel
from schedule_assistant.repositories.ai_model import AIModelRepository

logger = logging.getLogger(__name__)

ModelLookup = Callable[[], Awaitable[AIModel | None]]


class ModelResolver:
    """Picks the model for a completion.

    An explicit id must name an enabled model. Without one the lookups of
    ``fallback_chain`` are tried in order and the first hit wins.
    """

    def __init__(self, models: AIModelRepository, default_model_id: str | None = None) -> None:
        self.models = models
        self.default_model_id = default_model_id

    async def resolve(self, model_id: UUID | None = None) -> AIModel:
        if model_id is not None:
            model = await self.models.get_enabled(model_id)
            if model is None:
                raise NotFoundError("AI model not found", details={"model_id": str(model_id)})
            return model

        for lookup in self.fallback_chain():
            model = await lookup()
            if model is not None:
                return model

        logger.error("No usable AI model is configured")
        raise ConfigurationError("No usable AI model is configured")

    def fallback_chain(self) -> list[ModelLookup]:
        return [self.configured_default, self.top_active, self.any_configured]

    async def configured_default(self) -> AIModel | None:
        raw = (self.default_model_id or "").strip()
        if not raw:
            return None
        try:
            model_id = UUID(raw)
        except ValueError:
            logger.warning("Configured default AI model id is not a UUID", extra={"model_id": raw})
            return None
        return await self.models.get_by_id(model_id)

    async def top_active(self) -> AIModel | None:
        return await self.models.get_top_active()

    async def any_configured(self) -> AIModel | None:
        return await self.models.get_any()
