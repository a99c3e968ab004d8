from __future__ import annotations

import abc
import json
import logging
from dataclasses import dataclass, field
from uuid import UUID

import httpx

from schedule_assistant.core.enums import AIProviderKind
from schedule_assistant.core.exceptions import ConfigurationError, UpstreamModelError
from schedule_assistant.services.ai.model_resolver import ModelResolver

logger = logging.getLogger(__name__)

DEFAULT_BASE_URLS = {
    AIProviderKind.OPENAI: "https://api.openai.com/v1",
    AIProviderKind.DEEPSEEK: "https://api.deepseek.com/v1",
}


@dataclass(slots=True)
class ModelHandle:
    model_id: UUID
    provider: AIProviderKind
    model: str
    base_url: str | None = None
    api_key: str = field(default="", repr=False)


class CompletionProvider(abc.ABC):
    @abc.abstractmethod
    async def complete(self, model: str, system_prompt: str, message: str, temperature: float) -> str:
        raise NotImplementedError


class OpenAICompatibleProvider(CompletionProvider):
    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout_ms: int = 20000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout_ms / 1000
        self.transport = transport

    async def complete(self, model: str, system_prompt: str, message: str, temperature: float) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        body = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": message},
            ],
            "temperature": temperature,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(f"{self.base_url}/chat/completions", headers=headers, json=body)
        except httpx.TimeoutException as exc:
            raise UpstreamModelError(f"timeout:{exc}") from exc
        except httpx.HTTPError as exc:
            raise UpstreamModelError(f"provider_error:network:{exc}") from exc

        if response.status_code == 429:
            raise UpstreamModelError(f"rate_limit:http_429:{response.text[:240]}")
        if response.status_code >= 400:
            raise UpstreamModelError(f"provider_error:http_{response.status_code}:{response.text[:240]}")

        try:
            payload = response.json()
            content = payload["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise UpstreamModelError("provider_error:invalid_completion") from exc
        return str(content or "")


class MockProvider(CompletionProvider):
    async def complete(self, model: str, system_prompt: str, message: str, temperature: float) -> str:
        return json.dumps(
            {
                "reply": f"Mock AI response: {message[:200]}",
                "intent": "query",
                "confidence": 0.0,
                "missing_fields": [],
                "proposal": {},
            },
            ensure_ascii=False,
        )


class ModelGateway:
    """Resolves a usable model and runs single chat completions against it."""

    def __init__(self, resolver: ModelResolver, timeout_ms: int = 20000) -> None:
        self.resolver = resolver
        self.timeout_ms = timeout_ms

    async def resolve_model(self, model_id: UUID | None = None) -> ModelHandle:
        model = await self.resolver.resolve(model_id)
        provider = model.provider
        if provider is None:
            logger.error("AI model has no provider", extra={"model_id": str(model.id)})
            raise ConfigurationError(f"AI model {model.id} has no provider")

        api_key = (provider.api_key or "").strip()
        if provider.kind != AIProviderKind.MOCK and not api_key:
            logger.error(
                "AI provider has no bound credential",
                extra={"model_id": str(model.id), "provider_id": str(provider.id)},
            )
            raise ConfigurationError(f"AI provider {provider.id} has no bound credential")

        return ModelHandle(
            model_id=model.id,
            provider=provider.kind,
            model=model.model,
            base_url=provider.base_url,
            api_key=api_key,
        )

    def build_provider(self, handle: ModelHandle) -> CompletionProvider:
        if handle.provider == AIProviderKind.MOCK:
            return MockProvider()
        base_url = handle.base_url or DEFAULT_BASE_URLS.get(handle.provider)
        if not base_url:
            raise ConfigurationError(f"No endpoint known for provider {handle.provider}")
        return OpenAICompatibleProvider(handle.api_key, base_url, timeout_ms=self.timeout_ms)

    async def complete(self, handle: ModelHandle, system_prompt: str, user_message: str, temperature: float) -> str:
        provider = self.build_provider(handle)
        return await provider.complete(handle.model, system_prompt, user_message, temperature)
