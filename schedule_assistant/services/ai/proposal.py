from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from schedule_assistant.core.enums import ScheduleIntent
from schedule_assistant.schemas.ai_schedule import AIScheduleProposal, AIScheduleResponse
from schedule_assistant.schemas.schedule import SchedulePayload
from schedule_assistant.services.schedule_fields import guard_category, guard_priority

PENDING_SUMMARY = "Pending confirmation"
DEFAULT_REPLY = "I have noted this request. Please confirm the details."

_TEXT_FIELDS = ("title", "description", "start_time", "end_time", "location", "attendees", "timezone")
_FLAG_FIELDS = ("is_important", "is_urgent", "completed")


def _optional_text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class AssistantContent(BaseModel):
    """Model output after JSON decoding. Every field is optional and wrong types degrade to empty."""

    model_config = ConfigDict(extra="ignore")

    reply: str | None = None
    intent: ScheduleIntent | None = None
    confidence: float | None = None
    follow_up_question: str | None = None
    missing_fields: list[str] = []
    target_event_id: str | None = None
    proposal: dict[str, Any] = {}

    @field_validator("reply", "follow_up_question", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str | None:
        return _optional_text(value)

    @field_validator("target_event_id", mode="before")
    @classmethod
    def _event_id(cls, value: Any) -> str | None:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return _optional_text(value)

    @field_validator("intent", mode="before")
    @classmethod
    def _intent(cls, value: Any) -> ScheduleIntent | None:
        if not isinstance(value, str):
            return None
        try:
            return ScheduleIntent(value.strip().lower())
        except ValueError:
            return None

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, value: Any) -> float | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, str):
            try:
                value = float(value.strip())
            except ValueError:
                return None
        if not isinstance(value, (int, float)) or math.isnan(value):
            return None
        return min(1.0, max(0.0, float(value)))

    @field_validator("missing_fields", mode="before")
    @classmethod
    def _missing_fields(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            return []
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]

    @field_validator("proposal", mode="before")
    @classmethod
    def _proposal(cls, value: Any) -> dict[str, Any]:
        return value if isinstance(value, dict) else {}


def coerce_payload(raw: dict[str, Any]) -> dict[str, Any]:
    """Keep only recognised proposal fields that carry the right type.

    Keys are accepted in camelCase (as the prompt asks) or snake_case.
    """
    cleaned: dict[str, Any] = {}
    for name in SchedulePayload.model_fields:
        value = raw.get(to_camel(name), raw.get(name))
        if value is None:
            continue
        if name in _TEXT_FIELDS:
            text = _optional_text(value)
            if text is not None:
                cleaned[name] = text
        elif name in _FLAG_FIELDS:
            if isinstance(value, bool):
                cleaned[name] = value
        elif name == "category":
            category = guard_category(value)
            if category is not None:
                cleaned[name] = category.value
        elif name == "priority":
            priority = guard_priority(value)
            if priority is not None:
                cleaned[name] = priority.value
        elif name == "metadata":
            if isinstance(value, dict):
                cleaned[name] = value
    return cleaned


def _validate_payload(cleaned: dict[str, Any]) -> SchedulePayload:
    # Drop whatever still fails (e.g. over-long text) instead of losing the whole proposal.
    for _ in range(len(cleaned) + 1):
        try:
            return SchedulePayload.model_validate(cleaned)
        except ValidationError as exc:
            rejected = {str(error["loc"][0]) for error in exc.errors() if error.get("loc")}
            kept = {
                key: value for key, value in cleaned.items() if key not in rejected and to_camel(key) not in rejected
            }
            if len(kept) == len(cleaned):
                break
            cleaned = kept
    return SchedulePayload()


def build_schedule_response(payload: dict[str, Any], timezone_name: str) -> AIScheduleResponse:
    raw = payload if isinstance(payload, dict) else {}
    content = AssistantContent.model_validate(raw)
    requires_clarification = bool(content.missing_fields) or content.follow_up_question is not None

    proposal: AIScheduleProposal | None = None
    if content.intent is not None:
        data = coerce_payload(content.proposal)
        data.setdefault("timezone", timezone_name)
        proposal_data = _validate_payload(data)
        if proposal_data.timezone is None:
            proposal_data = proposal_data.model_copy(update={"timezone": timezone_name})
        proposal = AIScheduleProposal(
            intent=content.intent,
            summary=proposal_data.title or content.reply or PENDING_SUMMARY,
            data=proposal_data,
            confidence=content.confidence,
            original_event_id=content.target_event_id,
            missing_fields=content.missing_fields,
            requires_clarification=requires_clarification,
            follow_up_question=content.follow_up_question,
        )

    return AIScheduleResponse(
        reply=content.reply or DEFAULT_REPLY,
        requires_clarification=requires_clarification,
        follow_up_question=content.follow_up_question,
        proposal=proposal,
        raw=raw,
    )
