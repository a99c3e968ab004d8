from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

CODE_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


def _loads_object(text: str) -> dict[str, Any] | None:
    try:
        value = json.loads(text)
    except (ValueError, RecursionError):
        return None
    return value if isinstance(value, dict) else None


def parse_assistant_content(raw: str | None) -> dict[str, Any]:
    """Extract the JSON object from a model completion.

    Tries the fence-stripped text as a whole, then the span between the first
    ``{`` and the last ``}``. Returns an empty dict when neither parses.
    """
    if not isinstance(raw, str) or not raw.strip():
        return {}

    cleaned = CODE_FENCE_RE.sub("", raw).strip()
    parsed = _loads_object(cleaned)
    if parsed is not None:
        return parsed

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        parsed = _loads_object(cleaned[start : end + 1])
        if parsed is not None:
            return parsed
        logger.warning("Embedded JSON in completion could not be parsed", extra={"preview": raw[:200]})

    logger.warning("Completion is not valid JSON", extra={"preview": raw[:200]})
    return {}
