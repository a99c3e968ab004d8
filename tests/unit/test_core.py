import json
import logging

import pytest
import structlog

from schedule_assistant.core.config import Settings
from schedule_assistant.core.exceptions import ConfigurationError, NotFoundError, UpstreamModelError, ValidationAppError
from schedule_assistant.core.logging import configure_logging


def test_error_defaults_and_exposure():
    assert NotFoundError().message == "Resource not found"
    assert NotFoundError().status_code == 404

    invalid = ValidationAppError("Invalid start time", details={"startTime": "soon"})
    assert invalid.public_message == "Invalid start time"
    assert invalid.public_details == {"startTime": "soon"}

    hidden = ConfigurationError("AI provider 1 has no bound credential", details={"provider_id": "1"})
    assert hidden.status_code == 500
    assert hidden.public_message == "Internal server error"
    assert hidden.public_details == {}
    assert str(hidden) == "AI provider 1 has no bound credential"

    assert UpstreamModelError("rate_limit:http_429").public_message == "AI model is unavailable"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("http://a.test/, http://b.test", ["http://a.test", "http://b.test"]),
        ('["http://a.test"]', ["http://a.test"]),
        ("", []),
        (["http://c.test/"], ["http://c.test"]),
    ],
)
def test_frontend_origins_parsing(raw, expected):
    assert Settings(_env_file=None, frontend_origins=raw).frontend_origins == expected


def test_frontend_origins_from_environment(monkeypatch):
    monkeypatch.setenv("FRONTEND_ORIGINS", "http://x.test,http://y.test")

    assert Settings(_env_file=None).frontend_origins == ["http://x.test", "http://y.test"]


def test_completion_timeout_seconds():
    assert Settings(_env_file=None, ai_completion_timeout_ms=1500).completion_timeout_seconds == 1.5


def test_configure_logging_renders_json_with_extras():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging("debug")
        record = logging.LogRecord(
            "schedule_assistant.services.schedule_fields",
            logging.WARNING,
            __file__,
            1,
            "End time is not after start time, range repaired",
            None,
            None,
        )
        record.start_time = "2024-01-01T10:00:00+00:00"

        payload = json.loads(root.handlers[0].format(record))

        assert root.level == logging.DEBUG
        assert payload["event"] == "End time is not after start time, range repaired"
        assert payload["level"] == "warning"
        assert payload["logger"] == "schedule_assistant.services.schedule_fields"
        assert payload["start_time"] == "2024-01-01T10:00:00+00:00"
        assert "timestamp" in payload
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)
        structlog.reset_defaults()


@pytest.mark.asyncio
async def test_request_id_is_echoed(app_client):
    response = await app_client.get("/healthz", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert response.json()["meta"]["request_id"] == "req-123"


@pytest.mark.asyncio
async def test_request_id_is_generated(app_client):
    response = await app_client.get("/healthz")

    assert len(response.headers["X-Request-ID"]) == 32
    assert response.json()["meta"]["request_id"] == response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(app_client):
    response = await app_client.get("/api/v1/nowhere")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "http_error"
