from __future__ import annotations

import json
import logging

import httpx
import pytest

from iod_textindex.core.config import DEFAULT_BASE_URL, Settings, get_settings
from iod_textindex.core.logging import StructuredFormatter, configure_logging
from iod_textindex.infrastructure.clients.add_to_text_index_http import AddToTextIndexHttpClient


def test_settings_defaults(monkeypatch) -> None:
    for name in ("IOD_BASE_URL", "IOD_API_KEY", "IOD_TIMEOUT_SECONDS", "IOD_VERIFY_SSL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.BASE_URL == DEFAULT_BASE_URL
    assert settings.api_key is None
    assert settings.TIMEOUT_SECONDS == 30.0
    assert settings.VERIFY_SSL is True


def test_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("IOD_BASE_URL", "https://iod.internal/1")
    monkeypatch.setenv("IOD_API_KEY", "env-key")
    monkeypatch.setenv("IOD_TIMEOUT_SECONDS", "5")
    monkeypatch.setenv("IOD_VERIFY_SSL", "false")

    settings = Settings(_env_file=None)

    assert settings.BASE_URL == "https://iod.internal/1"
    assert settings.api_key == "env-key"
    assert "env-key" not in repr(settings)
    assert settings.TIMEOUT_SECONDS == 5.0
    assert settings.VERIFY_SSL is False


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()


def test_client_takes_ambient_key_from_settings(monkeypatch) -> None:
    monkeypatch.setenv("IOD_API_KEY", "env-key")
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:  # type: ignore[override]
        seen.append(request)
        return httpx.Response(200, json={"jobID": "job-1", "status": "queued", "actions": []})

    client = AddToTextIndexHttpClient(
        base_url="https://example.com",
        settings=Settings(_env_file=None),
        transport=httpx.MockTransport(handler),
    )
    client.get_job_status("job-1")

    assert seen[0].url.params["apiKey"] == "env-key"


def test_structured_formatter_includes_context() -> None:
    record = logging.LogRecord(
        name="iod_textindex.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="%s failed",
        args=("add_url",),
        exc_info=None,
    )
    record.operation = "add_url"
    record.http_status = 500

    data = json.loads(StructuredFormatter().format(record))

    assert data["level"] == "WARNING"
    assert data["message"] == "add_url failed"
    assert data["operation"] == "add_url"
    assert data["http_status"] == 500
    assert data["timestamp"].endswith("Z")
    assert "job_id" not in data


@pytest.mark.parametrize("json_format", [True, False])
def test_configure_logging_is_idempotent(json_format) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        configure_logging("DEBUG", json_format=json_format)
        configure_logging("DEBUG", json_format=json_format)

        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, StructuredFormatter) is json_format
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)


def test_client_logs_failures(settings, caplog) -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # type: ignore[override]
        return httpx.Response(500, json={"error": 5000, "reason": "boom"})

    client = AddToTextIndexHttpClient(settings=settings, transport=httpx.MockTransport(handler))

    with caplog.at_level(logging.WARNING, logger="iod_textindex"):
        with pytest.raises(Exception):
            client.add_url_to_text_index("secret-key", "https://example.com/a", "mydocs")

    record = next(r for r in caplog.records if r.name.startswith("iod_textindex"))
    assert record.operation == "add_url"
    assert record.index == "mydocs"
    assert record.error_code == "HTTP_500"
    assert "secret-key" not in caplog.text


def test_configure_logging_reads_settings() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        configure_logging(settings=Settings(_env_file=None, LOG_LEVEL="warning", LOG_JSON=True))

        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
