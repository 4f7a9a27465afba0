"""Tests for structured logging and request_id propagation"""

import json
import logging

import pytest
import structlog

from ytaudio.core.logging import (
    MAX_LOG_VALUE_LENGTH,
    add_request_id,
    clear_request_id,
    configure_logging,
    get_request_id,
    set_request_id,
    truncate_long_values,
)


@pytest.fixture(autouse=True)
def reset_request_id():
    clear_request_id()
    yield
    clear_request_id()
    structlog.reset_defaults()


class TestRequestId:
    """Context variable handling"""

    def test_set_explicit_request_id(self) -> None:
        assert set_request_id("req_custom") == "req_custom"
        assert get_request_id() == "req_custom"

    def test_generated_request_id(self) -> None:
        request_id = set_request_id()
        assert request_id.startswith("req_")
        assert len(request_id) == len("req_") + 12
        assert get_request_id() == request_id

    def test_clear_request_id(self) -> None:
        set_request_id("req_x")
        clear_request_id()
        assert get_request_id() is None

    def test_processor_adds_request_id(self) -> None:
        set_request_id("req_abc")
        assert add_request_id(None, "info", {"event": "x"}) == {
            "event": "x",
            "request_id": "req_abc",
        }

    def test_processor_without_request_id(self) -> None:
        assert add_request_id(None, "info", {"event": "x"}) == {"event": "x"}


class TestConfigureLogging:
    """Renderer setup"""

    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging("INFO", "json")
        set_request_id("req_json")

        structlog.get_logger("ytaudio.test").info("download_started", audio_format="mp3")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "download_started"
        assert record["audio_format"] == "mp3"
        assert record["request_id"] == "req_json"
        assert record["level"] == "info"
        assert record["logger"] == "ytaudio.test"
        assert "timestamp" in record

    def test_level_filtering(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging("WARNING", "json")

        structlog.get_logger("ytaudio.test").info("hidden")
        structlog.get_logger("ytaudio.test").warning("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out
        assert logging.getLogger().level == logging.WARNING

    def test_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging("DEBUG", "console")

        structlog.get_logger("ytaudio.test").debug("ytdlp_output", line="[download] 50%")

        assert "ytdlp_output" in capsys.readouterr().out


class TestRequestIdSanitizing:
    """Client supplied ids"""

    @pytest.mark.parametrize("request_id", ["abc-123", "trace.id_42", "x" * 64])
    def test_safe_ids_are_kept(self, request_id: str) -> None:
        assert set_request_id(request_id) == request_id

    @pytest.mark.parametrize(
        "request_id", ["bad id", "line\nbreak", "x" * 65, "<script>", "é"]
    )
    def test_unsafe_ids_are_replaced(self, request_id: str) -> None:
        assert set_request_id(request_id).startswith("req_")


class TestTruncateLongValues:
    """Long string capping"""

    def test_long_values_are_truncated(self) -> None:
        event = truncate_long_values(None, "warning", {"stderr": "e" * (MAX_LOG_VALUE_LENGTH + 10)})
        assert event["stderr"] == "e" * MAX_LOG_VALUE_LENGTH + "... [10 chars truncated]"

    def test_short_and_non_string_values_untouched(self) -> None:
        event = {"event": "x", "returncode": 1, "line": "[download] 10%"}
        assert truncate_long_values(None, "info", dict(event)) == event

    def test_exception_is_never_truncated(self) -> None:
        traceback = "Traceback\n" * 1000
        assert truncate_long_values(None, "error", {"exception": traceback})["exception"] == traceback
