"""
Tests for Logging Configuration (qbit_remote/logging_config.py)
"""

import asyncio
import json
import logging
import sys

import pytest

from qbit_remote.logging_config import (
    COMPONENT_LOG_LEVELS,
    ColoredFormatter,
    ContextFilter,
    JSONFormatter,
    LogContext,
    redact_token,
    setup_logging,
)


def _record(msg="Test message", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="qbit_remote.client",
        level=level,
        pathname="client.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestContextFilter:
    """Tests for ContextFilter."""

    def setup_method(self):
        ContextFilter.clear_context()

    def teardown_method(self):
        ContextFilter.clear_context()

    def test_set_context(self):
        ContextFilter.set_context(torrent_hash="ABC123", operation="remove")
        context = ContextFilter.get_context()
        assert context["torrent_hash"] == "ABC123"
        assert context["operation"] == "remove"

    def test_clear_specific_context(self):
        ContextFilter.set_context(torrent_hash="ABC123", operation="remove")
        ContextFilter.clear_context("torrent_hash")

        context = ContextFilter.get_context()
        assert "torrent_hash" not in context
        assert context["operation"] == "remove"

    def test_filter_adds_context_to_record(self):
        ContextFilter.set_context(torrent_hash="ABC123")
        record = _record()

        assert ContextFilter().filter(record) is True
        assert record.torrent_hash == "ABC123"


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_format_basic(self):
        data = json.loads(JSONFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "qbit_remote.client"
        assert data["message"] == "Test message"
        assert data["timestamp"].endswith("Z")

    def test_context_fields_included(self):
        record = _record(endpoint="torrents/info", status=403, torrent_hash=None)
        data = json.loads(JSONFormatter().format(record))

        assert data["endpoint"] == "torrents/info"
        assert data["status"] == 403
        assert "torrent_hash" not in data

    def test_exception_info(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))
        assert data["exception_type"] == "ValueError"
        assert "boom" in data["exception"]


class TestColoredFormatter:
    """Tests for ColoredFormatter."""

    def test_no_colors(self):
        output = ColoredFormatter(use_colors=False).format(_record())
        assert "\033[" not in output
        assert "INFO" in output

    def test_context_suffix(self):
        record = _record(operation="list", torrent_hash="abc")
        output = ColoredFormatter(use_colors=False).format(record)
        assert output.endswith("[operation=list, torrent_hash=abc]")


class TestLogContext:
    """Tests for LogContext."""

    def teardown_method(self):
        ContextFilter.clear_context()

    def test_sets_and_restores(self):
        ContextFilter.set_context(operation="outer")
        with LogContext(operation="inner", torrent_hash="abc"):
            assert ContextFilter.get_context()["operation"] == "inner"
        assert ContextFilter.get_context() == {"operation": "outer"}

    def test_restores_after_exception(self):
        with pytest.raises(RuntimeError):
            with LogContext(endpoint="torrents/info"):
                raise RuntimeError("boom")
        assert ContextFilter.get_context() == {}

    def test_explicit_extra_wins_over_context(self):
        record = _record(status=403)
        with LogContext(status=200, endpoint="auth/login"):
            ContextFilter().filter(record)
        assert record.status == 403
        assert record.endpoint == "auth/login"

    @pytest.mark.asyncio
    async def test_tasks_do_not_share_context(self):
        seen = {}

        async def work(torrent_hash):
            with LogContext(torrent_hash=torrent_hash):
                await asyncio.sleep(0)
                seen[torrent_hash] = ContextFilter.get_context()["torrent_hash"]

        await asyncio.gather(work("aaa"), work("bbb"))
        assert seen == {"aaa": "aaa", "bbb": "bbb"}


class TestSetupLogging:
    """Tests for setup_logging."""

    def teardown_method(self):
        root = logging.getLogger()
        for handler in root.handlers[:]:
            handler.close()
            root.removeHandler(handler)
        for name in ("qbit_remote", "aiohttp", "aiohttp.client"):
            logging.getLogger(name).setLevel(logging.NOTSET)

    def test_text_format(self):
        root = setup_logging("INFO", use_colors=False)
        assert root.level == logging.INFO
        assert isinstance(root.handlers[0].formatter, ColoredFormatter)

    def test_json_format(self):
        root = setup_logging("WARNING", log_format="json")
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "qbit.log"
        root = setup_logging("INFO", log_file=str(log_file))
        assert len(root.handlers) == 2
        assert log_file.parent.exists()
        assert not isinstance(root.handlers[1].formatter, ColoredFormatter)

    def test_component_levels(self):
        setup_logging("DEBUG")
        assert logging.getLogger("aiohttp").level == logging.WARNING
        assert COMPONENT_LOG_LEVELS["aiohttp"] == "WARNING"

    def test_quieter_level_applies_to_components(self):
        setup_logging("ERROR")
        assert logging.getLogger("aiohttp").level == logging.ERROR

    def test_debug_lowers_package_level(self):
        setup_logging("DEBUG")
        assert logging.getLogger("qbit_remote").level == logging.DEBUG

    def test_error_level_hides_package_info(self, capsys):
        root = setup_logging("ERROR", use_colors=False)
        assert all(handler.level == logging.ERROR for handler in root.handlers)

        logger = logging.getLogger("qbit_remote.client")
        logger.info("authenticated as admin")
        logger.error("request failed")

        err = capsys.readouterr().err
        assert "authenticated as admin" not in err
        assert "request failed" in err

    def test_invalid_level(self):
        with pytest.raises(AttributeError):
            setup_logging("INVALID_LEVEL")


class TestRedactToken:
    """Tests for redact_token."""

    def test_redacts_value(self):
        assert redact_token("SID=abc123") == "SID=***"

    def test_missing(self):
        assert redact_token(None) == "<none>"
