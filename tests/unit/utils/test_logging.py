"""Tests for logging configuration."""

import io
import logging

import pytest
from rich.console import Console

from picmark.utils.logging import (
    ConsoleLogHandler,
    SafeStreamHandler,
    _add_separator,
    _filter_event_dict,
    _inject_task_context,
    configure_task_logging,
    create_task_log_path,
    get_logger,
    setup_logging,
    setup_task_logging,
    task_context,
)


def _buffer_console(buffer: io.StringIO) -> Console:
    return Console(file=buffer, force_terminal=False, width=400)


@pytest.fixture
def captured_log():
    """Route console logging into a buffer for the duration of a test."""
    buffer = io.StringIO()
    setup_logging(level="DEBUG", console=_buffer_console(buffer))
    yield buffer
    logging.getLogger().handlers.clear()


class TestTaskContext:
    def test_nested(self):
        with task_context("outer"):
            with task_context("inner"):
                assert _inject_task_context(None, "info", {})["task_id"] == "inner"
            assert _inject_task_context(None, "info", {})["task_id"] == "outer"
        assert "task_id" not in _inject_task_context(None, "info", {})

    def test_injected_into_log_lines(self, captured_log):
        log = get_logger("picmark.test")

        with task_context("a1b2c3d4", file_path="/docs/note.md"):
            log.info("Uploading images")

        output = captured_log.getvalue()
        assert "Uploading images" in output
        assert "a1b2c3d4" in output
        assert "/docs/note.md" in output


class TestSetupLogging:
    def test_long_values_truncated(self, captured_log):
        get_logger("picmark.test").info("Big value", payload="x" * 2000)
        assert "2000 chars total" in captured_log.getvalue()

    def test_noisy_loggers_capped(self, captured_log):  # noqa: ARG002
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_reconfigure_closes_previous_handlers(self, tmp_path):
        log_path = tmp_path / "run.log"
        setup_logging(level="DEBUG", log_file=str(log_path))
        [file_handler] = [
            h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)
        ]

        setup_logging(level="DEBUG")

        assert file_handler.stream is None
        logging.getLogger().handlers.clear()


class TestTaskLogging:
    def test_create_task_log_path(self, tmp_path):
        run_id, path = create_task_log_path(tmp_path / "logs", "upload")

        assert len(run_id) == 8
        assert path.parent == tmp_path / "logs"
        assert path.parent.is_dir()
        assert path.name.startswith("upload_")
        assert path.name.endswith(f"_{run_id}.log")

    def test_file_captures_debug(self, tmp_path):
        buffer = io.StringIO()
        try:
            _, log_path = setup_task_logging(
                tmp_path, prefix="upload", console=_buffer_console(buffer)
            )
            get_logger("picmark.test").debug("Detail for the file only")
            for handler in logging.getLogger().handlers:
                handler.flush()
        finally:
            for handler in logging.getLogger().handlers:
                handler.close()
            logging.getLogger().handlers.clear()

        assert "Detail for the file only" in log_path.read_text(encoding="utf-8")
        assert "Detail for the file only" not in buffer.getvalue()


class TestInjectTaskContext:
    """Tests for _inject_task_context processor."""

    def test_injects_task_id_and_file(self):
        with task_context("t1", file_path="/docs/note.md"):
            result = _inject_task_context(None, "info", {"event": "test"})

        assert result["task_id"] == "t1"
        assert result["file"] == "/docs/note.md"

    def test_does_not_overwrite_existing_keys(self):
        with task_context("context_id"):
            result = _inject_task_context(None, "info", {"event": "test", "task_id": "explicit"})

        assert result["task_id"] == "explicit"

    def test_outside_context(self):
        result = _inject_task_context(None, "info", {"event": "test"})

        assert "task_id" not in result
        assert "file" not in result


class TestSafeStreamHandler:
    """Tests for SafeStreamHandler class."""

    def test_emit_unicode_message(self):
        stream = io.StringIO()
        handler = SafeStreamHandler(stream)
        handler.setFormatter(logging.Formatter("%(message)s"))
        record = logging.LogRecord(
            name="test",
            level=logging.INFO,
            pathname="",
            lineno=0,
            msg="上传 图片.png",
            args=(),
            exc_info=None,
        )

        handler.emit(record)

        assert "上传 图片.png" in stream.getvalue()


class TestProcessors:
    """Tests for the value filter and separator processors."""

    def test_binary_data_summarized(self):
        result = _filter_event_dict(None, "info", {"event": "test", "data": b"x" * 1000})
        assert result["data"] == "[BINARY DATA: 1000 bytes]"

    def test_short_values_untouched(self):
        result = _filter_event_dict(None, "info", {"event": "test", "data": "short"})
        assert result["data"] == "short"

    def test_separator_added_with_context(self):
        result = _add_separator(None, "info", {"event": "Uploading", "path": "/a.png"})
        assert result["event"] == "Uploading |"

    def test_no_separator_without_context(self):
        result = _add_separator(None, "info", {"event": "Uploading", "level": "info"})
        assert result["event"] == "Uploading"


class TestConsoleLogHandler:
    """Tests for printing log lines through a Rich console."""

    def test_emit_prints_through_console(self):
        buffer = io.StringIO()
        handler = ConsoleLogHandler(_buffer_console(buffer))
        handler.setFormatter(logging.Formatter("%(message)s"))
        record = logging.LogRecord(
            name="test",
            level=logging.INFO,
            pathname="",
            lineno=0,
            msg="\x1b[1mUploaded\x1b[0m a.png",
            args=(),
            exc_info=None,
        )

        handler.emit(record)

        assert buffer.getvalue() == "Uploaded a.png\n"

    def test_verbose_task_logging_uses_given_console(self, tmp_path):
        """A live Progress console receives the DEBUG lines in verbose mode."""
        buffer = io.StringIO()
        try:
            configure_task_logging(
                tmp_path / "run.log", verbose=True, console=_buffer_console(buffer)
            )
            get_logger("picmark.test").debug("Uploading a.png")
        finally:
            for handler in logging.getLogger().handlers:
                handler.close()
            logging.getLogger().handlers.clear()

        assert "Uploading a.png" in buffer.getvalue()
        assert "Uploading a.png" in (tmp_path / "run.log").read_text(encoding="utf-8")
