import json
import logging
import sys

from rompatch.logging_config import (
    FastFormatter,
    JsonFormatter,
    _parse_size_string,
    cleanup_logging,
    get_logger,
    setup_logging,
)


def test_json_formatter_outputs_expected_fields():
    record = logging.LogRecord(
        name="rompatch.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=123,
        msg="hello %s",
        args=("world",),
        exc_info=None,
    )

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "rompatch.test"
    assert payload["message"] == "hello world"
    assert payload["pathname"] == __file__
    assert payload["lineno"] == 123
    assert "timestamp" in payload


def test_json_formatter_includes_exc_info():
    formatter = JsonFormatter()
    try:
        raise ValueError("boom")
    except Exception:
        record = logging.LogRecord(
            name="rompatch.test",
            level=logging.ERROR,
            pathname=__file__,
            lineno=55,
            msg="failed",
            args=(),
            exc_info=sys.exc_info(),
        )

    payload = json.loads(formatter.format(record))
    assert "ValueError" in payload["exc_info"]


def test_fast_formatter_uses_level_format():
    record = logging.LogRecord("rompatch.x", logging.WARNING, __file__, 1, "careful", (), None)
    assert "WARNING [rompatch.x] careful" in FastFormatter().format(record)


def test_setup_logging_with_file(tmp_path, reset_logging):
    result = setup_logging("DEBUG", log_dir=str(tmp_path / "logs"), enable_file_logging=True,
                           enable_console_logging=False, structured_json=True)

    assert set(result["handlers"]) == {"file"}
    get_logger("unit").info("written")
    result["handlers"]["file"].flush()

    lines = (tmp_path / "logs" / "rompatch.log").read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[-1])["message"] == "written"


def test_setup_logging_replaces_handlers(reset_logging):
    setup_logging("INFO")
    setup_logging("INFO")
    assert len(logging.getLogger("rompatch").handlers) == 1

    cleanup_logging()
    assert logging.getLogger("rompatch").handlers == []


def test_get_logger_namespace():
    assert get_logger("cli").name == "rompatch.cli"


def test_parse_size_string():
    assert _parse_size_string("10MB") == 10 * 1024 * 1024
    assert _parse_size_string("512KB") == 512 * 1024
    assert _parse_size_string("100") == 100
    assert _parse_size_string("lots") == 10 * 1024 * 1024
