from __future__ import annotations

import json
import logging
import sys

from learnhub.core.logging import _ContainerFormatter, _JsonFormatter, setup_logging


def _record(
    level: int = logging.INFO, msg: str = "hello", **extra
) -> logging.LogRecord:
    record = logging.LogRecord(
        name="learnhub.test",
        level=level,
        pathname="svc.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_setup_logging_sets_root_level() -> None:
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging("warning")
    assert logging.getLogger().level == logging.WARNING


def test_setup_logging_defaults_to_info_for_unknown_level() -> None:
    setup_logging("nonexistent")
    assert logging.getLogger().level == logging.INFO


def test_setup_logging_quiets_noisy_libraries() -> None:
    setup_logging("debug")
    assert logging.getLogger("uvicorn").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    setup_logging("error")
    assert logging.getLogger("httpx").level == logging.ERROR


def test_setup_logging_json_mode_installs_json_formatter() -> None:
    setup_logging("info", json_format=True)
    (handler,) = logging.getLogger().handlers
    assert isinstance(handler.formatter, _JsonFormatter)

    setup_logging("info")
    (handler,) = logging.getLogger().handlers
    assert isinstance(handler.formatter, _ContainerFormatter)


def test_container_formatter_location_only_for_warning_and_above() -> None:
    fmt = _ContainerFormatter()
    assert "[svc.py:42]" not in fmt.format(_record(logging.INFO))
    assert "[svc.py:42]" in fmt.format(_record(logging.WARNING))


def test_json_formatter_includes_workflow_context() -> None:
    output = _JsonFormatter().format(
        _record(
            msg="Enrolled",
            user_id="u1",
            course_id="c1",
            enrollment_id="e1",
            operation="enroll",
        )
    )
    parsed = json.loads(output)
    assert parsed["message"] == "Enrolled"
    assert parsed["level"] == "INFO"
    assert parsed["user_id"] == "u1"
    assert parsed["course_id"] == "c1"
    assert parsed["enrollment_id"] == "e1"
    assert parsed["operation"] == "enroll"


def test_json_formatter_skips_empty_context() -> None:
    parsed = json.loads(_JsonFormatter().format(_record(request_id="-", user_id=None)))
    assert "request_id" not in parsed
    assert "user_id" not in parsed


def test_json_formatter_includes_exception_info() -> None:
    formatter = _JsonFormatter()
    try:
        raise ValueError("store unavailable")
    except ValueError:
        record = _record(logging.ERROR, "failed")
        record.exc_info = sys.exc_info()
        output = formatter.format(record)

    parsed = json.loads(output)
    assert "ValueError: store unavailable" in parsed["exception"]
