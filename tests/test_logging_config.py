from __future__ import annotations

import logging

from logging_config import ContextualFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.session_clock",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Boundary crossed",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_context() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    message = formatter.format(_record(session_id="roast-1", boundary_index=3, elapsed_seconds=180))

    assert message == "Boundary crossed | session_id=roast-1 boundary_index=3 elapsed_seconds=180"


def test_formatter_skips_missing_and_unknown_keys() -> None:
    formatter = ContextualFormatter(fmt="%(message)s", context_keys=["session_id"])

    assert formatter.format(_record(boundary_index=3, session_id=None)) == "Boundary crossed"
