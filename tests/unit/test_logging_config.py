from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from qrdine.api.middleware.request_id import request_id_context, resolve_request_id
from qrdine.infrastructure.observability.logging_config import JsonFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="qrdine.application.use_cases.claim_table",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="table_claimed",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_line_carries_service_request_id_and_whitelisted_extras() -> None:
    token = request_id_context.set("req-7")
    try:
        line = JsonFormatter("qrdine-test").format(
            _record(restaurant_id="bistro", table="T1", password="hunter2")
        )
    finally:
        request_id_context.reset(token)

    payload = json.loads(line)
    assert payload["message"] == "table_claimed"
    assert payload["service"] == "qrdine-test"
    assert payload["request_id"] == "req-7"
    assert payload["restaurant_id"] == "bistro"
    assert payload["table"] == "T1"
    assert "password" not in payload
    assert payload["trace_id"] is None


def test_request_id_keeps_plain_tokens_and_replaces_the_rest() -> None:
    assert resolve_request_id("req-123") == "req-123"
    assert resolve_request_id("  abc.def:9  ") == "abc.def:9"

    for unsafe in (None, "", "x" * 129, "evil\nline", "has space"):
        replaced = resolve_request_id(unsafe)
        assert len(replaced) == 32
        assert replaced != unsafe
