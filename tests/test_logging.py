# tests/test_logging.py
import json
import logging

from democracy_lens.logging_setup import JsonFormatter, KeyValueFormatter, RequestIdFilter, request_id_var


def _record(msg="INGEST_DONE", **extra):
    rec = logging.LogRecord("democracy_lens.ingest", logging.INFO, __file__, 1, msg, None, None)
    for k, v in extra.items():
        setattr(rec, k, v)
    RequestIdFilter().filter(rec)
    return rec

def test_key_value_formatter_appends_extras():
    fmt = KeyValueFormatter("%(levelname)s | req=%(request_id)s | %(message)s")
    line = fmt.format(_record(run_id="ab12", count=3))
    assert line == "INFO | req=- | INGEST_DONE | count=3 run_id='ab12'"

def test_key_value_formatter_without_extras():
    fmt = KeyValueFormatter("%(message)s")
    assert fmt.format(_record("PLAIN")) == "PLAIN"

def test_json_formatter_carries_request_id():
    token = request_id_var.set("req-9")
    try:
        rec = _record(article_id=4)
    finally:
        request_id_var.reset(token)
    payload = json.loads(JsonFormatter().format(rec))
    assert payload["event"] == "INGEST_DONE"
    assert payload["request_id"] == "req-9"
    assert payload["article_id"] == 4
