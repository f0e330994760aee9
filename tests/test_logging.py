import json
import logging

import pytest
from pythonjsonlogger import jsonlogger

from common.logging import REQUEST_ID, configure_logging


@pytest.fixture
def clean_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logging_emits_json_with_request_id(clean_root, capsys):
    configure_logging("INFO")
    configure_logging("INFO")
    json_handlers = [h for h in clean_root.handlers if isinstance(h.formatter, jsonlogger.JsonFormatter)]
    assert len(json_handlers) == 1

    token = REQUEST_ID.set("req-1")
    try:
        logging.getLogger("appender.test").info("Appended string", extra={"result": "x I am Java instance p"})
    finally:
        REQUEST_ID.reset(token)

    line = capsys.readouterr().out.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["message"] == "Appended string"
    assert record["request_id"] == "req-1"
    assert record["result"] == "x I am Java instance p"
    assert record["levelname"] == "INFO"


def test_configure_logging_sets_level(clean_root):
    configure_logging("warning")
    assert clean_root.level == logging.WARNING
