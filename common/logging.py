import logging
import sys
from pythonjsonlogger import jsonlogger
from contextvars import ContextVar


# ContextVar to hold the current request id for the executing context
REQUEST_ID: ContextVar[str | None] = ContextVar("request_id", default=None)

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s'


class RequestIdFilter(logging.Filter):
    def filter(self, record):
        record.request_id = REQUEST_ID.get()
        return True


def _is_json_handler(handler: logging.Handler) -> bool:
    return isinstance(handler.formatter, jsonlogger.JsonFormatter)


def configure_logging(level: str = 'INFO'):
    """Configure root logger to output JSON to stdout.

    Safe to call more than once: the JSON handler is only installed the first
    time, later calls just adjust the level.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if any(_is_json_handler(h) for h in root.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    formatter = jsonlogger.JsonFormatter(LOG_FORMAT)
    handler.setFormatter(formatter)
    handler.addFilter(RequestIdFilter())
    root.addHandler(handler)


def get_logger(name: str = 'appender', request_id: str | None = None) -> logging.LoggerAdapter:
    """Return a LoggerAdapter that injects `request_id` into log records."""
    base = logging.getLogger(name)
    extra = {'request_id': request_id}
    return logging.LoggerAdapter(base, extra)
