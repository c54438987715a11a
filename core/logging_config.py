# core/logging_config.py

import logging
import json
from datetime import datetime, UTC
from core.request_context import get_request_id

# Attributes every LogRecord carries; anything else came in through `extra=`
_RESERVED_ATTRS = frozenset((
    "args", "msg", "levelname", "levelno",
    "pathname", "filename", "module",
    "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created",
    "msecs", "relativeCreated", "thread",
    "threadName", "processName", "process",
    "taskName", "name",
))


class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_record = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": get_request_id(),
        }

        # If extra fields were passed
        for key, value in record.__dict__.items():
            if key not in log_record and key not in _RESERVED_ATTRS:
                log_record[key] = value
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record, default=str, ensure_ascii=False)


def setup_logging(level: int = logging.INFO):
    # Prevent request bodies and auth headers from being logged by HTTP libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)
