"""
One JSON object per log line, with operation context and timing fields.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

OPERATION_FIELDS = ("operation", "duration_ms", "result_size")


class JsonFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in OPERATION_FIELDS:
            if hasattr(record, name):
                payload[name] = getattr(record, name)
        context = getattr(record, "context", None)
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)
