from __future__ import annotations

import json
import logging
import sys
from traceback import format_exception

_STACK_LIMIT = 4000


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for hosted log collectors."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, object] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            exc_type = record.exc_info[0].__name__ if record.exc_info[0] else None
            stack = "".join(format_exception(*record.exc_info))
            payload["error"] = {
                "type": exc_type,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "stack": stack[:_STACK_LIMIT]
                + ("...(truncated)" if len(stack) > _STACK_LIMIT else ""),
            }

        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    handler = logging.StreamHandler(sys.stdout)
    if json_logs:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level.upper())
