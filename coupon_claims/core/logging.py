import json
import logging
from datetime import datetime, timezone
from typing import Any

# extra={...} keys copied into the JSON line when present
EXTRA_KEYS = ("coupon_id", "coupon_code", "browser_id", "next_eligible_at", "inserted", "scope")


class JsonFormatter(logging.Formatter):
    """Render log records as a single JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in EXTRA_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                data[key] = str(value) if not isinstance(value, (int, float, bool)) else value
        if record.exc_info:
            data["exc"] = self.formatException(record.exc_info)
        return json.dumps(data)


def configure_logging(level: str | int = logging.INFO) -> None:
    """Configure the root logger with JSON formatting."""

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
