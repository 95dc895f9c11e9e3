"""One-line JSON log records for the gate.

Records carry the pull request and ticket they concern as top-level fields
(``repo``, ``pr_number``, ``board``, ``ticket_id``). Anything else goes in a
nested ``extra`` dict, which is flattened into the output line.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

CONTEXT_FIELDS = ("repo", "pr_number", "board", "ticket_id")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            {field: getattr(record, field) for field in CONTEXT_FIELDS if getattr(record, field, None) is not None}
        )

        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


_handler: Optional[logging.Handler] = None


def configure_logging() -> None:
    """Attach a stdout JSON handler to the root logger, once per process."""
    global _handler
    if _handler is not None:
        return

    _handler = logging.StreamHandler(sys.stdout)
    _handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.addHandler(_handler)
    root.setLevel(os.getenv("LOG_LEVEL", "INFO"))


class ContextAdapter(logging.LoggerAdapter):
    """Logger carrying fixed context fields into every record."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs

    def bind(self, **context: Any) -> "ContextAdapter":
        """Return a child adapter with ``context`` added; ``None`` values are dropped."""
        return ContextAdapter(self.logger, _merge_context(self.extra, context))


def _merge_context(base: Mapping[str, Any], context: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    merged.update((key, value) for key, value in context.items() if value is not None)
    return merged


def get_logger(name: str, **context: Any) -> ContextAdapter:
    configure_logging()
    return ContextAdapter(logging.getLogger(name), _merge_context({}, context))
