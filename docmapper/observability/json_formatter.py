"""
One-line JSON log formatter for docmapper.

Store context (`collection`, `operation`, `record_type`) is lifted to top-level
keys so log pipelines can index on them; any other whitelisted context stays
under `context`. Works with LogContextFilter, which populates record.context.

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter(static_fields={"service": "billing"}))
    handler.addFilter(LogContextFilter())
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

_TOP_LEVEL_KEYS = ("collection", "operation", "record_type")

_PACKAGE_PREFIX = "docmapper."


class JsonFormatter(logging.Formatter):
    def __init__(self, *, static_fields: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__()
        self.static_fields = dict(static_fields or {})

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = dict(self.static_fields)
        payload["ts"] = ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        payload["level"] = record.levelname
        payload["logger"] = record.name
        if record.name.startswith(_PACKAGE_PREFIX):
            payload["component"] = record.name[len(_PACKAGE_PREFIX):]
        payload["message"] = record.getMessage()

        ctx = dict(getattr(record, "context", None) or {})
        for key in _TOP_LEVEL_KEYS:
            if key in ctx:
                payload[key] = ctx.pop(key)
        if ctx:
            payload["context"] = ctx
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)
