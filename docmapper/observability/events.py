"""
Observability event emission to a Redis stream.
Defaults to Redis logical DB 1 and the stream 'docmapper:events'.

Connection settings come from the `cache.redis` config section; stream
settings from `observability.events`.
"""

import json
import os
import socket
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import redis

from docmapper.configuration import get_config
from docmapper.observability.instrumentation import observability_enabled

STREAM_NAME = "docmapper:events"
REDIS_DB_EVENTS = 1
DEFAULT_MAXLEN = 100_000


class EventSpooler:
    """Writes observability events to a configurable Redis DB/stream."""

    def __init__(
            self,
            redis_host: Optional[str] = None,
            redis_port: Optional[int] = None,
            session_id: Optional[str] = None,
            *,
            stream_name: str = STREAM_NAME,
            db: int = REDIS_DB_EVENTS,
            client: Optional[redis.Redis] = None,
    ):
        config = get_config()
        redis_config = (config.get("cache") or {}).get("redis") or {}
        obs_config = config.get("observability") or {}
        events_config = obs_config.get("events") or {}

        host = redis_host or redis_config.get("host", "localhost")
        port = int(redis_port or redis_config.get("port", 6379))
        eff_db = int(events_config.get("db", db))

        base_stream = events_config.get("stream_name", stream_name)
        active_namespace = config.get("active_namespace")
        eff_stream = f"{base_stream}:{active_namespace}" if active_namespace else base_stream

        self.redis_client = client or redis.Redis(host=host, port=port, db=eff_db, decode_responses=True)
        self.stream_name = eff_stream
        self.db = eff_db
        self.namespace = active_namespace
        self.session_id = session_id or str(uuid.uuid4())
        self.obs_enabled: bool = bool(obs_config.get("enabled", True))
        self.maxlen: Optional[int] = int(obs_config.get("retention", {}).get("maxlen", DEFAULT_MAXLEN))
        self.static_tags = obs_config.get("tags") or {}

    def build_envelope(self, event_type: str, component: str, operation: Optional[str],
                       data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Flat field map written to the stream (Redis stream values must be scalars)."""
        try:
            data_json = json.dumps(data or {}, default=str)
        except (TypeError, ValueError):
            data_json = json.dumps({"_nonserializable": True})

        envelope: Dict[str, Any] = {
            "event_type": event_type,
            "component": component,
            "operation": operation or "",
            "data": data_json,
            "session_id": self.session_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_version": 1,
            "namespace": self.namespace or "",
            "host": socket.gethostname(),
            "pid": os.getpid(),
        }
        if self.static_tags:
            envelope["tags"] = json.dumps(dict(self.static_tags))
        return envelope

    def emit_event(self, event_type: str, component: str, operation: Optional[str],
                   data: Optional[Dict[str, Any]] = None) -> None:
        """Append one event to the stream, trimming to maxlen."""
        if not self.obs_enabled:
            return
        envelope = self.build_envelope(event_type, component, operation, data)
        if self.maxlen:
            self.redis_client.xadd(self.stream_name, envelope, maxlen=self.maxlen, approximate=True)
        else:
            self.redis_client.xadd(self.stream_name, envelope)


_spooler: Optional[EventSpooler] = None


def emit_event(
        event_type: str,
        component: str,
        operation: Optional[str],
        data: Optional[Dict[str, Any]] = None,
) -> None:
    """Functional helper that emits through a lazily created process-wide EventSpooler."""
    global _spooler
    if not observability_enabled():
        return
    if _spooler is None:
        _spooler = EventSpooler()
    _spooler.emit_event(event_type, component, operation, data)
