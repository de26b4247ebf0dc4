"""
Audit Sink

Append-only record of answered queries. Writing is best effort: callers
log and swallow failures so auditing never changes a query's outcome.
"""

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field, asdict

logger = logging.getLogger("netquery.common.audit")


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class AuditEvent:
    """One answered query"""
    company_id: str
    query_text: str
    response_text: str
    requester_id: Optional[str] = None
    timestamp: str = field(default_factory=_utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class AuditSink:
    """Interface for audit destinations"""

    def record(self, event: AuditEvent) -> None:
        raise NotImplementedError


class JsonlAuditSink(AuditSink):
    """
    Appends one JSON object per line to a local file.

    The file is opened per write, so several processes may share it; writes
    from threads in this process are serialized.
    """

    def __init__(self, path: Path):
        self._path = Path(path).expanduser()
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def record(self, event: AuditEvent) -> None:
        line = json.dumps(event.to_dict(), ensure_ascii=False)
        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
