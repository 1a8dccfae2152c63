"""Rolling in-memory log of email send attempts.

Keeps the most recent ``max_entries`` attempts (oldest evicted first) for
operational visibility through the ops endpoints.  The log is
per-process: with several workers each one keeps its own history.
Appends and reads are guarded by a lock so concurrent request threads can
share one instance.
"""

from __future__ import annotations

import json
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional

import structlog
from django.utils import timezone

from modules.notifications.dtos import EmailResultDTO

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ENTRIES = 100


@dataclass(frozen=True)
class EmailLogEntry:
    timestamp: str
    result: EmailResultDTO
    order: Dict[str, Any] = field(default_factory=dict)

    @property
    def status(self) -> str:
        return "success" if self.result.success else "error"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "status": self.status,
            "order": dict(self.order),
            "emailResult": self.result.to_dict(),
        }


class EmailLog:
    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._entries: Deque[EmailLogEntry] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def record(
        self,
        result: EmailResultDTO,
        order: Optional[Dict[str, Any]] = None,
    ) -> EmailLogEntry:
        """Append ``result`` (evicting the oldest entry when full) and log it."""
        entry = EmailLogEntry(
            timestamp=timezone.now().isoformat(),
            result=result,
            order=order or {},
        )
        with self._lock:
            self._entries.append(entry)

        log = logger.bind(email_type=result.type.value, recipient=result.recipient)
        if result.success:
            log.info("email.sent", message_id=result.message_id)
        else:
            log.error("email.failed", error=result.error)
        return entry

    def recent(self, limit: int = 10) -> List[EmailLogEntry]:
        """Return up to ``limit`` entries, newest first."""
        if limit <= 0:
            return []
        with self._lock:
            entries = list(self._entries)
        return list(reversed(entries[-limit:]))

    def success_rate(self) -> Dict[str, Any]:
        with self._lock:
            entries = list(self._entries)
        total = len(entries)
        success = sum(1 for entry in entries if entry.result.success)
        rate = (success / total) * 100 if total else 0.0
        return {"total": total, "success": success, "rate": round(rate, 2)}

    def detailed_stats(self) -> Dict[str, Any]:
        stats = self.success_rate()
        stats["recentActivity"] = [
            {
                "timestamp": entry.timestamp,
                "type": entry.result.type.value,
                "success": entry.result.success,
                "recipient": entry.result.recipient,
            }
            for entry in self.recent(5)
        ]
        return stats

    def export(self) -> str:
        """Serialise every entry (oldest first) as indented JSON."""
        with self._lock:
            entries = [entry.to_dict() for entry in self._entries]
        return json.dumps(entries, indent=2, ensure_ascii=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info("email.log_cleared")
