"""In-memory audit log for dashboard decisions.

The store is a plain list with a hard cap.  It is not persisted and has no
locking: entries are lost on restart and concurrent writers simply append
in whatever order they arrive.  One store lives on the application state;
tests build their own with a small capacity.
"""

from __future__ import annotations

import csv
import io
import time
import uuid
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

DEFAULT_USER_ID = "user-001"
DEFAULT_USER_NAME = "Diego Ramos"
DEFAULT_ENTITY_TYPE = "recommendation"

DECISION_ACTIONS = frozenset({"accept", "reject", "defer"})
CSV_HEADER = ["Timestamp", "User", "Action", "Entity", "Title", "Impact", "Reasoning"]


@dataclass
class AuditEntry:
    id: str
    timestamp: str
    user_id: str
    user_name: str
    action: str
    entity_type: str
    entity_id: str | None = None
    entity_title: str | None = None
    reasoning: str | None = None
    expected_impact: dict[str, Any] | None = None
    tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


EvictionPolicy = Callable[[list[AuditEntry], int], list[AuditEntry]]


def fifo_truncate(entries: list[AuditEntry], capacity: int) -> list[AuditEntry]:
    """Keep only the newest *capacity* entries."""
    if len(entries) > capacity:
        return entries[-capacity:]
    return entries


def _new_entry_id() -> str:
    return f"audit-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


class AuditLogStore:
    def __init__(self, capacity: int = 100, evict: EvictionPolicy = fifo_truncate) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._evict = evict
        self._entries: list[AuditEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, payload: dict[str, Any]) -> AuditEntry:
        entry = AuditEntry(
            id=_new_entry_id(),
            timestamp=datetime.now(tz=timezone.utc).isoformat(),
            user_id=payload.get("user_id") or DEFAULT_USER_ID,
            user_name=payload.get("user_name") or DEFAULT_USER_NAME,
            action=payload["action"],
            entity_type=payload.get("entity_type") or DEFAULT_ENTITY_TYPE,
            entity_id=payload.get("entity_id"),
            entity_title=payload.get("entity_title"),
            reasoning=payload.get("reasoning"),
            expected_impact=payload.get("expected_impact"),
            tags=list(payload.get("tags") or []),
        )
        self._entries.append(entry)
        self._entries = self._evict(self._entries, self.capacity)
        return entry

    def recent(self, limit: int = 50) -> list[AuditEntry]:
        """Newest *limit* entries, newest first."""
        if limit <= 0:
            return []
        return list(reversed(self._entries[-limit:]))

    def clear(self) -> None:
        self._entries = []


def summarize(entries: list[AuditEntry]) -> dict[str, Any]:
    accepted = sum(1 for e in entries if e.action == "accept")
    rejected = sum(1 for e in entries if e.action == "reject")
    return {
        "total_decisions": sum(1 for e in entries if e.action in DECISION_ACTIONS),
        "acceptance_rate": accepted / max(accepted + rejected, 1),
        "recent_entries": [e.to_dict() for e in entries[:10]],
        "by_action": dict(Counter(e.action for e in entries)),
    }


def to_csv(entries: Iterable[AuditEntry]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    buffer.write(",".join(CSV_HEADER) + "\n")
    for entry in entries:
        impact = (entry.expected_impact or {}).get("revenue") or 0
        writer.writerow(
            [
                entry.timestamp,
                entry.user_name,
                entry.action,
                entry.entity_type,
                entry.entity_title if entry.entity_title is not None else "",
                impact,
                entry.reasoning or "",
            ]
        )
    return buffer.getvalue().rstrip("\n")
