from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any

from .ids import EventId


@dataclass
class AuditEntry:
    type: str
    turn: int
    event_id: Optional[EventId] = None
    trigger: Optional[str] = None
    reason: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


class AuditLog:
    def __init__(self):
        self.entries: List[AuditEntry] = []

    def add_entry(
        self,
        type: str,
        turn: int,
        event_id: Optional[EventId] = None,
        trigger: Optional[str] = None,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        entry = AuditEntry(
            type=type,
            turn=turn,
            event_id=event_id,
            trigger=trigger,
            reason=reason,
            details=details or {},
        )
        self.entries.append(entry)

    def of_type(self, type: str) -> List[AuditEntry]:
        return [entry for entry in self.entries if entry.type == type]
