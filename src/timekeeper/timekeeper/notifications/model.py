from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from ..core.enums import AttendanceMode, NotificationKind


@dataclass(frozen=True)
class NotificationEvent:
    """Notification intent handed to the emitter; transport is the emitter's concern."""

    actor_name: str
    kind: NotificationKind
    timestamp: datetime
    mode: Optional[AttendanceMode] = None
    recipients: Tuple[str, ...] = ()
    details: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict:
        return {
            "actor_name": self.actor_name,
            "event": self.kind.value,
            "timestamp": self.timestamp.isoformat(),
            "mode": self.mode.value if self.mode else None,
            "recipients": list(self.recipients),
            "details": dict(self.details),
        }
