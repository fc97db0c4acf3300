from __future__ import annotations

from typing import Protocol

from ..core.enums import ActivityAction


class ActivityLogRepository(Protocol):
    def log(self, *, user_id: int, action: ActivityAction, entity_type: str, entity_id: int) -> None:
        raise NotImplementedError
