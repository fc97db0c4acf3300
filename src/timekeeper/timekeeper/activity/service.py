from __future__ import annotations

import logging
from typing import Optional

from ..core.enums import ActivityAction
from .repository import ActivityLogRepository

logger = logging.getLogger(__name__)


class ActivityLogger:
    """Audit trail for successful mutations.

    A failing audit write is logged and dropped; it never fails the mutation
    that triggered it.
    """

    def __init__(self, repo: Optional[ActivityLogRepository] = None):
        self._repo = repo

    def record(self, *, user_id: int, action: ActivityAction, entity_type: str, entity_id: int) -> None:
        if self._repo is None:
            return
        try:
            self._repo.log(user_id=user_id, action=action, entity_type=entity_type, entity_id=entity_id)
        except Exception:
            logger.exception(
                "Failed to log activity %s %s#%s for user %s", action.value, entity_type, entity_id, user_id
            )
