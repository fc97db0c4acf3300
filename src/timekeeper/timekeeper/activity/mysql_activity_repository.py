from __future__ import annotations

from ..core.enums import ActivityAction
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .repository import ActivityLogRepository


class MySQLActivityLogRepository(ActivityLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def log(self, *, user_id: int, action: ActivityAction, entity_type: str, entity_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO activity_logs(user_id, action, entity_type, entity_id)
                VALUES(%s,%s,%s,%s)
                """,
                (int(user_id), action.value, entity_type, str(entity_id)),
            )
