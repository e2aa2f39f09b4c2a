"""Call log repository — data access for the ``call_logs`` table."""

from __future__ import annotations

from typing import Any

from supportdesk.repositories.base import BaseRepository


class CallLogRepository(BaseRepository):
    def __init__(self, pool: Any) -> None:
        super().__init__(pool=pool, table_name="call_logs", id_column="call_log_id")
