"""Base repository providing generic CRUD operations for Oracle DB."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any

import oracledb

logger = logging.getLogger(__name__)

SLOW_QUERY_THRESHOLD_MS = 100  # Log queries slower than this

# Wall-clock "now" in the same time zone as TIMESTAMP columns defaulted from SYSTIMESTAMP
DB_NOW = "CAST(SYSTIMESTAMP AS TIMESTAMP)"


class BaseRepository:
    """Generic repository with CRUD operations using python-oracledb.

    Entity repositories extend this class and configure ``table_name``
    and ``id_column``. Hand-written queries go through ``_fetch_all``,
    ``_fetch_scalar`` and ``_execute`` so that every statement is timed
    and every connection is released.
    """

    def __init__(
        self,
        pool: Any,
        table_name: str,
        id_column: str,
    ) -> None:
        self.pool = pool
        self.table_name = table_name
        self.id_column = id_column

    # ── helpers ──────────────────────────────────────────────────────

    def _acquire(self) -> Any:
        """Acquire a connection from the pool."""
        return self.pool.acquire()

    @staticmethod
    def _log_query(sql: str, elapsed_ms: float) -> None:
        """Log query timing; warn if above slow-query threshold."""
        if elapsed_ms > SLOW_QUERY_THRESHOLD_MS:
            logger.warning("SLOW QUERY (%.1fms): %s", elapsed_ms, sql[:200])
        else:
            logger.debug("Query (%.1fms): %s", elapsed_ms, sql[:200])

    @staticmethod
    def _generate_id() -> str:
        """Generate a new UUID string."""
        return uuid.uuid4().hex

    @staticmethod
    def _to_raw_id(entity_id: str) -> str | bytes:
        """Convert a 32-char hex ID to bytes for Oracle RAW column binding.

        python-oracledb binds plain strings as VARCHAR2, which doesn't
        reliably match RAW(16) columns in WHERE clauses.
        """
        try:
            if len(entity_id) == 32:
                return bytes.fromhex(entity_id)
        except (ValueError, TypeError):
            pass
        return entity_id

    @staticmethod
    def _convert_row(row: dict[str, Any]) -> dict[str, Any]:
        """Convert RAW columns to hex and read LOBs for JSON serialization."""
        converted: dict[str, Any] = {}
        for k, v in row.items():
            if isinstance(v, bytes):
                converted[k] = v.hex()
            elif isinstance(v, oracledb.LOB):
                converted[k] = v.read()
            else:
                converted[k] = v
        return converted

    def _build_where(
        self,
        filters: dict[str, Any],
        prefix: str = "w_",
    ) -> tuple[str, dict[str, Any]]:
        """Build a WHERE clause and bind-param dict from *filters*."""
        if not filters:
            return "", {}
        clauses: list[str] = []
        params: dict[str, Any] = {}
        for col, val in filters.items():
            bind_name = f"{prefix}{col}"
            clauses.append(f"{col} = :{bind_name}")
            params[bind_name] = val
        return "WHERE " + " AND ".join(clauses), params

    def _fetch_all(self, sql: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Run a SELECT and return every row as a dict keyed by lower-case column."""
        conn = self._acquire()
        try:
            with conn.cursor() as cur:
                start = time.perf_counter()
                cur.execute(sql, params or {})
                columns = [col[0].lower() for col in (cur.description or [])]
                rows = [
                    self._convert_row(dict(zip(columns, row, strict=True)))
                    for row in cur.fetchall()
                ]
                self._log_query(sql, (time.perf_counter() - start) * 1000)
                return rows
        finally:
            conn.close()

    def _fetch_one(self, sql: str, params: dict[str, Any] | None = None) -> dict[str, Any] | None:
        rows = self._fetch_all(sql, params)
        return rows[0] if rows else None

    def _fetch_scalar(self, sql: str, params: dict[str, Any] | None = None) -> Any:
        """Run a SELECT and return the first column of the first row."""
        conn = self._acquire()
        try:
            with conn.cursor() as cur:
                start = time.perf_counter()
                cur.execute(sql, params or {})
                row = cur.fetchone()
                self._log_query(sql, (time.perf_counter() - start) * 1000)
                return row[0] if row else None
        finally:
            conn.close()

    def _execute(self, sql: str, params: dict[str, Any] | None = None) -> int:
        """Run a DML statement, commit, and return rows affected."""
        conn = self._acquire()
        try:
            with conn.cursor() as cur:
                start = time.perf_counter()
                cur.execute(sql, params or {})
                conn.commit()
                self._log_query(sql, (time.perf_counter() - start) * 1000)
                return int(cur.rowcount)
        finally:
            conn.close()

    # ── read ─────────────────────────────────────────────────────────

    def find_by_id(self, entity_id: str) -> dict[str, Any] | None:
        """Return a single row by primary key, or ``None``."""
        sql = f"SELECT * FROM {self.table_name} WHERE {self.id_column} = :id"
        return self._fetch_one(sql, {"id": self._to_raw_id(entity_id)})

    def find_all(
        self,
        limit: int = 20,
        offset: int = 0,
        filters: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Return paginated rows, optionally filtered."""
        where_clause, params = self._build_where(filters or {})
        sql = (
            f"SELECT * FROM {self.table_name} {where_clause} "
            f"OFFSET :off ROWS FETCH NEXT :lim ROWS ONLY"
        )
        params["off"] = offset
        params["lim"] = limit
        return self._fetch_all(sql, params)

    def find_by_field(self, field: str, value: Any) -> list[dict[str, Any]]:
        """Return all rows matching a single field value."""
        sql = f"SELECT * FROM {self.table_name} WHERE {field} = :val"
        return self._fetch_all(sql, {"val": value})

    def count(self, filters: dict[str, Any] | None = None) -> int:
        """Return row count, optionally filtered."""
        where_clause, params = self._build_where(filters or {})
        sql = f"SELECT COUNT(*) AS cnt FROM {self.table_name} {where_clause}"
        value = self._fetch_scalar(sql, params)
        return int(value) if value is not None else 0

    # ── write ────────────────────────────────────────────────────────

    def create(
        self,
        data: dict[str, Any],
        new_id: str | None = None,
    ) -> str:
        """Insert a new row and return its ID (supplied or generated)."""
        if new_id is None:
            new_id = self._generate_id()

        all_data = {self.id_column: self._to_raw_id(new_id), **data}
        columns = ", ".join(all_data.keys())
        placeholders = ", ".join(f":{k}" for k in all_data)
        sql = f"INSERT INTO {self.table_name} ({columns}) VALUES ({placeholders})"
        self._execute(sql, all_data)
        return new_id

    def update(self, entity_id: str, data: dict[str, Any]) -> int:
        """Update a row by primary key. Returns rows affected."""
        if not data:
            raise ValueError("No data provided for update")

        set_clause = ", ".join(f"{k} = :s_{k}" for k in data)
        params: dict[str, Any] = {f"s_{k}": v for k, v in data.items()}
        params["id"] = self._to_raw_id(entity_id)
        sql = f"UPDATE {self.table_name} SET {set_clause} WHERE {self.id_column} = :id"
        return self._execute(sql, params)

    def delete(self, entity_id: str) -> int:
        """Delete a row by primary key. Returns rows affected."""
        sql = f"DELETE FROM {self.table_name} WHERE {self.id_column} = :id"
        return self._execute(sql, {"id": self._to_raw_id(entity_id)})
