"""SQLite-backed repository for fatigue states.

Persists the only stateful part of the engine so fatigue survives process
restarts. Saves are a compare-and-swap on the ``version`` column.
"""

import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Union
from contextlib import contextmanager
import logging

from .base import FatigueStateRepository
from ...exceptions import DatabaseError, StaleFatigueStateError
from ...models.fatigue import FatigueState, FatigueStatus, FatigueTrend, StressEntry
from ...utils import utc_now


logger = logging.getLogger(__name__)

_FILTER_COLUMNS = ("user_id", "program_id", "muscle_group", "status")


class SqliteFatigueStateRepository(FatigueStateRepository):
    """
    SQLite-backed repository for FatigueState entities.

    Each save opens its own connection, so one instance can be shared
    between threads.
    """

    def __init__(self, db_path: Union[str, Path]):
        """
        Initialize the fatigue state repository.

        Args:
            db_path: Path to the SQLite database file; created if missing.
        """
        self.db_path = Path(db_path)
        self._ensure_table_exists()

    @contextmanager
    def _get_connection(self):
        """Get database connection with context manager."""
        try:
            conn = sqlite3.connect(str(self.db_path))
        except sqlite3.Error as e:
            raise DatabaseError(f"Cannot open {self.db_path}: {e}", operation="connect") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _ensure_table_exists(self):
        """Ensure the fatigue_states table exists."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS fatigue_states (
                    key TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    program_id TEXT NOT NULL,
                    muscle_group TEXT NOT NULL,
                    score REAL NOT NULL DEFAULT 0.0,
                    status TEXT NOT NULL DEFAULT 'normal',
                    trend TEXT NOT NULL DEFAULT 'stable',
                    consecutive_high_sessions INTEGER NOT NULL DEFAULT 0,
                    history_json TEXT NOT NULL DEFAULT '[]',
                    version INTEGER NOT NULL,
                    updated_at TEXT
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_fatigue_states_program
                ON fatigue_states(user_id, program_id)
            """)

    def _state_to_row(self, state: FatigueState) -> dict:
        """Convert a FatigueState to a database row dictionary."""
        history_json = json.dumps([
            {"performed_at": e.performed_at.isoformat(), "stress": e.stress}
            for e in state.history
        ])
        updated_at = state.updated_at or utc_now()
        return {
            "key": state.key,
            "user_id": state.user_id,
            "program_id": state.program_id,
            "muscle_group": state.muscle_group,
            "score": state.score,
            "status": state.status.value,
            "trend": state.trend.value,
            "consecutive_high_sessions": state.consecutive_high_sessions,
            "history_json": history_json,
            "version": state.version + 1,
            "updated_at": updated_at.isoformat(),
        }

    def _row_to_state(self, row: sqlite3.Row) -> FatigueState:
        """Convert a database row to a FatigueState."""
        history = tuple(
            StressEntry(datetime.fromisoformat(e["performed_at"]), float(e["stress"]))
            for e in json.loads(row["history_json"])
        )
        updated_at = row["updated_at"]
        return FatigueState(
            user_id=row["user_id"],
            program_id=row["program_id"],
            muscle_group=row["muscle_group"],
            score=row["score"],
            status=FatigueStatus(row["status"]),
            trend=FatigueTrend(row["trend"]),
            consecutive_high_sessions=row["consecutive_high_sessions"],
            history=history,
            version=row["version"],
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
        )

    def _stored_version(self, conn, key: str) -> int:
        row = conn.execute(
            "SELECT version FROM fatigue_states WHERE key = ?",
            (key,)
        ).fetchone()
        return row["version"] if row else 0

    def save_many(self, entities: Sequence[FatigueState]) -> List[FatigueState]:
        """
        Compare-and-swap save of a batch in one transaction.

        Returns:
            The stored states with their new versions

        Raises:
            StaleFatigueStateError: if any stored version differs; nothing is written
        """
        with self._get_connection() as conn:
            return [self._write(conn, entity) for entity in entities]

    def _write(self, conn, entity: FatigueState) -> FatigueState:
        """Conditional insert or update of one row inside an open transaction."""
        row = self._state_to_row(entity)

        if entity.version == 0:
            cursor = conn.execute("""
                INSERT OR IGNORE INTO fatigue_states
                (key, user_id, program_id, muscle_group, score, status, trend,
                 consecutive_high_sessions, history_json, version, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                row["key"],
                row["user_id"],
                row["program_id"],
                row["muscle_group"],
                row["score"],
                row["status"],
                row["trend"],
                row["consecutive_high_sessions"],
                row["history_json"],
                row["version"],
                row["updated_at"],
            ))
        else:
            cursor = conn.execute("""
                UPDATE fatigue_states
                SET score = ?, status = ?, trend = ?, consecutive_high_sessions = ?,
                    history_json = ?, version = ?, updated_at = ?
                WHERE key = ? AND version = ?
            """, (
                row["score"],
                row["status"],
                row["trend"],
                row["consecutive_high_sessions"],
                row["history_json"],
                row["version"],
                row["updated_at"],
                row["key"],
                entity.version,
            ))

        if cursor.rowcount == 0:
            actual = self._stored_version(conn, entity.key)
            logger.warning(
                "Stale fatigue write for %s: expected v%d, stored v%d",
                entity.key,
                entity.version,
                actual,
            )
            raise StaleFatigueStateError(entity.key, entity.version, actual)

        stored = conn.execute(
            "SELECT * FROM fatigue_states WHERE key = ?",
            (entity.key,)
        ).fetchone()
        return self._row_to_state(stored)

    def get(self, entity_id: str) -> Optional[FatigueState]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM fatigue_states WHERE key = ?",
                (entity_id,)
            ).fetchone()

            if row:
                return self._row_to_state(row)
            return None

    def get_all(
        self,
        limit: int = 100,
        offset: int = 0,
        **filters
    ) -> List[FatigueState]:
        """
        Retrieve fatigue states matching the given filters.

        Args:
            limit: Maximum number of states to return
            offset: Number of states to skip
            **filters: user_id, program_id, muscle_group, status
        """
        query = "SELECT * FROM fatigue_states WHERE 1=1"
        params: list = []

        for column in _FILTER_COLUMNS:
            if column in filters:
                value = filters[column]
                query += f" AND {column} = ?"
                params.append(value.value if isinstance(value, FatigueStatus) else value)

        query += " ORDER BY key LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        with self._get_connection() as conn:
            rows = conn.execute(query, params).fetchall()
            return [self._row_to_state(row) for row in rows]

    def delete(self, entity_id: str) -> bool:
        with self._get_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM fatigue_states WHERE key = ?",
                (entity_id,)
            )
            return cursor.rowcount > 0

    def exists(self, entity_id: str) -> bool:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT 1 FROM fatigue_states WHERE key = ?",
                (entity_id,)
            ).fetchone()
            return row is not None

    def count(self, **filters) -> int:
        query = "SELECT COUNT(*) as cnt FROM fatigue_states WHERE 1=1"
        params: list = []

        for column in _FILTER_COLUMNS:
            if column in filters:
                value = filters[column]
                query += f" AND {column} = ?"
                params.append(value.value if isinstance(value, FatigueStatus) else value)

        with self._get_connection() as conn:
            row = conn.execute(query, params).fetchone()
            return row["cnt"]
