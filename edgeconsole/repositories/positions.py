from __future__ import annotations

from typing import Callable, Mapping

import sqlite3

from edgeconsole.utils.timestamps import utc_now_iso


class PositionRepository:
    """Repository for saved topology node positions."""
    def __init__(self, db_factory: Callable[[], sqlite3.Connection]):
        self._db_factory = db_factory

    def list_all(self) -> dict[str, dict[str, float]]:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute('SELECT node_id, x, y FROM topology_positions')
            return {row['node_id']: {'x': row['x'], 'y': row['y']} for row in cursor.fetchall()}
        finally:
            conn.close()

    def upsert_many(self, positions: Mapping[str, Mapping[str, float]]) -> int:
        now = utc_now_iso()
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.executemany(
                '''
                INSERT INTO topology_positions (node_id, x, y, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(node_id) DO UPDATE SET
                    x = excluded.x,
                    y = excluded.y,
                    updated_at = excluded.updated_at
                ''',
                [(node_id, pos['x'], pos['y'], now) for node_id, pos in positions.items()],
            )
            conn.commit()
            return len(positions)
        finally:
            conn.close()
