from __future__ import annotations

from typing import Callable

import sqlite3

from edgeconsole.utils.timestamps import utc_now_iso


class ColorRepository:
    """Repository for per-container display colors."""
    def __init__(self, db_factory: Callable[[], sqlite3.Connection]):
        self._db_factory = db_factory

    def upsert(self, container_name: str, color: str) -> None:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(
                '''
                INSERT INTO container_colors (container_name, color, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(container_name) DO UPDATE SET
                    color = excluded.color,
                    updated_at = excluded.updated_at
                ''',
                (container_name, color, utc_now_iso()),
            )
            conn.commit()
        finally:
            conn.close()

    def delete(self, container_name: str) -> int:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute('DELETE FROM container_colors WHERE container_name = ?', (container_name,))
            affected = cursor.rowcount
            conn.commit()
            return affected
        finally:
            conn.close()
