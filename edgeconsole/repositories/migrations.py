from __future__ import annotations

from typing import Callable

import sqlite3


class MigrationRepository:
    """Read access to the applied-migrations ledger."""
    def __init__(self, db_factory: Callable[[], sqlite3.Connection]):
        self._db_factory = db_factory

    def list_applied(self):
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute('SELECT id, name, applied_at FROM migrations ORDER BY id')
            return cursor.fetchall()
        finally:
            conn.close()
