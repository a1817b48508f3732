from __future__ import annotations

from typing import Any, Callable, Optional

import sqlite3

from edgeconsole.models.base import dump_json
from edgeconsole.utils.timestamps import utc_now_iso

_COLUMNS = 'id, container_name, name, description, r2_key, created_at, created_by, size_bytes, metadata'


class SnapshotRepository:
    """Repository for snapshot records. Payloads live in the blob store."""
    def __init__(self, db_factory: Callable[[], sqlite3.Connection]):
        self._db_factory = db_factory

    def list_filtered(self, container_name: Optional[str] = None):
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            if container_name:
                cursor.execute(
                    f'SELECT {_COLUMNS} FROM snapshots WHERE container_name = ? ORDER BY created_at DESC, id DESC',
                    (container_name,),
                )
            else:
                cursor.execute(f'SELECT {_COLUMNS} FROM snapshots ORDER BY created_at DESC, id DESC')
            return cursor.fetchall()
        finally:
            conn.close()

    def get_by_id(self, snapshot_id: int) -> Optional[sqlite3.Row]:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(f'SELECT {_COLUMNS} FROM snapshots WHERE id = ?', (snapshot_id,))
            return cursor.fetchone()
        finally:
            conn.close()

    def create(
        self,
        *,
        container_name: str,
        name: str,
        description: str | None,
        r2_key: str,
        created_by: str | None,
        size_bytes: int,
        metadata: dict[str, Any],
    ) -> int:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(
                '''INSERT INTO snapshots
                   (container_name, name, description, r2_key, created_at, created_by, size_bytes, metadata)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)''',
                (
                    container_name,
                    name,
                    description,
                    r2_key,
                    utc_now_iso(),
                    created_by,
                    size_bytes,
                    dump_json(metadata),
                ),
            )
            snapshot_id = cursor.lastrowid
            conn.commit()
            return snapshot_id
        finally:
            conn.close()

    def delete(self, snapshot_id: int) -> int:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute('DELETE FROM snapshots WHERE id = ?', (snapshot_id,))
            affected = cursor.rowcount
            conn.commit()
            return affected
        finally:
            conn.close()

    def stats(self) -> dict[str, Any]:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(
                '''
                SELECT COUNT(*) AS total, COALESCE(SUM(size_bytes), 0) AS total_size,
                       MIN(created_at) AS oldest, MAX(created_at) AS newest
                FROM snapshots
                '''
            )
            totals = cursor.fetchone()
            cursor.execute(
                'SELECT container_name, COUNT(*) AS count FROM snapshots GROUP BY container_name ORDER BY container_name'
            )
            counts = [
                {'containerName': row['container_name'], 'count': row['count']}
                for row in cursor.fetchall()
            ]
            return {
                'totalSnapshots': totals['total'],
                'totalSize': totals['total_size'],
                'oldestSnapshot': totals['oldest'],
                'newestSnapshot': totals['newest'],
                'containerCounts': counts,
            }
        finally:
            conn.close()
