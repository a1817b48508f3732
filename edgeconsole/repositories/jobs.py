from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

import sqlite3

from edgeconsole.models.base import dump_json
from edgeconsole.utils.timestamps import utc_now_iso

_COLUMNS = 'id, container_name, operation, status, started_at, completed_at, duration_ms, error_message, metadata'


def _filters(statuses: Optional[Sequence[str]], container_name: Optional[str]) -> tuple[str, list[Any]]:
    clauses = []
    params: list[Any] = []
    if statuses:
        clauses.append(f"status IN ({', '.join('?' for _ in statuses)})")
        params.extend(statuses)
    if container_name:
        clauses.append('container_name = ?')
        params.append(container_name)
    where = f" WHERE {' AND '.join(clauses)}" if clauses else ''
    return where, params


class JobRepository:
    """Repository for the job audit trail."""
    def __init__(self, db_factory: Callable[[], sqlite3.Connection]):
        self._db_factory = db_factory

    def create(
        self,
        *,
        operation: str,
        container_name: str | None = None,
        status: str = 'completed',
        duration_ms: int | None = None,
        error_message: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> int:
        started_at = utc_now_iso()
        completed_at = started_at if status in ('completed', 'failed', 'cancelled') else None
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(
                '''INSERT INTO jobs
                   (container_name, operation, status, started_at, completed_at,
                    duration_ms, error_message, metadata)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)''',
                (
                    container_name,
                    operation,
                    status,
                    started_at,
                    completed_at,
                    duration_ms,
                    error_message,
                    dump_json(metadata),
                ),
            )
            job_id = cursor.lastrowid
            conn.commit()
            return job_id
        finally:
            conn.close()

    def get_by_id(self, job_id: int) -> Optional[sqlite3.Row]:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(f'SELECT {_COLUMNS} FROM jobs WHERE id = ?', (job_id,))
            return cursor.fetchone()
        finally:
            conn.close()

    def list_filtered(
        self,
        *,
        statuses: Optional[Sequence[str]] = None,
        container_name: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ):
        where, params = _filters(statuses, container_name)
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f'SELECT {_COLUMNS} FROM jobs{where} ORDER BY started_at DESC, id DESC LIMIT ? OFFSET ?',
                (*params, limit, offset),
            )
            return cursor.fetchall()
        finally:
            conn.close()

    def count(self, *, statuses: Optional[Sequence[str]] = None, container_name: Optional[str] = None) -> int:
        where, params = _filters(statuses, container_name)
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(f'SELECT COUNT(*) FROM jobs{where}', params)
            return cursor.fetchone()[0]
        finally:
            conn.close()

    def stats(self) -> dict[str, Any]:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(
                '''
                SELECT COUNT(*) AS total,
                       SUM(CASE WHEN status = 'pending' THEN 1 ELSE 0 END) AS pending,
                       SUM(CASE WHEN status = 'running' THEN 1 ELSE 0 END) AS running,
                       SUM(CASE WHEN status = 'completed' THEN 1 ELSE 0 END) AS completed,
                       SUM(CASE WHEN status = 'failed' THEN 1 ELSE 0 END) AS failed,
                       SUM(CASE WHEN status = 'cancelled' THEN 1 ELSE 0 END) AS cancelled,
                       AVG(duration_ms) AS average_duration
                FROM jobs
                '''
            )
            row = cursor.fetchone()
            return {
                'total': row['total'] or 0,
                'pending': row['pending'] or 0,
                'running': row['running'] or 0,
                'completed': row['completed'] or 0,
                'failed': row['failed'] or 0,
                'cancelled': row['cancelled'] or 0,
                'averageDuration': round(row['average_duration']) if row['average_duration'] is not None else 0,
            }
        finally:
            conn.close()

    def set_status(self, job_id: int, status: str, completed_at: str | None = None) -> None:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(
                'UPDATE jobs SET status = ?, completed_at = COALESCE(?, completed_at) WHERE id = ?',
                (status, completed_at, job_id),
            )
            conn.commit()
        finally:
            conn.close()

    def update_metadata(self, job_id: int, metadata: dict[str, Any]) -> None:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute('UPDATE jobs SET metadata = ? WHERE id = ?', (dump_json(metadata), job_id))
            conn.commit()
        finally:
            conn.close()

    def list_by_schedule(self, schedule_id: int, limit: int = 50):
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f'''
                SELECT {_COLUMNS} FROM jobs
                WHERE json_extract(metadata, '$.scheduleId') = ?
                ORDER BY started_at DESC, id DESC
                LIMIT ?
                ''',
                (schedule_id, limit),
            )
            return cursor.fetchall()
        finally:
            conn.close()
