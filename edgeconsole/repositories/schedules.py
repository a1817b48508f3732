from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

import sqlite3

from edgeconsole.models.base import dump_json
from edgeconsole.utils.timestamps import utc_now_iso

_COLUMNS = (
    'id, container_name, name, description, action_type, action_params, cron_expression, '
    'timezone, enabled, status, last_run_at, last_run_status, last_run_error, next_run_at, '
    'run_count, metadata, created_at, updated_at'
)
_UPDATABLE = (
    'container_name',
    'name',
    'description',
    'action_type',
    'action_params',
    'cron_expression',
    'timezone',
    'enabled',
    'status',
    'next_run_at',
)


class ScheduleRepository:
    """Repository for scheduled actions."""
    def __init__(self, db_factory: Callable[[], sqlite3.Connection]):
        self._db_factory = db_factory

    def list_filtered(self, container_name: Optional[str] = None):
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            if container_name:
                cursor.execute(
                    f'SELECT {_COLUMNS} FROM scheduled_actions WHERE container_name = ? ORDER BY created_at DESC, id DESC',
                    (container_name,),
                )
            else:
                cursor.execute(f'SELECT {_COLUMNS} FROM scheduled_actions ORDER BY created_at DESC, id DESC')
            return cursor.fetchall()
        finally:
            conn.close()

    def get_by_id(self, schedule_id: int) -> Optional[sqlite3.Row]:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(f'SELECT {_COLUMNS} FROM scheduled_actions WHERE id = ?', (schedule_id,))
            return cursor.fetchone()
        finally:
            conn.close()

    def create(
        self,
        *,
        container_name: str,
        name: str,
        description: str | None,
        action_type: str,
        action_params: dict[str, Any] | None,
        cron_expression: str,
        timezone: str,
        enabled: bool,
        status: str,
        next_run_at: str | None,
    ) -> int:
        now = utc_now_iso()
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(
                '''INSERT INTO scheduled_actions
                   (container_name, name, description, action_type, action_params, cron_expression,
                    timezone, enabled, status, next_run_at, run_count, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 0, ?, ?)''',
                (
                    container_name,
                    name,
                    description,
                    action_type,
                    dump_json(action_params or {}),
                    cron_expression,
                    timezone,
                    1 if enabled else 0,
                    status,
                    next_run_at,
                    now,
                    now,
                ),
            )
            schedule_id = cursor.lastrowid
            conn.commit()
            return schedule_id
        finally:
            conn.close()

    def update(self, schedule_id: int, fields: Mapping[str, Any]) -> int:
        assignments = []
        params: list[Any] = []
        for column in _UPDATABLE:
            if column not in fields:
                continue
            value = fields[column]
            if column == 'action_params':
                value = dump_json(value)
            elif column == 'enabled':
                value = 1 if value else 0
            assignments.append(f'{column} = ?')
            params.append(value)
        assignments.append('updated_at = ?')
        params.append(utc_now_iso())

        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"UPDATE scheduled_actions SET {', '.join(assignments)} WHERE id = ?",
                (*params, schedule_id),
            )
            affected = cursor.rowcount
            conn.commit()
            return affected
        finally:
            conn.close()

    def delete(self, schedule_id: int) -> int:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute('DELETE FROM scheduled_actions WHERE id = ?', (schedule_id,))
            affected = cursor.rowcount
            conn.commit()
            return affected
        finally:
            conn.close()

    def record_run(self, schedule_id: int, *, last_run_at: str, status: str, next_run_at: str | None) -> None:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(
                '''
                UPDATE scheduled_actions
                SET run_count = run_count + 1,
                    last_run_at = ?,
                    last_run_status = ?,
                    last_run_error = NULL,
                    next_run_at = ?,
                    updated_at = ?
                WHERE id = ?
                ''',
                (last_run_at, status, next_run_at, utc_now_iso(), schedule_id),
            )
            conn.commit()
        finally:
            conn.close()

    def list_due(self, now: str):
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f'''
                SELECT {_COLUMNS} FROM scheduled_actions
                WHERE enabled = 1 AND (next_run_at IS NULL OR next_run_at <= ?)
                ORDER BY next_run_at, id
                ''',
                (now,),
            )
            return cursor.fetchall()
        finally:
            conn.close()
