from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

import sqlite3

from edgeconsole.models.base import dump_json
from edgeconsole.utils.timestamps import utc_now_iso

_COLUMNS = (
    'id, name, url, events, container_filter, secret, headers, enabled, '
    'created_at, updated_at, last_triggered_at, last_status'
)
_UPDATABLE = ('name', 'url', 'events', 'container_filter', 'secret', 'headers', 'enabled')
_JSON_COLUMNS = ('events', 'headers')


class WebhookRepository:
    """Repository for webhooks."""
    def __init__(self, db_factory: Callable[[], sqlite3.Connection]):
        self._db_factory = db_factory

    def list_all(self):
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(f'SELECT {_COLUMNS} FROM webhooks ORDER BY created_at DESC, id DESC')
            return cursor.fetchall()
        finally:
            conn.close()

    def get_by_id(self, webhook_id: int) -> Optional[sqlite3.Row]:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(f'SELECT {_COLUMNS} FROM webhooks WHERE id = ?', (webhook_id,))
            return cursor.fetchone()
        finally:
            conn.close()

    def create(
        self,
        *,
        name: str | None,
        url: str,
        events: list[str],
        secret: str | None,
        container_filter: str | None = None,
        headers: dict[str, str] | None = None,
        enabled: bool = True,
    ) -> int:
        now = utc_now_iso()
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(
                '''INSERT INTO webhooks
                   (name, url, events, container_filter, secret, headers, enabled, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)''',
                (
                    name,
                    url,
                    dump_json(events),
                    container_filter,
                    secret,
                    dump_json(headers or {}),
                    1 if enabled else 0,
                    now,
                    now,
                ),
            )
            webhook_id = cursor.lastrowid
            conn.commit()
            return webhook_id
        finally:
            conn.close()

    def update(self, webhook_id: int, fields: Mapping[str, Any]) -> int:
        assignments = []
        params: list[Any] = []
        for column in _UPDATABLE:
            if column not in fields:
                continue
            value = fields[column]
            if column in _JSON_COLUMNS:
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
                f"UPDATE webhooks SET {', '.join(assignments)} WHERE id = ?",
                (*params, webhook_id),
            )
            affected = cursor.rowcount
            conn.commit()
            return affected
        finally:
            conn.close()

    def delete(self, webhook_id: int) -> int:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute('DELETE FROM webhooks WHERE id = ?', (webhook_id,))
            affected = cursor.rowcount
            conn.commit()
            return affected
        finally:
            conn.close()

    def record_trigger(self, webhook_id: int, status: int) -> None:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(
                'UPDATE webhooks SET last_triggered_at = ?, last_status = ? WHERE id = ?',
                (utc_now_iso(), status, webhook_id),
            )
            conn.commit()
        finally:
            conn.close()
