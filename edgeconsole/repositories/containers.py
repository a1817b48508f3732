from __future__ import annotations

from typing import Callable, Optional

import sqlite3

from edgeconsole.utils.timestamps import utc_now_iso

_SELECT = '''
    SELECT c.id, c.name, c.class_name, c.worker_name, c.image, c.instance_type,
           c.max_instances, c.default_port, c.sleep_after, c.status,
           c.created_at, c.updated_at, cc.color
    FROM containers c
    LEFT JOIN container_colors cc ON cc.container_name = c.name
'''


class ContainerRepository:
    """Repository for container registrations."""
    def __init__(self, db_factory: Callable[[], sqlite3.Connection]):
        self._db_factory = db_factory

    def list_all(self):
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(_SELECT + ' ORDER BY c.name')
            return cursor.fetchall()
        finally:
            conn.close()

    def get_by_name(self, name: str) -> Optional[sqlite3.Row]:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(_SELECT + ' WHERE c.name = ?', (name,))
            return cursor.fetchone()
        finally:
            conn.close()

    def list_names(self) -> list[str]:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute('SELECT name FROM containers ORDER BY name')
            return [row[0] for row in cursor.fetchall()]
        finally:
            conn.close()

    def create(
        self,
        *,
        name: str,
        class_name: str,
        image: str | None,
        worker_name: str | None,
        instance_type: str,
        max_instances: int,
        default_port: int | None,
        sleep_after: str | None,
        status: str = 'stopped',
    ) -> int:
        """Insert a registration. Raises sqlite3.IntegrityError on a duplicate name."""
        now = utc_now_iso()
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute(
                '''INSERT INTO containers
                   (name, class_name, worker_name, image, instance_type, max_instances,
                    default_port, sleep_after, status, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)''',
                (
                    name,
                    class_name,
                    worker_name,
                    image,
                    instance_type,
                    max_instances,
                    default_port,
                    sleep_after,
                    status,
                    now,
                    now,
                ),
            )
            container_id = cursor.lastrowid
            conn.commit()
            return container_id
        finally:
            conn.close()

    def delete(self, name: str) -> int:
        conn = self._db_factory()
        try:
            cursor = conn.cursor()
            cursor.execute('DELETE FROM containers WHERE name = ?', (name,))
            affected = cursor.rowcount
            conn.commit()
            return affected
        finally:
            conn.close()
