from __future__ import annotations

import logging
import os
import sqlite3
from typing import Callable, Optional

from edgeconsole.config import Config
from edgeconsole.utils.timestamps import SQL_NOW

logger = logging.getLogger(__name__)

DATABASE_PATH = Config.DATABASE_PATH

_NOW = f'({SQL_NOW})'

# Ordered schema migrations. Each one is idempotent and recorded in the
# migrations table once applied.
MIGRATIONS = [
    ('001_initial_schema', [
        f'''
        CREATE TABLE IF NOT EXISTS containers (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE,
            class_name TEXT NOT NULL,
            worker_name TEXT,
            image TEXT,
            instance_type TEXT NOT NULL DEFAULT 'standard-1',
            max_instances INTEGER NOT NULL DEFAULT 5,
            default_port INTEGER,
            sleep_after TEXT,
            status TEXT NOT NULL DEFAULT 'stopped',
            created_at TEXT NOT NULL DEFAULT {_NOW},
            updated_at TEXT NOT NULL DEFAULT {_NOW}
        )
        ''',
        f'''
        CREATE TABLE IF NOT EXISTS container_colors (
            container_name TEXT PRIMARY KEY,
            color TEXT NOT NULL,
            updated_at TEXT NOT NULL DEFAULT {_NOW}
        )
        ''',
        f'''
        CREATE TABLE IF NOT EXISTS jobs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            container_name TEXT,
            operation TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'pending',
            started_at TEXT NOT NULL DEFAULT {_NOW},
            completed_at TEXT,
            duration_ms INTEGER,
            error_message TEXT,
            metadata TEXT
        )
        ''',
        'CREATE INDEX IF NOT EXISTS idx_jobs_container ON jobs(container_name)',
        'CREATE INDEX IF NOT EXISTS idx_jobs_started_at ON jobs(started_at DESC)',
        'CREATE INDEX IF NOT EXISTS idx_jobs_status ON jobs(status)',
        f'''
        CREATE TABLE IF NOT EXISTS webhooks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT,
            url TEXT NOT NULL,
            events TEXT NOT NULL,
            container_filter TEXT,
            secret TEXT,
            headers TEXT,
            enabled INTEGER NOT NULL DEFAULT 1,
            created_at TEXT NOT NULL DEFAULT {_NOW},
            updated_at TEXT NOT NULL DEFAULT {_NOW},
            last_triggered_at TEXT,
            last_status INTEGER
        )
        ''',
        'CREATE INDEX IF NOT EXISTS idx_webhooks_enabled ON webhooks(enabled)',
        f'''
        CREATE TABLE IF NOT EXISTS snapshots (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            container_name TEXT NOT NULL,
            name TEXT,
            description TEXT,
            r2_key TEXT NOT NULL,
            created_at TEXT NOT NULL DEFAULT {_NOW},
            created_by TEXT,
            size_bytes INTEGER,
            metadata TEXT
        )
        ''',
        'CREATE INDEX IF NOT EXISTS idx_snapshots_container ON snapshots(container_name)',
        'CREATE INDEX IF NOT EXISTS idx_snapshots_created_at ON snapshots(created_at DESC)',
        f'''
        CREATE TABLE IF NOT EXISTS scheduled_actions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            container_name TEXT NOT NULL,
            name TEXT NOT NULL,
            description TEXT,
            action_type TEXT NOT NULL,
            action_params TEXT,
            cron_expression TEXT NOT NULL,
            timezone TEXT NOT NULL DEFAULT 'UTC',
            enabled INTEGER NOT NULL DEFAULT 1,
            status TEXT NOT NULL DEFAULT 'active',
            last_run_at TEXT,
            last_run_status TEXT,
            last_run_error TEXT,
            next_run_at TEXT,
            run_count INTEGER NOT NULL DEFAULT 0,
            metadata TEXT,
            created_at TEXT NOT NULL DEFAULT {_NOW},
            updated_at TEXT NOT NULL DEFAULT {_NOW}
        )
        ''',
        'CREATE INDEX IF NOT EXISTS idx_scheduled_actions_container ON scheduled_actions(container_name)',
        'CREATE INDEX IF NOT EXISTS idx_scheduled_actions_enabled ON scheduled_actions(enabled)',
        'CREATE INDEX IF NOT EXISTS idx_scheduled_actions_next_run ON scheduled_actions(next_run_at)',
    ]),
    ('002_topology_positions', [
        f'''
        CREATE TABLE IF NOT EXISTS topology_positions (
            node_id TEXT PRIMARY KEY,
            x REAL NOT NULL,
            y REAL NOT NULL,
            updated_at TEXT NOT NULL DEFAULT {_NOW}
        )
        ''',
    ]),
]


def _get_database_path() -> str:
    """Resolve database path at runtime (supports tests overriding env)."""
    return os.getenv('DATABASE_PATH', DATABASE_PATH)


def get_db(path: Optional[str] = None) -> sqlite3.Connection:
    """Get database connection with dict-like rows."""
    conn = sqlite3.connect(path or _get_database_path())
    conn.row_factory = sqlite3.Row
    return conn


def make_db_factory(path: str) -> Callable[[], sqlite3.Connection]:
    """Bind get_db to a fixed database file."""
    def factory() -> sqlite3.Connection:
        return get_db(path)
    return factory


def init_db(db_factory: Callable[[], sqlite3.Connection] = get_db) -> list[str]:
    """Create or upgrade the schema. Returns the names of newly applied migrations."""
    conn = db_factory()
    applied = []
    try:
        cursor = conn.cursor()
        cursor.execute(f'''
            CREATE TABLE IF NOT EXISTS migrations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL UNIQUE,
                applied_at TEXT NOT NULL DEFAULT {_NOW}
            )
        ''')
        cursor.execute('SELECT name FROM migrations')
        done = {row[0] for row in cursor.fetchall()}

        for name, statements in MIGRATIONS:
            if name in done:
                continue
            logger.info('Applying migration %s', name)
            for statement in statements:
                cursor.execute(statement)
            cursor.execute('INSERT INTO migrations (name) VALUES (?)', (name,))
            applied.append(name)

        conn.commit()
    finally:
        conn.close()
    logger.info('Database initialized')
    return applied


def ensure_data_dir(path: str = DATABASE_PATH) -> None:
    data_dir = os.path.dirname(path) or '.'
    os.makedirs(data_dir, exist_ok=True)
