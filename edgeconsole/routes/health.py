from __future__ import annotations

from flask import jsonify

from edgeconsole.utils.timestamps import utc_now_iso


def register_health_routes(router, *, migration_repo):
    """Register health and migration status routes."""

    @router.route('GET', '/api/health', public=True)
    def health_check():
        """Liveness probe; the timestamp is produced per call."""
        return jsonify({'status': 'ok', 'timestamp': utc_now_iso()}), 200

    @router.route('GET', '/api/migrations/status')
    def migrations_status():
        migrations = [
            {'id': row['id'], 'name': row['name'], 'appliedAt': row['applied_at']}
            for row in migration_repo.list_applied()
        ]
        return jsonify({'migrations': migrations}), 200
