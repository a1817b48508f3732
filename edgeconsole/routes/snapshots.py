from __future__ import annotations

from flask import jsonify, request

from edgeconsole.routes.common import current_identity, json_object
from edgeconsole.services.base import parse_id


def register_snapshot_routes(router, *, snapshot_service):
    """Register snapshot routes."""

    @router.route('GET', '/api/snapshots')
    def list_snapshots():
        snapshots = [s.to_dict() for s in snapshot_service.list_snapshots(request.args.get('container'))]
        return jsonify({'snapshots': snapshots, 'total': len(snapshots)}), 200

    @router.route('POST', '/api/snapshots')
    def create_snapshot():
        snapshot = snapshot_service.create(json_object(), created_by=current_identity())
        return jsonify(snapshot.to_dict()), 200

    @router.route('GET', '/api/snapshots/stats')
    def snapshot_stats():
        return jsonify(snapshot_service.stats()), 200

    @router.route('GET', '/api/snapshots/{snapshot_id}')
    def get_snapshot(snapshot_id):
        return jsonify(snapshot_service.get_snapshot(parse_id(snapshot_id, 'Snapshot')).to_dict()), 200

    @router.route('DELETE', '/api/snapshots/{snapshot_id}')
    def delete_snapshot(snapshot_id):
        snapshot_service.delete(parse_id(snapshot_id, 'Snapshot'))
        return jsonify({'success': True}), 200

    @router.route('POST', '/api/snapshots/{snapshot_id}/restore')
    def restore_snapshot(snapshot_id):
        result = snapshot_service.restore(
            parse_id(snapshot_id, 'Snapshot'),
            json_object(),
            restored_by=current_identity(),
        )
        return jsonify(result), 200
