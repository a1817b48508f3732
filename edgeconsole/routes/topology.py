from __future__ import annotations

from flask import jsonify

from edgeconsole.routes.common import json_body


def register_topology_routes(router, *, topology_service):
    """Register dependency graph routes."""

    @router.route('GET', '/api/topology')
    def get_topology():
        return jsonify(topology_service.get_topology()), 200

    @router.route('GET', '/api/topology/orphans')
    def detect_orphans():
        return jsonify(topology_service.detect_orphans()), 200

    @router.route('PUT', '/api/topology/positions')
    def save_positions():
        saved = topology_service.save_positions(json_body())
        return jsonify({'success': True, 'saved': saved}), 200
