from __future__ import annotations

from flask import jsonify

from edgeconsole.routes.common import json_body


def register_config_routes(router, *, config_service):
    """Register container configuration routes."""

    @router.route('GET', '/api/containers/{name}/config')
    def get_config(name):
        return jsonify({'config': config_service.get_config(name)}), 200

    @router.route('PUT', '/api/containers/{name}/config')
    def update_config(name):
        config = config_service.update_config(name, json_body())
        return jsonify({'success': True, 'config': config}), 200

    @router.route('POST', '/api/containers/{name}/config/validate')
    def validate_config(name):
        return jsonify(config_service.validate(json_body())), 200

    @router.route('POST', '/api/containers/{name}/config/diff')
    def diff_config(name):
        return jsonify({'changes': config_service.diff(name, json_body())}), 200
