from __future__ import annotations

from flask import Response, jsonify

from edgeconsole.routes.common import json_object


def register_log_routes(router, *, log_service):
    """Register container log and HTTP test routes."""

    @router.route('GET', '/api/containers/{name}/logs')
    def get_logs(name):
        return jsonify(log_service.get_logs(name)), 200

    @router.route('DELETE', '/api/containers/{name}/logs')
    def clear_logs(name):
        log_service.clear_logs(name)
        return jsonify({'success': True}), 200

    @router.route('GET', '/api/containers/{name}/logs/download')
    def download_logs(name):
        return Response(
            log_service.download_logs(name),
            mimetype='text/plain',
            headers={'Content-Disposition': f'attachment; filename="{name}-logs.txt"'},
        )

    @router.route('POST', '/api/containers/{name}/http-test')
    def http_test(name):
        return jsonify(log_service.http_test(name, json_object())), 200
