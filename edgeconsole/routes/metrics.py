from __future__ import annotations

from flask import jsonify, request


def register_container_metrics_routes(router, *, metrics_service):
    @router.route('GET', '/api/containers/{name}/metrics')
    def container_metrics(name):
        return jsonify(metrics_service.container_metrics(name, request.args.get('range'))), 200


def register_dashboard_routes(router, *, metrics_service):
    @router.route('GET', '/api/metrics/dashboard')
    def dashboard_metrics():
        return jsonify(metrics_service.dashboard(request.args.get('range'))), 200
