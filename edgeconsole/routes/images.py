from __future__ import annotations

from flask import jsonify

from edgeconsole.routes.common import current_identity, json_object


def register_image_routes(router, *, image_service):
    """Register image, build and rollout routes."""

    @router.route('GET', '/api/containers/{name}/image')
    def image_info(name):
        return jsonify(image_service.image_info(name)), 200

    @router.route('GET', '/api/containers/{name}/rollouts')
    def rollouts(name):
        return jsonify(image_service.rollouts(name)), 200

    @router.route('GET', '/api/containers/{name}/builds')
    def builds(name):
        return jsonify(image_service.builds(name)), 200

    @router.route('POST', '/api/containers/{name}/rebuild')
    def rebuild(name):
        build = image_service.rebuild(name, json_object(), triggered_by=current_identity() or 'manual')
        return jsonify(build), 200

    @router.route('POST', '/api/containers/{name}/rollback')
    def rollback(name):
        return jsonify(image_service.rollback(name, json_object())), 200
