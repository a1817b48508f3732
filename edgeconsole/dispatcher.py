"""Ordered (method, path) routing for the JSON API.

Flask sees the whole ``/api`` surface as a single catch-all view. Matching
happens here instead, against the raw request path, so that a percent-encoded
slash inside a path segment stays inside that segment. Routes are tried in
registration order and the first one whose method and pattern both match
wins; there is no fallback to later routes.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import quote, unquote, urlsplit

from flask import Blueprint, g, jsonify, request
from flask_login import current_user

from edgeconsole.services.base import ServiceError

logger = logging.getLogger(__name__)

API_METHODS = ['GET', 'HEAD', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET, POST, PUT, DELETE, OPTIONS',
    'Access-Control-Allow-Headers': 'Content-Type, Authorization',
}

_PARAM = re.compile(r'\{(\w+)\}')


@dataclass
class Route:
    method: str
    template: str
    pattern: re.Pattern
    params: tuple[str, ...]
    handler: Callable
    public: bool = False


def compile_template(template: str) -> tuple[re.Pattern, tuple[str, ...]]:
    """Turn ``/api/jobs/{id}`` into an anchored regex with one group per parameter."""
    params = tuple(_PARAM.findall(template))
    pieces = _PARAM.split(template)
    regex = ''.join(
        re.escape(piece) if index % 2 == 0 else '([^/]+)'
        for index, piece in enumerate(pieces)
    )
    return re.compile(f'^{regex}$'), params


class Router:
    """Route table walked in registration order."""

    def __init__(self):
        self._routes: list[Route] = []

    def add(self, method: str, template: str, handler: Callable, *, public: bool = False) -> None:
        pattern, params = compile_template(template)
        self._routes.append(Route(method.upper(), template, pattern, params, handler, public))

    def route(self, method: str, template: str, *, public: bool = False):
        def decorator(handler):
            self.add(method, template, handler, public=public)
            return handler
        return decorator

    def match(self, method: str, path: str) -> Optional[tuple[Route, dict[str, str]]]:
        method = method.upper()
        for route in self._routes:
            if route.method != method:
                continue
            found = route.pattern.match(path)
            if found:
                return route, {name: unquote(value) for name, value in zip(route.params, found.groups())}
        return None

    @property
    def routes(self) -> list[Route]:
        return list(self._routes)


def raw_request_path() -> str:
    """Path as sent by the client, before percent-decoding."""
    raw = request.environ.get('RAW_URI') or request.environ.get('REQUEST_URI')
    if raw:
        path = urlsplit(raw).path
        if path:
            return path
    return quote(request.path, safe='/')


def unauthorized(reason: str):
    return jsonify({'error': 'Unauthorized', 'message': reason}), 401


def create_api_blueprint(*, router: Router):
    """Create the catch-all API view that hands requests to ``router``."""
    blueprint = Blueprint('api', __name__)

    @blueprint.route('/api', defaults={'subpath': ''}, methods=API_METHODS, strict_slashes=False)
    @blueprint.route('/api/<path:subpath>', methods=API_METHODS)
    def dispatch(subpath):
        if request.method == 'OPTIONS':
            return '', 204

        path = raw_request_path()
        matched = router.match(request.method, path)
        public = matched is not None and matched[0].public
        if not public and not current_user.is_authenticated:
            reason = g.get('access_denied_reason') or 'no token'
            logger.info('Denied %s %s: %s', request.method, path, reason)
            return unauthorized(reason)

        if matched is None:
            return jsonify({'error': 'Not found', 'path': path}), 404
        route, params = matched

        try:
            return route.handler(**params)
        except ServiceError as exc:
            return jsonify(exc.to_dict()), exc.status
        except Exception as exc:
            logger.exception('Unhandled error for %s %s', request.method, path)
            return jsonify({'error': 'Internal server error', 'message': str(exc)}), 500

    @blueprint.after_request
    def add_cors_headers(response):
        for name, value in CORS_HEADERS.items():
            response.headers[name] = value
        return response

    # Methods outside API_METHODS never reach dispatch.
    @blueprint.app_errorhandler(404)
    @blueprint.app_errorhandler(405)
    def not_found(error):
        response = jsonify({'error': 'Not found', 'path': request.path})
        response.status_code = 404
        response.headers.update(CORS_HEADERS)
        return response

    @blueprint.app_errorhandler(429)
    def rate_limited(error):
        response = jsonify({'error': 'Too many requests', 'message': str(error.description)})
        response.status_code = 429
        response.headers.update(CORS_HEADERS)
        return response

    return blueprint
