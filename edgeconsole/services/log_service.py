from __future__ import annotations

import json
import logging
import random
from typing import Any, Mapping

from edgeconsole.services import demo_data
from edgeconsole.services.base import ValidationError
from edgeconsole.utils.timestamps import utc_now_iso
from edgeconsole.utils.validators import HTTP_TEST_METHODS, validate_choice

logger = logging.getLogger(__name__)


class LogService:
    """Container log access and the simulated HTTP test client."""

    def get_logs(self, name: str) -> dict[str, Any]:
        return {'logs': demo_data.container_logs(name), 'hasMore': False}

    def clear_logs(self, name: str) -> None:
        logger.info('Clearing logs for container: %s', name)

    def download_logs(self, name: str) -> str:
        return demo_data.logs_text(name)

    def http_test(self, name: str, request: Mapping[str, Any]) -> dict[str, Any]:
        """Answer a test request with a canned response; nothing leaves the process."""
        if not isinstance(request, Mapping):
            raise ValidationError('Request body must be a JSON object')
        method = str(request.get('method') or 'GET').upper()
        ok, error = validate_choice(method, HTTP_TEST_METHODS, 'method')
        if not ok:
            raise ValidationError(error)
        path = request.get('path')
        if not isinstance(path, str) or not path.startswith('/'):
            raise ValidationError('path must start with /')

        logger.info('HTTP test for %s: %s %s', name, method, path)

        status = 200
        is_json = path == '/health' or path.startswith('/api/')
        if path == '/health':
            body = json.dumps({'status': 'healthy', 'uptime': 86400}, indent=2)
        elif path.startswith('/api/'):
            body = json.dumps({
                'success': True,
                'data': {'message': f'{method} request to {path} processed'},
                'timestamp': utc_now_iso(),
            }, indent=2)
        elif path == '/404':
            status = 404
            is_json = True
            body = json.dumps({'error': 'Not found'}, indent=2)
        else:
            body = f'Hello from {name}!\nPath: {path}\nMethod: {method}'

        duration = random.randint(100, 499)
        return {
            'status': status,
            'statusText': 'OK' if status == 200 else 'Not Found',
            'headers': {
                'Content-Type': 'application/json' if is_json else 'text/plain',
                'X-Container': name,
                'X-Response-Time': f'{duration}ms',
            },
            'body': body,
            'duration': duration,
            'size': len(body),
        }
