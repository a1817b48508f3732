"""Static and generated demo payloads.

The platform exposes no API for configuration, logs, metrics, topology or
images, so these resources are served from fixed records shaped like the
console expects.
"""
from __future__ import annotations

import random
from datetime import timedelta
from typing import Any

from edgeconsole.models import TopologyEdge, TopologyNode
from edgeconsole.utils.timestamps import to_iso, utc_now


def _class_name(name: str) -> str:
    return ''.join(part[:1].upper() + part[1:] for part in name.split('-'))


def container_config(name: str) -> dict[str, Any]:
    return {
        'name': name,
        'className': _class_name(name),
        'image': f'docker.io/myorg/{name}:latest',
        'instanceType': 'standard-1',
        'maxInstances': 5,
        'envVars': [
            {'key': 'NODE_ENV', 'value': 'production', 'isSecret': False, 'source': 'config'},
            {'key': 'API_KEY', 'value': '***', 'isSecret': True, 'source': 'config'},
            {'key': 'DATABASE_URL', 'value': 'postgresql://...', 'isSecret': True, 'source': 'binding'},
        ],
        'ports': [{'containerPort': 8080, 'protocol': 'tcp', 'isDefault': True}],
        'network': {
            'allowEgress': True,
            'egressRules': [],
            'allowedHosts': ['api.cloudflare.com', '*.amazonaws.com'],
        },
        'healthCheck': {
            'enabled': True,
            'endpoint': '/health',
            'intervalSeconds': 30,
            'timeoutSeconds': 5,
            'failureThreshold': 3,
            'successThreshold': 1,
        },
        'sleep': {
            'enabled': True,
            'sleepAfter': '5m',
            'wakeOnRequest': True,
        },
        'updatedAt': to_iso(utc_now()),
    }


_DURATION_SECONDS = {'s': 1, 'm': 60, 'h': 3600}


def snapshot_config(config: dict[str, Any]) -> dict[str, Any]:
    """Project a container configuration onto the snapshot shape."""
    sleep_after = (config.get('sleep') or {}).get('sleepAfter')
    sleep_seconds = None
    if isinstance(sleep_after, str) and sleep_after[:-1].isdigit() and sleep_after[-1:] in _DURATION_SECONDS:
        sleep_seconds = int(sleep_after[:-1]) * _DURATION_SECONDS[sleep_after[-1]]
    default_port = next(
        (port['containerPort'] for port in config.get('ports', []) if port.get('isDefault')),
        None,
    )
    health = config.get('healthCheck') or {}
    network = config.get('network') or {}
    return {
        'instanceType': config.get('instanceType'),
        'maxInstances': config.get('maxInstances'),
        'sleepAfter': sleep_seconds,
        'defaultPort': default_port,
        'envVars': {var['key']: var['value'] for var in config.get('envVars', [])},
        'networkRules': {
            'allowedHosts': list(network.get('allowedHosts', [])),
            'blockedHosts': list(network.get('blockedHosts', [])),
        },
        'healthCheck': {
            'path': health.get('endpoint'),
            'interval': health.get('intervalSeconds'),
            'timeout': health.get('timeoutSeconds'),
        },
    }


_LOG_LINES = [
    ('info', 'Container {name} started successfully', 'system', 'inst-abc123'),
    ('info', 'Listening on port 8080', 'stdout', 'inst-abc123'),
    ('debug', 'Health check endpoint registered at /health', 'stdout', 'inst-abc123'),
    ('info', 'Database connection established', 'stdout', 'inst-abc123'),
    ('warn', 'Cache miss for key: user_session_123', 'stderr', 'inst-abc123'),
    ('info', 'Processing incoming request: GET /api/users', 'stdout', 'inst-abc123'),
    ('debug', 'Query execution time: 12ms', 'stdout', 'inst-abc123'),
    ('info', 'Response sent: 200 OK (156 bytes)', 'stdout', 'inst-abc123'),
    ('error', 'Failed to connect to external API: timeout after 30s', 'stderr', 'inst-def456'),
    ('warn', 'Retrying external API connection (attempt 2/3)', 'stderr', 'inst-def456'),
    ('info', 'External API connection restored', 'stdout', 'inst-def456'),
    ('info', 'Health check passed', 'system', 'inst-abc123'),
]


def container_logs(name: str) -> list[dict[str, Any]]:
    now = utc_now()
    count = len(_LOG_LINES)
    return [
        {
            'id': str(index + 1),
            'timestamp': to_iso(now - timedelta(seconds=5 * (count - index))),
            'level': level,
            'message': message.format(name=name),
            'source': source,
            'instanceId': instance_id,
        }
        for index, (level, message, source, instance_id) in enumerate(_LOG_LINES)
    ]


def logs_text(name: str) -> str:
    return '\n'.join([
        f'[2024-12-24 12:00:00] [INFO] Container {name} started',
        '[2024-12-24 12:00:01] [INFO] Listening on port 8080',
        '[2024-12-24 12:00:02] [DEBUG] Health check registered',
        '[2024-12-24 12:00:05] [INFO] Database connected',
        '[2024-12-24 12:01:00] [WARN] Cache miss',
        '[2024-12-24 12:01:15] [ERROR] External API timeout',
        '[2024-12-24 12:01:30] [INFO] Connection restored',
    ])


TOPOLOGY_NODES = [
    TopologyNode('api-gateway', 'api-gateway', 'ApiGateway', 'running', 3, 'container'),
    TopologyNode('user-service', 'user-service', 'UserService', 'running', 2, 'container'),
    TopologyNode('auth-service', 'auth-service', 'AuthService', 'running', 2, 'container'),
    TopologyNode('database', 'database', 'PostgresDB', 'running', 1, 'database'),
    TopologyNode('cache', 'cache', 'RedisCache', 'running', 1, 'service'),
    TopologyNode('storage', 'storage', 'ObjectStorage', 'running', 1, 'storage'),
    TopologyNode('worker', 'worker', 'BackgroundWorker', 'sleeping', 0, 'container'),
]

TOPOLOGY_EDGES = [
    TopologyEdge('e1', 'api-gateway', 'user-service', 'service', 'users'),
    TopologyEdge('e2', 'api-gateway', 'auth-service', 'service', 'auth'),
    TopologyEdge('e3', 'user-service', 'database', 'd1', 'USERS_DB'),
    TopologyEdge('e4', 'auth-service', 'database', 'd1', 'AUTH_DB'),
    TopologyEdge('e5', 'user-service', 'cache', 'kv', 'USER_CACHE'),
    TopologyEdge('e6', 'auth-service', 'cache', 'kv', 'SESSION_CACHE'),
    TopologyEdge('e7', 'user-service', 'storage', 'r2', 'AVATARS'),
    TopologyEdge('e8', 'api-gateway', 'worker', 'queue', 'TASKS', animated=True),
]

# (points, step) per metrics range
METRICS_WINDOWS = {
    '1h': (60, timedelta(minutes=1)),
    '6h': (72, timedelta(minutes=5)),
    '24h': (96, timedelta(minutes=15)),
    '7d': (168, timedelta(hours=1)),
    '30d': (120, timedelta(hours=6)),
}


def _series(rng: random.Random, range_: str, base: float, spread: float) -> list[dict[str, Any]]:
    points, step = METRICS_WINDOWS[range_]
    end = utc_now()
    return [
        {
            'timestamp': to_iso(end - step * (points - 1 - index)),
            'value': round(max(0.0, base + rng.uniform(-spread, spread)), 2),
        }
        for index in range(points)
    ]


def container_metrics(name: str, range_: str) -> dict[str, Any]:
    rng = random.Random(f'{name}:{range_}')
    cpu = round(rng.uniform(5, 60), 2)
    memory_limit = 512 * 1024 * 1024
    memory_used = int(memory_limit * rng.uniform(0.2, 0.8))
    return {
        'container': name,
        'range': range_,
        'series': {
            'cpu': _series(rng, range_, cpu, 10),
            'memory': _series(rng, range_, memory_used / memory_limit * 100, 5),
            'requests': _series(rng, range_, rng.uniform(50, 500), 40),
            'errors': _series(rng, range_, rng.uniform(0, 5), 2),
        },
        'current': {
            'containerName': name,
            'timestamp': to_iso(utc_now()),
            'cpu': {'usage': cpu, 'limit': 100},
            'memory': {
                'used': memory_used,
                'limit': memory_limit,
                'percentage': round(memory_used / memory_limit * 100, 2),
            },
            'network': {
                'bytesIn': rng.randint(10_000, 10_000_000),
                'bytesOut': rng.randint(10_000, 10_000_000),
                'requestsPerSecond': round(rng.uniform(1, 50), 2),
            },
            'instances': {'total': 2, 'running': 2, 'sleeping': 0, 'errored': 0},
        },
    }


def dashboard_metrics(container_names: list[str], range_: str) -> dict[str, Any]:
    rng = random.Random(f'dashboard:{range_}')
    names = container_names or [node.name for node in TOPOLOGY_NODES if node.type == 'container']
    per_container = {
        name: {
            'cpu': round(rng.uniform(5, 60), 2),
            'memory': round(rng.uniform(20, 80), 2),
            'requests': round(rng.uniform(50, 500), 2),
        }
        for name in names
    }

    def top(metric: str) -> list[dict[str, Any]]:
        ranked = sorted(per_container.items(), key=lambda item: item[1][metric], reverse=True)
        return [{'name': name, 'value': values[metric]} for name, values in ranked[:5]]

    count = len(per_container)
    return {
        'aggregated': {
            'totalContainers': len(container_names),
            'runningInstances': sum(rng.randint(0, 3) for _ in names),
            'cpuUsage': round(sum(v['cpu'] for v in per_container.values()) / count, 2),
            'memoryUsage': round(sum(v['memory'] for v in per_container.values()) / count, 2),
            'requestsPerMinute': round(sum(v['requests'] for v in per_container.values()), 2),
            'errorsPerMinute': round(rng.uniform(0, 10), 2),
        },
        'topContainers': {
            'byCpu': top('cpu'),
            'byMemory': top('memory'),
            'byRequests': top('requests'),
        },
        'timeline': {
            'cpu': _series(rng, range_, 30, 10),
            'memory': _series(rng, range_, 50, 5),
            'requests': _series(rng, range_, 300, 50),
        },
    }


def image_info(name: str) -> dict[str, Any]:
    now = utc_now()
    return {
        'current': {
            'containerName': name,
            'digest': 'sha256:3f4a1c9e8b7d6a5f4e3d2c1b0a9f8e7d6c5b4a3f2e1d0c9b8a7f6e5d4c3b2a1f',
            'tag': 'latest',
            'registry': 'docker.io',
            'repository': f'myorg/{name}',
            'size': 187_654_321,
            'createdAt': to_iso(now - timedelta(days=2)),
            'builtAt': to_iso(now - timedelta(days=2)),
        },
        'previousVersions': [
            {
                'digest': 'sha256:9e8d7c6b5a4f3e2d1c0b9a8f7e6d5c4b3a2f1e0d9c8b7a6f5e4d3c2b1a0f9e8d',
                'tag': 'v1.2.0',
                'builtAt': to_iso(now - timedelta(days=9)),
            },
            {
                'digest': 'sha256:1a2b3c4d5e6f7a8b9c0d1e2f3a4b5c6d7e8f9a0b1c2d3e4f5a6b7c8d9e0f1a2b',
                'tag': 'v1.1.0',
                'builtAt': to_iso(now - timedelta(days=30)),
            },
        ],
    }


def rollouts(name: str) -> list[dict[str, Any]]:
    now = utc_now()
    return [
        {
            'id': f'rollout-{name}-2',
            'containerName': name,
            'fromDigest': 'sha256:9e8d7c6b5a4f',
            'toDigest': 'sha256:3f4a1c9e8b7d',
            'toTag': 'latest',
            'status': 'complete',
            'startedAt': to_iso(now - timedelta(days=2)),
            'completedAt': to_iso(now - timedelta(days=2) + timedelta(seconds=95)),
            'duration': 95_000,
            'instancesUpdated': 2,
            'instancesTotal': 2,
            'triggeredBy': 'admin@example.com',
        },
        {
            'id': f'rollout-{name}-1',
            'containerName': name,
            'fromDigest': 'sha256:1a2b3c4d5e6f',
            'toDigest': 'sha256:9e8d7c6b5a4f',
            'toTag': 'v1.2.0',
            'status': 'complete',
            'startedAt': to_iso(now - timedelta(days=9)),
            'completedAt': to_iso(now - timedelta(days=9) + timedelta(seconds=120)),
            'duration': 120_000,
            'instancesUpdated': 2,
            'instancesTotal': 2,
            'triggeredBy': 'admin@example.com',
        },
    ]


def builds(name: str) -> list[dict[str, Any]]:
    now = utc_now()
    return [
        {
            'id': f'build-{name}-2',
            'containerName': name,
            'status': 'complete',
            'digest': 'sha256:3f4a1c9e8b7d',
            'tag': 'latest',
            'startedAt': to_iso(now - timedelta(days=2, minutes=5)),
            'completedAt': to_iso(now - timedelta(days=2)),
            'duration': 300_000,
            'triggeredBy': 'admin@example.com',
        },
        {
            'id': f'build-{name}-1',
            'containerName': name,
            'status': 'failed',
            'tag': 'v1.2.1',
            'startedAt': to_iso(now - timedelta(days=5)),
            'completedAt': to_iso(now - timedelta(days=5) + timedelta(seconds=42)),
            'duration': 42_000,
            'error': 'Dockerfile step 7/12 failed: npm ci exited with code 1',
            'triggeredBy': 'admin@example.com',
        },
    ]
