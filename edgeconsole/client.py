"""Python client for the edgeconsole HTTP API.

Reads are cached in a :class:`~edgeconsole.cache.TTLCache` keyed by endpoint
and parameters; every mutation drops the cache prefixes it can affect.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional
from urllib.parse import quote, urlencode

import requests

from edgeconsole.cache import DEFAULT_TTL, METRICS_TTL, TTLCache, cache_keys

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, message: str, status: int, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload


def _segment(value: Any) -> str:
    return quote(str(value), safe='')


def _params_key(base: str, params: Optional[Mapping[str, Any]]) -> str:
    cleaned = {k: v for k, v in (params or {}).items() if v is not None}
    return f'{base}?{urlencode(sorted(cleaned.items()))}' if cleaned else base


class ConsoleClient:
    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        cache: Optional[TTLCache] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.cache = cache if cache is not None else TTLCache()
        self.timeout = timeout

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        raw: bool = False,
    ) -> Any:
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        response = self.session.request(
            method,
            f'{self.base_url}{path}',
            params=params or None,
            json=json,
            timeout=self.timeout,
        )
        if not 200 <= response.status_code < 300:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            message = None
            if isinstance(payload, dict):
                message = payload.get('message') or payload.get('error')
            raise ApiError(message or f'Request failed with status {response.status_code}', response.status_code, payload)
        if raw:
            return response.text
        return response.json()

    def _cached_get(
        self,
        key: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        ttl: float = DEFAULT_TTL,
        skip_cache: bool = False,
    ) -> Any:
        if not skip_cache:
            cached = self.cache.get(key, ttl)
            if cached is not None:
                return cached
        data = self._request('GET', path, params=params)
        self.cache.set(key, data)
        return data

    def _invalidate(self, *prefixes: str) -> None:
        for prefix in prefixes:
            self.cache.invalidate(prefix)

    # Health and migrations

    def health(self) -> dict:
        return self._request('GET', '/api/health')

    def migration_status(self) -> dict:
        return self._request('GET', '/api/migrations/status')

    # Containers

    def list_containers(self, skip_cache: bool = False) -> dict:
        return self._cached_get(cache_keys.containers(), '/api/containers', skip_cache=skip_cache)

    def get_container(self, name: str, skip_cache: bool = False) -> dict:
        return self._cached_get(cache_keys.container(name), f'/api/containers/{_segment(name)}', skip_cache=skip_cache)

    def register_container(self, payload: Mapping[str, Any]) -> dict:
        data = self._request('POST', '/api/containers/register', json=dict(payload))
        self._invalidate(cache_keys.containers(), cache_keys.container(payload.get('name', '')))
        return data

    def delete_container(self, name: str) -> dict:
        data = self._request('DELETE', f'/api/containers/{_segment(name)}')
        self._invalidate(cache_keys.containers(), cache_keys.container(name), cache_keys.instances(name))
        return data

    def list_instances(self, name: str, skip_cache: bool = False) -> dict:
        return self._cached_get(
            cache_keys.instances(name), f'/api/containers/{_segment(name)}/instances', skip_cache=skip_cache
        )

    def restart_container(self, name: str) -> dict:
        return self._container_action(name, 'restart')

    def stop_container(self, name: str) -> dict:
        return self._container_action(name, 'stop')

    def _container_action(self, name: str, action: str) -> dict:
        data = self._request('POST', f'/api/containers/{_segment(name)}/{action}')
        self._invalidate(
            cache_keys.containers(), cache_keys.container(name), cache_keys.instances(name), cache_keys.jobs()
        )
        return data

    def stop_instance(self, name: str, instance_id: str) -> dict:
        data = self._request('DELETE', f'/api/containers/{_segment(name)}/instances/{_segment(instance_id)}')
        self._invalidate(cache_keys.instances(name), cache_keys.jobs())
        return data

    def set_color(self, name: str, color: Optional[str]) -> dict:
        data = self._request('PUT', f'/api/containers/{_segment(name)}/color', json={'color': color})
        self._invalidate(cache_keys.containers(), cache_keys.container(name))
        return data

    # Configuration

    def get_config(self, name: str, skip_cache: bool = False) -> dict:
        return self._cached_get(cache_keys.config(name), f'/api/containers/{_segment(name)}/config', skip_cache=skip_cache)

    def update_config(self, name: str, updates: Mapping[str, Any]) -> dict:
        data = self._request('PUT', f'/api/containers/{_segment(name)}/config', json=dict(updates))
        self._invalidate(cache_keys.config(name), cache_keys.containers(), cache_keys.container(name), cache_keys.jobs())
        return data

    def validate_config(self, name: str, updates: Mapping[str, Any]) -> dict:
        return self._request('POST', f'/api/containers/{_segment(name)}/config/validate', json=dict(updates))

    def diff_config(self, name: str, proposed: Mapping[str, Any]) -> dict:
        return self._request('POST', f'/api/containers/{_segment(name)}/config/diff', json=dict(proposed))

    # Logs and HTTP test

    def get_logs(self, name: str, skip_cache: bool = False) -> dict:
        return self._cached_get(cache_keys.logs(name), f'/api/containers/{_segment(name)}/logs', skip_cache=skip_cache)

    def clear_logs(self, name: str) -> dict:
        data = self._request('DELETE', f'/api/containers/{_segment(name)}/logs')
        self._invalidate(cache_keys.logs(name))
        return data

    def download_logs(self, name: str) -> str:
        return self._request('GET', f'/api/containers/{_segment(name)}/logs/download', raw=True)

    def http_test(self, name: str, request: Mapping[str, Any]) -> dict:
        return self._request('POST', f'/api/containers/{_segment(name)}/http-test', json=dict(request))

    # Topology

    def get_topology(self, skip_cache: bool = False) -> dict:
        return self._cached_get(cache_keys.topology(), '/api/topology', skip_cache=skip_cache)

    def detect_orphans(self) -> dict:
        return self._request('GET', '/api/topology/orphans')

    def save_positions(self, positions: Mapping[str, Mapping[str, float]]) -> dict:
        data = self._request('PUT', '/api/topology/positions', json={k: dict(v) for k, v in positions.items()})
        self._invalidate(cache_keys.topology())
        return data

    # Metrics

    def container_metrics(self, name: str, range_: str = '1h', skip_cache: bool = False) -> dict:
        return self._cached_get(
            cache_keys.metrics(name, range_),
            f'/api/containers/{_segment(name)}/metrics',
            params={'range': range_},
            ttl=METRICS_TTL,
            skip_cache=skip_cache,
        )

    def dashboard_metrics(self, range_: str = '1h', skip_cache: bool = False) -> dict:
        return self._cached_get(
            cache_keys.dashboard_metrics(range_),
            '/api/metrics/dashboard',
            params={'range': range_},
            ttl=METRICS_TTL,
            skip_cache=skip_cache,
        )

    # Jobs

    def list_jobs(
        self,
        *,
        status: Optional[str] = None,
        container: Optional[str] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        skip_cache: bool = False,
    ) -> dict:
        params = {'status': status, 'container': container, 'page': page, 'pageSize': page_size}
        return self._cached_get(
            _params_key(cache_keys.jobs(), params), '/api/jobs', params=params, skip_cache=skip_cache
        )

    def job_stats(self, skip_cache: bool = False) -> dict:
        return self._cached_get(f'{cache_keys.jobs()}:stats', '/api/jobs/stats', skip_cache=skip_cache)

    def get_job(self, job_id: int) -> dict:
        return self._request('GET', f'/api/jobs/{_segment(job_id)}')

    def cancel_job(self, job_id: int) -> dict:
        data = self._request('POST', f'/api/jobs/{_segment(job_id)}/cancel')
        self._invalidate(cache_keys.jobs())
        return data

    def retry_job(self, job_id: int) -> dict:
        data = self._request('POST', f'/api/jobs/{_segment(job_id)}/retry')
        self._invalidate(cache_keys.jobs())
        return data

    # Webhooks

    def list_webhooks(self, skip_cache: bool = False) -> dict:
        return self._cached_get(cache_keys.webhooks(), '/api/webhooks', skip_cache=skip_cache)

    def create_webhook(self, payload: Mapping[str, Any]) -> dict:
        data = self._request('POST', '/api/webhooks', json=dict(payload))
        self._invalidate(cache_keys.webhooks())
        return data

    def update_webhook(self, webhook_id: int, payload: Mapping[str, Any]) -> dict:
        data = self._request('PUT', f'/api/webhooks/{_segment(webhook_id)}', json=dict(payload))
        self._invalidate(cache_keys.webhooks())
        return data

    def delete_webhook(self, webhook_id: int) -> dict:
        data = self._request('DELETE', f'/api/webhooks/{_segment(webhook_id)}')
        self._invalidate(cache_keys.webhooks())
        return data

    def webhook_deliveries(self, webhook_id: int, skip_cache: bool = False) -> dict:
        return self._cached_get(
            f'{cache_keys.webhooks()}:deliveries:{webhook_id}',
            f'/api/webhooks/{_segment(webhook_id)}/deliveries',
            skip_cache=skip_cache,
        )

    def test_webhook(self, webhook_id: int) -> dict:
        data = self._request('POST', f'/api/webhooks/{_segment(webhook_id)}/test')
        self._invalidate(cache_keys.webhooks())
        return data

    # Snapshots

    def list_snapshots(self, container: Optional[str] = None, skip_cache: bool = False) -> dict:
        return self._cached_get(
            cache_keys.snapshots(container or ''),
            '/api/snapshots',
            params={'container': container},
            skip_cache=skip_cache,
        )

    def snapshot_stats(self, skip_cache: bool = False) -> dict:
        return self._cached_get('snapshot-stats', '/api/snapshots/stats', skip_cache=skip_cache)

    def get_snapshot(self, snapshot_id: int) -> dict:
        return self._request('GET', f'/api/snapshots/{_segment(snapshot_id)}')

    def create_snapshot(self, container_name: str, name: str, description: Optional[str] = None) -> dict:
        payload = {'containerName': container_name, 'name': name}
        if description is not None:
            payload['description'] = description
        data = self._request('POST', '/api/snapshots', json=payload)
        self._invalidate(cache_keys.snapshots(), 'snapshot-stats')
        return data

    def delete_snapshot(self, snapshot_id: int) -> dict:
        data = self._request('DELETE', f'/api/snapshots/{_segment(snapshot_id)}')
        self._invalidate(cache_keys.snapshots(), 'snapshot-stats')
        return data

    def restore_snapshot(self, snapshot_id: int, **options: bool) -> dict:
        data = self._request('POST', f'/api/snapshots/{_segment(snapshot_id)}/restore', json=options)
        self._invalidate(cache_keys.snapshots(), 'snapshot-stats', cache_keys.jobs())
        return data

    # Schedules

    def list_schedules(self, container: Optional[str] = None, skip_cache: bool = False) -> dict:
        return self._cached_get(
            _params_key(cache_keys.schedules(), {'container': container}),
            '/api/schedules',
            params={'container': container},
            skip_cache=skip_cache,
        )

    def get_schedule(self, schedule_id: int) -> dict:
        return self._request('GET', f'/api/schedules/{_segment(schedule_id)}')

    def create_schedule(self, payload: Mapping[str, Any]) -> dict:
        data = self._request('POST', '/api/schedules', json=dict(payload))
        self._invalidate(cache_keys.schedules())
        return data

    def update_schedule(self, schedule_id: int, payload: Mapping[str, Any]) -> dict:
        data = self._request('PUT', f'/api/schedules/{_segment(schedule_id)}', json=dict(payload))
        self._invalidate(cache_keys.schedules())
        return data

    def delete_schedule(self, schedule_id: int) -> dict:
        data = self._request('DELETE', f'/api/schedules/{_segment(schedule_id)}')
        self._invalidate(cache_keys.schedules())
        return data

    def schedule_history(self, schedule_id: int, skip_cache: bool = False) -> dict:
        return self._cached_get(
            f'{cache_keys.schedules()}:history:{schedule_id}',
            f'/api/schedules/{_segment(schedule_id)}/history',
            skip_cache=skip_cache,
        )

    def trigger_schedule(self, schedule_id: int) -> dict:
        data = self._request('POST', f'/api/schedules/{_segment(schedule_id)}/trigger')
        self._invalidate(cache_keys.schedules(), cache_keys.jobs())
        return data

    # Images

    def image_info(self, name: str, skip_cache: bool = False) -> dict:
        return self._cached_get(f'image:{name}', f'/api/containers/{_segment(name)}/image', skip_cache=skip_cache)

    def rollouts(self, name: str, skip_cache: bool = False) -> dict:
        return self._cached_get(f'rollouts:{name}', f'/api/containers/{_segment(name)}/rollouts', skip_cache=skip_cache)

    def builds(self, name: str, skip_cache: bool = False) -> dict:
        return self._cached_get(f'builds:{name}', f'/api/containers/{_segment(name)}/builds', skip_cache=skip_cache)

    def rebuild(self, name: str, payload: Optional[Mapping[str, Any]] = None) -> dict:
        data = self._request('POST', f'/api/containers/{_segment(name)}/rebuild', json=dict(payload or {}))
        self._invalidate(f'builds:{name}', f'image:{name}', cache_keys.jobs())
        return data

    def rollback(self, name: str, target_digest: str, target_tag: Optional[str] = None, reason: Optional[str] = None) -> dict:
        payload = {'targetDigest': target_digest, 'targetTag': target_tag, 'reason': reason}
        data = self._request('POST', f'/api/containers/{_segment(name)}/rollback', json=payload)
        self._invalidate(f'rollouts:{name}', f'image:{name}', cache_keys.jobs())
        return data
