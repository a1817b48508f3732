from __future__ import annotations

import sqlite3

import pytest

from edgeconsole.services import ConflictError, ContainerService, JobService, NotFoundError, ValidationError
from edgeconsole.services.base import parse_id
from edgeconsole.services.container_runtime import NullContainerRuntime
from edgeconsole.services.webhook_service import WebhookService


class DummyContainerRepo:
    def __init__(self, existing=None):
        self.calls = []
        self.existing = set(existing or [])

    def create(self, **kwargs):
        self.calls.append(('create', kwargs))
        if kwargs['name'] in self.existing:
            raise sqlite3.IntegrityError('UNIQUE constraint failed: containers.name')
        self.existing.add(kwargs['name'])
        return len(self.existing)

    def get_by_name(self, name):
        self.calls.append(('get_by_name', name))
        if name not in self.existing:
            return None
        return {
            'id': 1, 'name': name, 'class_name': 'Svc', 'image': None, 'worker_name': None,
            'instance_type': 'standard-1', 'max_instances': 5, 'default_port': None,
            'sleep_after': None, 'status': 'stopped', 'color': None,
            'created_at': '2026-01-01T00:00:00.000Z', 'updated_at': '2026-01-01T00:00:00.000Z',
        }

    def delete(self, name):
        self.calls.append(('delete', name))
        if name in self.existing:
            self.existing.discard(name)
            return 1
        return 0


class DummyColorRepo:
    def __init__(self):
        self.calls = []

    def upsert(self, name, color):
        self.calls.append(('upsert', name, color))

    def delete(self, name):
        self.calls.append(('delete', name))


class DummyJobRepo:
    def __init__(self, rows=None):
        self.calls = []
        self.rows = rows or {}

    def create(self, **kwargs):
        self.calls.append(('create', kwargs))
        return 7

    def get_by_id(self, job_id):
        return self.rows.get(job_id)


class DummyWebhookRepo:
    def __init__(self):
        self.calls = []
        self.row = None

    def create(self, **kwargs):
        self.calls.append(('create', kwargs))
        self.row = {
            'id': 3, 'name': kwargs['name'], 'url': kwargs['url'], 'events': '["job.failed"]',
            'container_filter': None, 'secret': kwargs['secret'], 'headers': None, 'enabled': 1,
            'created_at': None, 'updated_at': None, 'last_triggered_at': None, 'last_status': None,
        }
        return 3

    def get_by_id(self, webhook_id):
        return self.row


def _container_service(existing=None):
    container_repo = DummyContainerRepo(existing)
    color_repo = DummyColorRepo()
    job_repo = DummyJobRepo()
    service = ContainerService(container_repo, color_repo, job_repo, NullContainerRuntime())
    return service, container_repo, color_repo, job_repo


def test_register_applies_defaults():
    service, container_repo, _, _ = _container_service()
    container = service.register({'name': 'svc-a', 'className': 'SvcA'})

    assert container.name == 'svc-a'
    kwargs = container_repo.calls[0][1]
    assert kwargs['instance_type'] == 'standard-1'
    assert kwargs['max_instances'] == 5
    assert kwargs['default_port'] is None


def test_register_duplicate_raises_conflict():
    service, _, _, _ = _container_service(existing=['svc-a'])
    with pytest.raises(ConflictError) as excinfo:
        service.register({'name': 'svc-a', 'className': 'SvcA'})
    assert excinfo.value.status == 409
    assert excinfo.value.to_dict() == {'error': 'Container svc-a already exists'}


def test_register_validation_does_not_touch_repo():
    service, container_repo, _, _ = _container_service()
    with pytest.raises(ValidationError):
        service.register({'name': 'svc-a', 'className': 'SvcA', 'maxInstances': True})
    assert container_repo.calls == []


def test_delete_missing_container_keeps_color():
    service, _, color_repo, _ = _container_service()
    with pytest.raises(NotFoundError):
        service.delete('ghost')
    assert color_repo.calls == []


def test_perform_action_records_single_job():
    service, _, _, job_repo = _container_service()
    assert service.perform_action('svc-a', 'restart') == 7
    assert job_repo.calls == [('create', {
        'container_name': 'svc-a',
        'operation': 'restart',
        'status': 'completed',
        'duration_ms': 100,
        'metadata': {'trigger': 'manual'},
    })]


def test_perform_action_rejects_unknown_action():
    service, _, _, job_repo = _container_service()
    with pytest.raises(ValidationError):
        service.perform_action('svc-a', 'explode')
    assert job_repo.calls == []


def test_set_color_clears_on_empty():
    service, _, color_repo, _ = _container_service()
    assert service.set_color('svc-a', '') is None
    assert service.set_color('svc-a', '#ABCDEF') == '#ABCDEF'
    assert color_repo.calls == [('delete', 'svc-a'), ('upsert', 'svc-a', '#ABCDEF')]


def test_job_service_missing_job():
    service = JobService(DummyJobRepo())
    with pytest.raises(NotFoundError):
        service.cancel(1)


def test_webhook_name_defaults_to_host():
    repo = DummyWebhookRepo()
    service = WebhookService(repo)
    webhook = service.create({'url': 'https://hooks.example.com:8443/x', 'events': ['job.failed']})
    assert webhook.to_dict()['secret'] == 'whsec_***'
    kwargs = repo.calls[0][1]
    assert kwargs['name'] == 'hooks.example.com'
    assert kwargs['secret'].startswith('whsec_')
    assert kwargs['enabled'] is True


def test_parse_id():
    assert parse_id('12', 'Job') == 12
    for raw in ('abc', '1.5', ''):
        with pytest.raises(NotFoundError) as excinfo:
            parse_id(raw, 'Job')
        assert excinfo.value.message == 'Job not found'
