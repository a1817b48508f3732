from __future__ import annotations

import sqlite3

import pytest

from edgeconsole.db import MIGRATIONS, init_db, make_db_factory
from edgeconsole.repositories import (
    ColorRepository,
    ContainerRepository,
    JobRepository,
    MigrationRepository,
    PositionRepository,
    ScheduleRepository,
    SnapshotRepository,
    WebhookRepository,
)


@pytest.fixture
def factory(tmp_path):
    db_factory = make_db_factory(str(tmp_path / 'repo.db'))
    init_db(db_factory)
    return db_factory


def _container(repo, name='svc-a'):
    return repo.create(
        name=name,
        class_name='SvcA',
        image=None,
        worker_name=None,
        instance_type='standard-1',
        max_instances=5,
        default_port=None,
        sleep_after=None,
    )


def test_init_db_applies_each_migration_once(tmp_path):
    db_factory = make_db_factory(str(tmp_path / 'fresh.db'))
    assert init_db(db_factory) == [name for name, _ in MIGRATIONS]
    assert init_db(db_factory) == []
    applied = MigrationRepository(db_factory).list_applied()
    assert [row['name'] for row in applied] == [name for name, _ in MIGRATIONS]
    assert applied[0]['applied_at'].endswith('Z')


def test_container_repository_unique_names(factory):
    repo = ContainerRepository(factory)
    _container(repo)
    with pytest.raises(sqlite3.IntegrityError):
        _container(repo)
    assert [row['name'] for row in repo.list_all()] == ['svc-a']
    assert repo.delete('svc-a') == 1
    assert repo.delete('svc-a') == 0


def test_container_list_joins_colors(factory):
    repo = ContainerRepository(factory)
    colors = ColorRepository(factory)
    _container(repo, 'b-svc')
    _container(repo, 'a-svc')
    colors.upsert('b-svc', '#112233')
    colors.upsert('b-svc', '#445566')

    rows = repo.list_all()
    assert [row['name'] for row in rows] == ['a-svc', 'b-svc']
    assert rows[0]['color'] is None
    assert rows[1]['color'] == '#445566'
    assert colors.delete('b-svc') == 1
    assert repo.list_names() == ['a-svc', 'b-svc']


def test_job_repository_terminal_statuses_set_completion(factory):
    repo = JobRepository(factory)
    done = repo.get_by_id(repo.create(operation='restart', status='completed'))
    pending = repo.get_by_id(repo.create(operation='rebuild', status='pending'))
    assert done['completed_at'] == done['started_at']
    assert pending['completed_at'] is None
    assert repo.count(statuses=['pending']) == 1


def test_job_repository_schedule_lookup(factory):
    repo = JobRepository(factory)
    repo.create(operation='restart', metadata={'scheduleId': 4})
    repo.create(operation='restart', metadata={'scheduleId': 5})
    repo.create(operation='restart')
    assert len(repo.list_by_schedule(4)) == 1


def test_position_repository_upserts(factory):
    repo = PositionRepository(factory)
    assert repo.upsert_many({'a': {'x': 1, 'y': 2}, 'b': {'x': 3, 'y': 4}}) == 2
    repo.upsert_many({'a': {'x': 5, 'y': 6}})
    assert repo.list_all() == {'a': {'x': 5.0, 'y': 6.0}, 'b': {'x': 3.0, 'y': 4.0}}


def test_webhook_repository_update_whitelist(factory):
    repo = WebhookRepository(factory)
    webhook_id = repo.create(
        name='ops',
        url='https://example.com',
        events=['job.failed'],
        secret='whsec_x',
        container_filter=None,
        headers={'X-A': '1'},
        enabled=True,
    )
    assert repo.update(webhook_id, {'enabled': False, 'events': ['job.completed'], 'id': 99}) == 1
    row = repo.get_by_id(webhook_id)
    assert row['enabled'] == 0
    assert row['events'] == '["job.completed"]'
    assert row['id'] == webhook_id

    repo.record_trigger(webhook_id, 500)
    assert repo.get_by_id(webhook_id)['last_status'] == 500


def test_snapshot_repository_stats_empty(factory):
    stats = SnapshotRepository(factory).stats()
    assert stats == {
        'totalSnapshots': 0,
        'totalSize': 0,
        'oldestSnapshot': None,
        'newestSnapshot': None,
        'containerCounts': [],
    }


def test_schedule_repository_record_run(factory):
    repo = ScheduleRepository(factory)
    schedule_id = repo.create(
        container_name='svc-a',
        name='nightly',
        description=None,
        action_type='restart',
        action_params={'graceful': True},
        cron_expression='0 0 * * *',
        timezone='UTC',
        enabled=True,
        status='active',
        next_run_at='2026-01-01T01:00:00.000Z',
    )
    repo.record_run(schedule_id, last_run_at='2026-01-01T00:00:00.000Z', status='success', next_run_at=None)
    row = repo.get_by_id(schedule_id)
    assert row['run_count'] == 1
    assert row['last_run_status'] == 'success'
    assert row['action_params'] == '{"graceful": true}'
    assert [r['id'] for r in repo.list_due('2026-01-01T00:00:00.000Z')] == [schedule_id]
