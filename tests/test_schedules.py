"""Tests for scheduled actions"""
import json
import logging
from datetime import timedelta

import pytest

from edgeconsole.repositories import ScheduleRepository
from edgeconsole.scheduler import SCAN_JOB_ID, create_scheduler, run_schedule_scan
from edgeconsole.utils.timestamps import parse_iso, utc_now_iso


def _create(client, **fields):
    body = {
        'containerName': 'api-server',
        'name': 'Nightly restart',
        'action': 'restart',
        'cronExpression': '0 3 * * *',
        **fields,
    }
    return client.post('/api/schedules', json=body)


@pytest.fixture
def schedule_repo(db_factory):
    return ScheduleRepository(db_factory)


class TestScheduleApi:
    """Tests for schedule CRUD and trigger"""

    def test_create_defaults(self, client):
        response = _create(client)
        data = json.loads(response.data)
        assert response.status_code == 200
        assert data['status'] == 'active'
        assert data['enabled'] is True
        assert data['runCount'] == 0
        assert data['timezone'] == 'UTC'
        assert data['lastRunAt'] is None
        assert data['cronDescription'] == '0 3 * * *'
        assert parse_iso(data['nextRunAt']) > parse_iso(data['createdAt'])

    def test_create_paused(self, client):
        data = json.loads(_create(client, enabled=False).data)
        assert data['status'] == 'paused'
        assert data['enabled'] is False

    def test_create_validation(self, client):
        assert _create(client, action='explode').status_code == 400
        assert _create(client, cronExpression='every day').status_code == 400
        assert _create(client, timezone='Mars/Olympus').status_code == 400
        assert _create(client, actionParams=[1]).status_code == 400
        assert _create(client, description={'a': 1}).status_code == 400
        assert _create(client, containerName=['x']).status_code == 400
        assert _create(client, containerName='../etc').status_code == 400
        assert _create(client, name={'a': 1}).status_code == 400
        assert _create(client, enabled='false').status_code == 400
        response = client.post('/api/schedules', json={'containerName': 'api-server', 'name': 'x', 'action': 'restart'})
        assert json.loads(response.data)['error'] == 'Missing required field: cronExpression'
        assert json.loads(client.get('/api/schedules').data)['total'] == 0

    def test_list_filters_by_container(self, client):
        _create(client)
        _create(client, containerName='worker')
        data = json.loads(client.get('/api/schedules?container=worker').data)
        assert [item['containerName'] for item in data['schedules']] == ['worker']

    def test_update_is_partial(self, client):
        schedule_id = json.loads(_create(client, description='keep me').data)['id']
        data = json.loads(client.put(f'/api/schedules/{schedule_id}', json={'enabled': False}).data)
        assert data['status'] == 'paused'
        assert data['description'] == 'keep me'
        assert data['cronExpression'] == '0 3 * * *'

        data = json.loads(client.put(f'/api/schedules/{schedule_id}', json={'cronExpression': '*/15 * * * *'}).data)
        assert data['cronDescription'] == 'Every 15 minutes'
        assert data['status'] == 'paused'

    def test_update_rejects_bad_cron(self, client):
        schedule_id = json.loads(_create(client).data)['id']
        response = client.put(f'/api/schedules/{schedule_id}', json={'cronExpression': 'nope'})
        assert response.status_code == 400

    def test_update_rejects_string_enabled(self, client):
        schedule_id = json.loads(_create(client).data)['id']
        response = client.put(f'/api/schedules/{schedule_id}', json={'enabled': 'false'})
        assert response.status_code == 400
        assert json.loads(response.data) == {'error': 'enabled must be true or false'}
        assert json.loads(client.get(f'/api/schedules/{schedule_id}').data)['status'] == 'active'

    def test_delete(self, client):
        schedule_id = json.loads(_create(client).data)['id']
        assert client.delete(f'/api/schedules/{schedule_id}').status_code == 200
        assert client.get(f'/api/schedules/{schedule_id}').status_code == 404
        assert client.delete(f'/api/schedules/{schedule_id}').status_code == 404

    def test_trigger_records_run(self, client):
        schedule_id = json.loads(_create(client).data)['id']
        response = client.post(f'/api/schedules/{schedule_id}/trigger')
        data = json.loads(response.data)
        assert response.status_code == 200
        assert data['success'] is True
        assert data['schedule']['runCount'] == 1
        assert data['schedule']['lastRunStatus'] == 'success'
        assert data['schedule']['lastRunAt'] is not None

        job = json.loads(client.get(f"/api/jobs/{data['jobId']}").data)
        assert job['operation'] == 'restart'
        assert job['scheduleId'] == schedule_id
        assert job['trigger'] == 'manual'

        client.post(f'/api/schedules/{schedule_id}/trigger')
        assert json.loads(client.get(f'/api/schedules/{schedule_id}').data)['runCount'] == 2

    def test_history(self, client, services):
        schedule_id = json.loads(_create(client).data)['id']
        other_id = json.loads(_create(client, name='Other').data)['id']
        client.post(f'/api/schedules/{schedule_id}/trigger')
        client.post(f'/api/schedules/{schedule_id}/trigger')
        client.post(f'/api/schedules/{other_id}/trigger')
        services['job_repo'].create(operation='restart', container_name='api-server')

        data = json.loads(client.get(f'/api/schedules/{schedule_id}/history').data)
        assert data['total'] == 2
        execution = data['executions'][0]
        assert execution['scheduleId'] == schedule_id
        assert execution['scheduleName'] == 'Nightly restart'
        assert execution['status'] == 'success'

    def test_unknown_schedule(self, client):
        assert client.get('/api/schedules/9/history').status_code == 404
        assert client.post('/api/schedules/9/trigger').status_code == 404


class TestScheduledScan:
    """Tests for the periodic due-schedule scan"""

    def _insert(self, schedule_repo, next_run_at, enabled=True):
        return schedule_repo.create(
            container_name='api-server',
            name='due',
            description=None,
            action_type='restart',
            action_params=None,
            cron_expression='* * * * *',
            timezone='UTC',
            enabled=enabled,
            status='active' if enabled else 'paused',
            next_run_at=next_run_at,
        )

    def test_process_due_selects_enabled_past_schedules(self, services, schedule_repo, caplog):
        past = self._insert(schedule_repo, utc_now_iso(timedelta(minutes=-5)))
        self._insert(schedule_repo, utc_now_iso(timedelta(hours=1)))
        self._insert(schedule_repo, utc_now_iso(timedelta(minutes=-5)), enabled=False)
        unscheduled = self._insert(schedule_repo, None)

        with caplog.at_level(logging.INFO, logger='edgeconsole.services.schedule_service'):
            due = services['schedules'].process_due()
        assert sorted(schedule.id for schedule in due) == sorted([past, unscheduled])
        assert 'Found 2 due scheduled actions' in caplog.text

    def test_scan_does_not_advance_schedules(self, services, schedule_repo):
        schedule_id = self._insert(schedule_repo, utc_now_iso(timedelta(minutes=-5)))
        assert run_schedule_scan(services['schedules']) == 1
        assert run_schedule_scan(services['schedules']) == 1
        schedule = services['schedules'].get_schedule(schedule_id)
        assert schedule.run_count == 0

    def test_scan_failure_is_logged(self, caplog):
        class BrokenService:
            def process_due(self):
                raise RuntimeError('database is locked')

        with caplog.at_level(logging.ERROR, logger='edgeconsole.scheduler'):
            assert run_schedule_scan(BrokenService()) == 0
        assert 'Scheduled action scan failed' in caplog.text

    def test_create_scheduler_registers_scan_job(self, services):
        scheduler = create_scheduler(services['schedules'], interval_seconds=30)
        job = scheduler.get_job(SCAN_JOB_ID)
        assert job is not None
        assert job.trigger.interval == timedelta(seconds=30)


class TestCli:
    """Tests for the flask CLI commands"""

    def test_init_db_is_idempotent(self, runner):
        result = runner.invoke(args=['init-db'])
        assert result.exit_code == 0
        assert 'Applied migrations: none' in result.output

    def test_scan_schedules(self, runner, schedule_repo):
        TestScheduledScan()._insert(schedule_repo, utc_now_iso(timedelta(minutes=-1)))
        result = runner.invoke(args=['scan-schedules'])
        assert result.exit_code == 0
        assert 'Found 1 due scheduled actions' in result.output
