"""Tests for job history endpoints"""
import json

import pytest


@pytest.fixture
def job_repo(services):
    return services['job_repo']


class TestJobListing:
    """Tests for listing, filtering and pagination"""

    def test_empty_history(self, client):
        data = json.loads(client.get('/api/jobs').data)
        assert data == {'jobs': [], 'total': 0, 'page': 1, 'pageSize': 20}

    def test_pagination(self, client, job_repo):
        for _ in range(25):
            job_repo.create(operation='restart', container_name='svc-a')
        first = json.loads(client.get('/api/jobs?page=1&pageSize=10').data)
        third = json.loads(client.get('/api/jobs?page=3&pageSize=10').data)
        assert first['total'] == 25
        assert len(first['jobs']) == 10
        assert len(third['jobs']) == 5
        # Newest first
        assert first['jobs'][0]['id'] == 25

    def test_filters(self, client, job_repo):
        job_repo.create(operation='restart', container_name='svc-a', status='completed')
        job_repo.create(operation='stop', container_name='svc-b', status='failed', error_message='boom')
        job_repo.create(operation='rebuild', container_name='svc-a', status='pending')

        data = json.loads(client.get('/api/jobs?status=failed').data)
        assert [job['operation'] for job in data['jobs']] == ['stop']
        assert data['jobs'][0]['error'] == 'boom'

        data = json.loads(client.get('/api/jobs?status=completed,pending&container=svc-a').data)
        assert data['total'] == 2

    def test_rejects_unknown_status(self, client):
        response = client.get('/api/jobs?status=exploded')
        assert response.status_code == 400

    def test_rejects_bad_page_size(self, client):
        assert client.get('/api/jobs?pageSize=0').status_code == 400
        assert client.get('/api/jobs?pageSize=101').status_code == 400
        assert client.get('/api/jobs?page=abc').status_code == 400

    def test_stats(self, client, job_repo):
        job_repo.create(operation='restart', status='completed', duration_ms=100)
        job_repo.create(operation='stop', status='failed', duration_ms=300)
        job_repo.create(operation='rebuild', status='pending')
        data = json.loads(client.get('/api/jobs/stats').data)
        assert data == {
            'total': 3,
            'pending': 1,
            'running': 0,
            'completed': 1,
            'failed': 1,
            'cancelled': 0,
            'averageDuration': 200,
        }

    def test_missing_job(self, client):
        assert client.get('/api/jobs/999').status_code == 404
        assert client.get('/api/jobs/abc').status_code == 404


class TestJobTransitions:
    """Tests for cancel and retry"""

    def test_cancel_pending_job(self, client, job_repo):
        job_id = job_repo.create(operation='rebuild', status='pending')
        data = json.loads(client.post(f'/api/jobs/{job_id}/cancel').data)
        assert data['status'] == 'cancelled'
        assert data['completedAt'] is not None

    def test_cancel_completed_job_conflicts(self, client, job_repo):
        job_id = job_repo.create(operation='restart', status='completed')
        response = client.post(f'/api/jobs/{job_id}/cancel')
        assert response.status_code == 409
        assert json.loads(client.get(f'/api/jobs/{job_id}').data)['status'] == 'completed'

    def test_retry_failed_job(self, client, job_repo):
        job_id = job_repo.create(operation='stop', container_name='svc-a', status='failed', duration_ms=80)
        data = json.loads(client.post(f'/api/jobs/{job_id}/retry').data)
        assert data['id'] != job_id
        assert data['operation'] == 'stop'
        assert data['containerName'] == 'svc-a'
        assert data['retryOf'] == job_id

        original = json.loads(client.get(f'/api/jobs/{job_id}').data)
        assert original['retriedAs'] == data['id']
        assert original['status'] == 'failed'

    def test_retry_completed_job_conflicts(self, client, job_repo):
        job_id = job_repo.create(operation='restart', status='completed')
        assert client.post(f'/api/jobs/{job_id}/retry').status_code == 409
        assert json.loads(client.get('/api/jobs').data)['total'] == 1
