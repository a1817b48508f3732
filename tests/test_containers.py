"""Tests for container registry endpoints"""
import json


def _job_rows(db_factory, operation):
    conn = db_factory()
    try:
        return conn.execute(
            'SELECT status, duration_ms, metadata FROM jobs WHERE operation = ?', (operation,)
        ).fetchall()
    finally:
        conn.close()


class TestRegistration:
    """Tests for register/list/get/delete"""

    def test_register_list_delete_scenario(self, client):
        response = client.post('/api/containers/register', json={'name': 'svc-a', 'className': 'SvcA'})
        data = json.loads(response.data)
        assert response.status_code == 200
        assert data['success'] is True
        assert data['container']['name'] == 'svc-a'

        data = json.loads(client.get('/api/containers').data)
        assert data['total'] == 1
        container = data['containers'][0]
        assert container['name'] == 'svc-a'
        assert container['className'] == 'SvcA'
        assert container['instanceType'] == 'standard-1'
        assert container['maxInstances'] == 5
        assert container['status'] == 'stopped'
        assert container['instances'] == []
        assert container['instanceCount'] == 0

        response = client.delete('/api/containers/svc-a')
        assert response.status_code == 200
        assert json.loads(response.data)['success'] is True

        response = client.get('/api/containers/svc-a')
        assert response.status_code == 404
        assert json.loads(response.data) == {'error': 'Container not found'}

    def test_duplicate_registration_conflicts_and_keeps_original(self, client, register):
        register('svc-a', 'SvcA', image='docker.io/org/a:1')
        response = client.post(
            '/api/containers/register',
            json={'name': 'svc-a', 'className': 'Other', 'image': 'docker.io/org/b:2'},
        )
        assert response.status_code == 409
        assert json.loads(response.data) == {'error': 'Container svc-a already exists'}

        container = json.loads(client.get('/api/containers/svc-a').data)['container']
        assert container['className'] == 'SvcA'
        assert container['image'] == 'docker.io/org/a:1'
        assert json.loads(client.get('/api/containers').data)['total'] == 1

    def test_missing_required_field(self, client):
        response = client.post('/api/containers/register', json={'name': 'svc-a'})
        assert response.status_code == 400
        assert json.loads(response.data)['error'] == 'Missing required field: className'

    def test_single_character_name(self, client):
        response = client.post('/api/containers/register', json={'name': 'a', 'className': 'A'})
        assert response.status_code == 200
        assert json.loads(response.data)['container']['name'] == 'a'

    def test_rejects_bad_fields(self, client):
        bad = [
            {'name': '-bad', 'className': 'X'},
            {'name': 'svc-b', 'className': 'X', 'instanceType': 'huge'},
            {'name': 'svc-b', 'className': 'X', 'maxInstances': 0},
            {'name': 'svc-b', 'className': 'X', 'defaultPort': 70000},
            {'name': 'svc-b', 'className': 'X', 'sleepAfter': 'soon'},
            {'name': 'svc-b', 'className': {'x': 1}},
            {'name': 'svc-b', 'className': 'X', 'image': ['docker.io/org/b']},
            {'name': 'svc-b', 'className': 'X', 'workerName': 7},
            {'name': ['svc-b'], 'className': 'X'},
        ]
        for body in bad:
            response = client.post('/api/containers/register', json=body)
            assert response.status_code == 400, body
        assert json.loads(client.get('/api/containers').data)['total'] == 0

    def test_register_keeps_optional_fields(self, register):
        data = register(
            'api-server', 'ApiServer',
            workerName='my-api-worker', instanceType='standard-2',
            maxInstances=10, defaultPort=8080, sleepAfter='5m',
        )
        container = data['container']
        assert container['workerName'] == 'my-api-worker'
        assert container['instanceType'] == 'standard-2'
        assert container['maxInstances'] == 10
        assert container['defaultPort'] == 8080
        assert container['sleepAfter'] == '5m'
        assert container['createdAt'].endswith('Z')

    def test_list_is_ordered_by_name(self, client, register):
        register('zeta', 'Zeta')
        register('alpha', 'Alpha')
        names = [c['name'] for c in json.loads(client.get('/api/containers').data)['containers']]
        assert names == ['alpha', 'zeta']

    def test_delete_missing_container_is_not_found(self, client, register):
        register()
        response = client.delete('/api/containers/ghost')
        assert response.status_code == 404
        assert json.loads(client.get('/api/containers').data)['total'] == 1


class TestActions:
    """Tests for restart/stop and instance endpoints"""

    def test_restart_records_exactly_one_completed_job(self, client, db_factory):
        response = client.post('/api/containers/svc-a/restart')
        data = json.loads(response.data)
        assert response.status_code == 200
        assert data['success'] is True
        assert data['message'] == 'Container svc-a restart initiated'

        rows = _job_rows(db_factory, 'restart')
        assert len(rows) == 1
        assert rows[0]['status'] == 'completed'
        assert rows[0]['duration_ms'] == 100
        assert json.loads(rows[0]['metadata']) == {'trigger': 'manual'}

    def test_stop_records_exactly_one_completed_job(self, client, db_factory):
        response = client.post('/api/containers/svc-a/stop')
        assert response.status_code == 200
        job_id = json.loads(response.data)['jobId']

        rows = _job_rows(db_factory, 'stop')
        assert len(rows) == 1
        job = json.loads(client.get(f'/api/jobs/{job_id}').data)
        assert job['status'] == 'completed'
        assert job['containerName'] == 'svc-a'

    def test_stop_instance_records_instance_id(self, client, db_factory):
        response = client.delete('/api/containers/svc-a/instances/inst-abc123')
        assert response.status_code == 200
        assert json.loads(response.data)['message'] == 'Instance inst-abc123 stop initiated'

        rows = _job_rows(db_factory, 'stop_instance')
        assert len(rows) == 1
        assert rows[0]['duration_ms'] == 50
        assert json.loads(rows[0]['metadata']) == {'instanceId': 'inst-abc123'}

    def test_instances_for_registered_container(self, client, register):
        register()
        data = json.loads(client.get('/api/containers/svc-a/instances').data)
        assert data == {'instances': [], 'total': 0}

    def test_instances_for_unknown_container(self, client):
        response = client.get('/api/containers/ghost/instances')
        assert response.status_code == 404


class TestColors:
    """Tests for container colors"""

    def test_set_and_clear_color(self, client, register):
        register()
        response = client.put('/api/containers/svc-a/color', json={'color': '#1ea7e1'})
        assert response.status_code == 200
        assert json.loads(client.get('/api/containers/svc-a').data)['container']['color'] == '#1ea7e1'

        client.put('/api/containers/svc-a/color', json={'color': '#000000'})
        assert json.loads(client.get('/api/containers/svc-a').data)['container']['color'] == '#000000'

        client.put('/api/containers/svc-a/color', json={'color': None})
        assert json.loads(client.get('/api/containers/svc-a').data)['container']['color'] is None

    def test_invalid_color_rejected(self, client):
        response = client.put('/api/containers/svc-a/color', json={'color': 'blue'})
        assert response.status_code == 400

    def test_delete_container_removes_color(self, client, register, db_factory):
        register()
        client.put('/api/containers/svc-a/color', json={'color': '#1ea7e1'})
        client.delete('/api/containers/svc-a')
        conn = db_factory()
        try:
            assert conn.execute('SELECT COUNT(*) FROM container_colors').fetchone()[0] == 0
        finally:
            conn.close()
