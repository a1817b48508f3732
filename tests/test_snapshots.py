"""Tests for configuration snapshot endpoints"""
import json
import re

import pytest


@pytest.fixture
def blob_store(services):
    return services['blob_store']


def _create(client, container='api-server', name='Before deploy', **fields):
    response = client.post('/api/snapshots', json={'containerName': container, 'name': name, **fields})
    assert response.status_code == 200, response.get_json()
    return json.loads(response.data)


class TestSnapshotCrud:
    """Tests for creating, reading and deleting snapshots"""

    def test_create_stores_config_blob(self, client, blob_store):
        snapshot = _create(client, description='pre-release')
        assert re.match(r'^snapshots/api-server/\d+-[0-9a-f]{8}\.json$', snapshot['r2Key'])
        assert snapshot['createdBy'] == 'dev@localhost'
        assert snapshot['trigger'] == 'manual'
        assert snapshot['status'] == 'ready'
        assert snapshot['metadata']['envVarCount'] == 3

        stored = json.loads(blob_store.get(snapshot['r2Key']))
        assert snapshot['size'] == len(blob_store.get(snapshot['r2Key']))
        assert stored['instanceType'] == 'standard-1'
        assert stored['sleepAfter'] == 300
        assert stored['defaultPort'] == 8080
        assert stored['envVars']['NODE_ENV'] == 'production'

    def test_get_includes_config(self, client):
        snapshot_id = _create(client)['id']
        data = json.loads(client.get(f'/api/snapshots/{snapshot_id}').data)
        assert data['config']['healthCheck'] == {'path': '/health', 'interval': 30, 'timeout': 5}

    def test_list_omits_config_and_filters(self, client):
        _create(client, container='api-server')
        _create(client, container='worker')
        data = json.loads(client.get('/api/snapshots').data)
        assert data['total'] == 2
        assert all('config' not in item for item in data['snapshots'])

        data = json.loads(client.get('/api/snapshots?container=worker').data)
        assert [item['containerName'] for item in data['snapshots']] == ['worker']

    def test_create_requires_fields(self, client):
        response = client.post('/api/snapshots', json={'containerName': 'api-server'})
        assert response.status_code == 400
        assert json.loads(response.data)['error'] == 'Missing required field: name'

    @pytest.mark.parametrize('body', [
        {'containerName': '..', 'name': 'x'},
        {'containerName': 123, 'name': 'x'},
        {'containerName': 'api-server', 'name': 'x', 'description': ['x']},
        {'containerName': 'api-server', 'name': {'a': 1}},
    ])
    def test_create_rejects_bad_fields(self, client, body):
        response = client.post('/api/snapshots', json=body)
        assert response.status_code == 400
        assert json.loads(client.get('/api/snapshots').data)['total'] == 0

    def test_delete_removes_blob(self, client, blob_store):
        snapshot = _create(client)
        assert client.delete(f"/api/snapshots/{snapshot['id']}").status_code == 200
        assert blob_store.get(snapshot['r2Key']) is None
        assert client.get(f"/api/snapshots/{snapshot['id']}").status_code == 404

    def test_delete_missing_snapshot(self, client):
        assert client.delete('/api/snapshots/77').status_code == 404

    def test_stats(self, client):
        first = _create(client, container='api-server')
        _create(client, container='api-server')
        _create(client, container='worker')
        data = json.loads(client.get('/api/snapshots/stats').data)
        assert data['totalSnapshots'] == 3
        assert data['totalSize'] >= first['size'] * 2
        assert data['oldestSnapshot'] <= data['newestSnapshot']
        assert data['containerCounts'] == [
            {'containerName': 'api-server', 'count': 2},
            {'containerName': 'worker', 'count': 1},
        ]


class TestSnapshotRestore:
    """Tests for restoring snapshots"""

    def test_restore_unchanged_config(self, client, db_factory):
        snapshot_id = _create(client)['id']
        data = json.loads(client.post(f'/api/snapshots/{snapshot_id}/restore', json={}).data)
        assert data['success'] is True
        assert data['snapshotId'] == snapshot_id
        assert data['containerName'] == 'api-server'
        assert data['backupSnapshotId'] is None
        assert data['changes'] == []

        conn = db_factory()
        try:
            count = conn.execute("SELECT COUNT(*) FROM jobs WHERE operation = 'restore_snapshot'").fetchone()[0]
        finally:
            conn.close()
        assert count == 1

    def test_restore_reports_changes_per_option(self, client, blob_store):
        snapshot = _create(client)
        stored = json.loads(blob_store.get(snapshot['r2Key']))
        stored['maxInstances'] = 9
        stored['envVars']['NODE_ENV'] = 'staging'
        stored['networkRules']['blockedHosts'] = ['evil.example.com']
        blob_store.put(snapshot['r2Key'], json.dumps(stored).encode('utf-8'))

        data = json.loads(client.post(f"/api/snapshots/{snapshot['id']}/restore", json={}).data)
        assert [change['field'] for change in data['changes']] == ['envVars', 'maxInstances', 'networkRules']
        max_change = next(change for change in data['changes'] if change['field'] == 'maxInstances')
        assert max_change == {'field': 'maxInstances', 'oldValue': 5, 'newValue': 9}

        data = json.loads(client.post(
            f"/api/snapshots/{snapshot['id']}/restore",
            json={'restoreEnv': False, 'restoreNetworking': False},
        ).data)
        assert [change['field'] for change in data['changes']] == ['maxInstances']

    def test_restore_with_backup(self, client):
        snapshot_id = _create(client, name='v1')['id']
        data = json.loads(client.post(
            f'/api/snapshots/{snapshot_id}/restore',
            json={'createBackupFirst': True},
        ).data)
        backup_id = data['backupSnapshotId']
        assert backup_id is not None and backup_id != snapshot_id

        backup = json.loads(client.get(f'/api/snapshots/{backup_id}').data)
        assert backup['name'] == 'Pre-restore backup (v1)'
        assert backup['trigger'] == 'auto'
        assert json.loads(client.get('/api/snapshots').data)['total'] == 2

    def test_restore_rejects_string_options(self, client):
        snapshot_id = _create(client, name='v1')['id']
        response = client.post(f'/api/snapshots/{snapshot_id}/restore', json={'createBackupFirst': 'false'})
        assert response.status_code == 400
        assert json.loads(response.data) == {'error': 'createBackupFirst must be true or false'}
        assert json.loads(client.get('/api/snapshots').data)['total'] == 1

    def test_restore_missing_blob(self, client, blob_store):
        snapshot = _create(client)
        blob_store.delete(snapshot['r2Key'])
        response = client.post(f"/api/snapshots/{snapshot['id']}/restore", json={})
        assert response.status_code == 404
        assert json.loads(response.data) == {'error': 'Snapshot data not found'}

    def test_restore_unknown_snapshot(self, client):
        assert client.post('/api/snapshots/404/restore', json={}).status_code == 404
