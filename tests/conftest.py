"""
Pytest fixtures for edgeconsole tests
"""
import pytest

from edgeconsole import create_app
from edgeconsole.config import Config


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key-for-testing'
    RATELIMIT_ENABLED = False
    SCHEDULER_ENABLED = False
    FORCE_HTTPS = False
    TEAM_DOMAIN = ''
    POLICY_AUD = ''
    LOG_LEVEL = 'WARNING'


@pytest.fixture
def make_app(tmp_path):
    """Build an application on a temporary database and blob directory."""
    def factory(**overrides):
        config = {
            'DATABASE_PATH': str(tmp_path / 'edgeconsole.db'),
            'BLOB_STORE_PATH': str(tmp_path / 'blobs'),
        }
        config.update(overrides)
        return create_app(TestingConfig, overrides=config)
    return factory


@pytest.fixture
def app(make_app):
    """Create application for testing (access gate in dev mode)"""
    return make_app()


@pytest.fixture
def client(app):
    """Create a test client"""
    return app.test_client()


@pytest.fixture
def runner(app):
    """Create a CLI test runner"""
    return app.test_cli_runner()


@pytest.fixture
def services(app):
    return app.extensions['edgeconsole']


@pytest.fixture
def db_factory(services):
    return services['db_factory']


@pytest.fixture
def register(client):
    """Register a container through the API and return the response payload."""
    def _register(name='svc-a', class_name='SvcA', **fields):
        response = client.post('/api/containers/register', json={'name': name, 'className': class_name, **fields})
        assert response.status_code == 200, response.get_json()
        return response.get_json()
    return _register
