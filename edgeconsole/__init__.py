"""Application package for edgeconsole."""

from __future__ import annotations

import logging
import secrets
from typing import Any, Mapping, Optional

import click
from flask import Flask, current_app, g
from flask_talisman import Talisman

from edgeconsole.blob_store import FilesystemBlobStore
from edgeconsole.config import Config
from edgeconsole.db import ensure_data_dir, init_db, make_db_factory
from edgeconsole.dispatcher import create_api_blueprint
from edgeconsole.extensions import limiter, login_manager
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
from edgeconsole.routes import build_router
from edgeconsole.scheduler import run_schedule_scan
from edgeconsole.services import (
    AccessGate,
    AccessIdentity,
    ConfigService,
    ContainerService,
    ImageService,
    JobService,
    LogService,
    MetricsService,
    NullContainerRuntime,
    ScheduleService,
    SnapshotService,
    TopologyService,
    WebhookService,
)

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_services(app: Flask) -> dict[str, Any]:
    """Wire repositories and services for the configured database and blob store."""
    db_factory = make_db_factory(app.config['DATABASE_PATH'])
    container_repo = ContainerRepository(db_factory)
    job_repo = JobRepository(db_factory)
    blob_store = FilesystemBlobStore(app.config['BLOB_STORE_PATH'])

    return {
        'db_factory': db_factory,
        'job_repo': job_repo,
        'blob_store': blob_store,
        'migration_repo': MigrationRepository(db_factory),
        'containers': ContainerService(container_repo, ColorRepository(db_factory), job_repo, NullContainerRuntime()),
        'config': ConfigService(job_repo),
        'logs': LogService(),
        'metrics': MetricsService(container_repo),
        'images': ImageService(job_repo),
        'topology': TopologyService(PositionRepository(db_factory), container_repo),
        'jobs': JobService(job_repo),
        'webhooks': WebhookService(WebhookRepository(db_factory)),
        'snapshots': SnapshotService(SnapshotRepository(db_factory), job_repo, blob_store),
        'schedules': ScheduleService(ScheduleRepository(db_factory), job_repo),
    }


def _configure_security_headers(app: Flask) -> None:
    if app.config.get('FORCE_HTTPS'):
        Talisman(
            app,
            force_https=True,
            strict_transport_security=True,
            content_security_policy={'default-src': "'self'"},
        )
        return

    @app.after_request
    def set_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        return response


def _configure_access(app: Flask, gate: AccessGate) -> None:
    login_manager.init_app(app)
    login_manager.session_protection = None

    @login_manager.request_loader
    def load_identity_from_request(req):
        decision = current_app.extensions['edgeconsole']['access_gate'].check(req)
        if decision.allowed:
            return AccessIdentity(decision.identity)
        g.access_denied_reason = decision.reason
        return None

    if gate.dev_mode:
        logger.warning('TEAM_DOMAIN or POLICY_AUD not set; access gate is disabled (dev mode)')


def _register_cli(app: Flask) -> None:
    @app.cli.command('init-db')
    def init_db_command():
        """Create or upgrade the database schema."""
        applied = init_db(app.extensions['edgeconsole']['db_factory'])
        click.echo(f"Applied migrations: {', '.join(applied) if applied else 'none'}")

    @app.cli.command('scan-schedules')
    def scan_schedules_command():
        """Run one scan for due scheduled actions."""
        due = run_schedule_scan(app.extensions['edgeconsole']['schedules'])
        click.echo(f'Found {due} due scheduled actions')


def create_app(config_class: type[Config] = Config, overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)
    if overrides:
        app.config.update(overrides)

    configure_logging(app.config.get('LOG_LEVEL', 'INFO'))

    if not app.config.get('SECRET_KEY'):
        logger.warning('SECRET_KEY not set; using a random per-process key')
        app.config['SECRET_KEY'] = secrets.token_hex(32)
    app.config.setdefault('RATELIMIT_DEFAULT', f"{app.config['RATE_LIMIT_PER_MINUTE']} per minute")
    app.config.setdefault('RATELIMIT_HEADERS_ENABLED', False)

    ensure_data_dir(app.config['DATABASE_PATH'])
    services = build_services(app)
    init_db(services['db_factory'])

    gate = app.config.get('ACCESS_GATE') or AccessGate(
        team_domain=app.config['TEAM_DOMAIN'],
        audience=app.config['POLICY_AUD'],
        cookie_name=app.config['ACCESS_COOKIE_NAME'],
        header_name=app.config['ACCESS_HEADER_NAME'],
        keys_ttl=app.config['ACCESS_KEYS_TTL_SECONDS'],
    )
    services['access_gate'] = gate
    app.extensions['edgeconsole'] = services

    _configure_access(app, gate)
    limiter.init_app(app)
    _configure_security_headers(app)

    app.register_blueprint(create_api_blueprint(router=build_router(services)))
    _register_cli(app)

    return app
