"""routes package."""
from __future__ import annotations

from edgeconsole.dispatcher import Router

from .config import register_config_routes
from .containers import register_container_item_routes, register_container_routes
from .health import register_health_routes
from .images import register_image_routes
from .jobs import register_job_routes
from .logs import register_log_routes
from .metrics import register_container_metrics_routes, register_dashboard_routes
from .schedules import register_schedule_routes
from .snapshots import register_snapshot_routes
from .topology import register_topology_routes
from .webhooks import register_webhook_routes


def build_router(services: dict) -> Router:
    """Assemble the API route table, most specific routes first."""
    router = Router()
    register_health_routes(router, migration_repo=services['migration_repo'])
    register_container_routes(router, container_service=services['containers'])
    register_config_routes(router, config_service=services['config'])
    register_log_routes(router, log_service=services['logs'])
    register_container_metrics_routes(router, metrics_service=services['metrics'])
    register_image_routes(router, image_service=services['images'])
    register_container_item_routes(router, container_service=services['containers'])
    register_topology_routes(router, topology_service=services['topology'])
    register_dashboard_routes(router, metrics_service=services['metrics'])
    register_job_routes(router, job_service=services['jobs'])
    register_webhook_routes(router, webhook_service=services['webhooks'])
    register_snapshot_routes(router, snapshot_service=services['snapshots'])
    register_schedule_routes(router, schedule_service=services['schedules'])
    return router


__all__ = ['build_router']
