"""services package."""
from .access_gate import AccessDecision, AccessGate, AccessIdentity, KeySetCache
from .base import ConflictError, NotFoundError, ServiceError, ValidationError
from .config_service import ConfigService
from .container_runtime import NullContainerRuntime
from .container_service import ContainerService
from .image_service import ImageService
from .job_service import JobService
from .log_service import LogService
from .metrics_service import MetricsService
from .schedule_service import ScheduleService
from .snapshot_service import SnapshotService
from .topology_service import TopologyService
from .webhook_service import WebhookService

__all__ = [
    'AccessDecision',
    'AccessGate',
    'AccessIdentity',
    'ConfigService',
    'ConflictError',
    'ContainerService',
    'ImageService',
    'JobService',
    'KeySetCache',
    'LogService',
    'MetricsService',
    'NotFoundError',
    'NullContainerRuntime',
    'ScheduleService',
    'ServiceError',
    'SnapshotService',
    'TopologyService',
    'ValidationError',
    'WebhookService',
]
