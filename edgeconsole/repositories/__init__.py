"""repositories package."""
from .colors import ColorRepository
from .containers import ContainerRepository
from .jobs import JobRepository
from .migrations import MigrationRepository
from .positions import PositionRepository
from .schedules import ScheduleRepository
from .snapshots import SnapshotRepository
from .webhooks import WebhookRepository

__all__ = [
    'ColorRepository',
    'ContainerRepository',
    'JobRepository',
    'MigrationRepository',
    'PositionRepository',
    'ScheduleRepository',
    'SnapshotRepository',
    'WebhookRepository',
]
