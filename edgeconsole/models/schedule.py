from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from edgeconsole.models.base import load_json
from edgeconsole.utils.cron import describe_cron

SCHEDULE_ACTIONS = ('restart', 'rebuild', 'scale_up', 'scale_down', 'snapshot', 'signal')


@dataclass
class ScheduledAction:
    id: int
    container_name: str
    name: str
    action: str
    cron_expression: str
    timezone: str = 'UTC'
    description: Optional[str] = None
    action_params: dict[str, Any] = field(default_factory=dict)
    enabled: bool = True
    status: str = 'active'
    last_run_at: Optional[str] = None
    last_run_status: Optional[str] = None
    last_run_error: Optional[str] = None
    next_run_at: Optional[str] = None
    run_count: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'ScheduledAction':
        return cls(
            id=row['id'],
            container_name=row['container_name'],
            name=row['name'],
            description=row['description'],
            action=row['action_type'],
            action_params=load_json(row['action_params'], {}) or {},
            cron_expression=row['cron_expression'],
            timezone=row['timezone'],
            enabled=bool(row['enabled']),
            status=row['status'],
            last_run_at=row['last_run_at'],
            last_run_status=row['last_run_status'],
            last_run_error=row['last_run_error'],
            next_run_at=row['next_run_at'],
            run_count=row['run_count'] or 0,
            created_at=row['created_at'],
            updated_at=row['updated_at'],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'containerName': self.container_name,
            'name': self.name,
            'description': self.description,
            'action': self.action,
            'actionParams': self.action_params,
            'cronExpression': self.cron_expression,
            'cronDescription': describe_cron(self.cron_expression),
            'timezone': self.timezone,
            'enabled': self.enabled,
            'status': self.status,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
            'lastRunAt': self.last_run_at,
            'lastRunStatus': self.last_run_status,
            'lastRunError': self.last_run_error,
            'nextRunAt': self.next_run_at,
            'runCount': self.run_count,
        }
