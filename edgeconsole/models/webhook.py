from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from edgeconsole.models.base import load_json

WEBHOOK_EVENTS = (
    'container.started',
    'container.stopped',
    'container.error',
    'container.scaled',
    'job.started',
    'job.completed',
    'job.failed',
    'schedule.executed',
    'schedule.failed',
    'snapshot.created',
    'snapshot.restored',
)


@dataclass
class Webhook:
    id: int
    url: str
    events: list[str]
    name: Optional[str] = None
    container_filter: Optional[str] = None
    secret: Optional[str] = None
    headers: dict[str, str] = field(default_factory=dict)
    enabled: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    last_triggered_at: Optional[str] = None
    last_status: Optional[int] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'Webhook':
        return cls(
            id=row['id'],
            name=row['name'],
            url=row['url'],
            events=load_json(row['events'], []) or [],
            container_filter=row['container_filter'],
            secret=row['secret'],
            headers=load_json(row['headers'], {}) or {},
            enabled=bool(row['enabled']),
            created_at=row['created_at'],
            updated_at=row['updated_at'],
            last_triggered_at=row['last_triggered_at'],
            last_status=row['last_status'],
        )

    def to_dict(self, reveal_secret: bool = False) -> dict[str, Any]:
        secret = self.secret
        if secret and not reveal_secret:
            secret = secret[:6] + '***'
        return {
            'id': self.id,
            'name': self.name,
            'url': self.url,
            'events': self.events,
            'containerFilter': self.container_filter,
            'secret': secret,
            'headers': self.headers,
            'enabled': self.enabled,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
            'lastTriggeredAt': self.last_triggered_at,
            'lastStatus': self.last_status,
        }
