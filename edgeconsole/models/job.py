from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from edgeconsole.models.base import load_json

JOB_STATUSES = ('pending', 'running', 'completed', 'failed', 'cancelled')
CANCELLABLE_STATUSES = ('pending', 'running')
RETRYABLE_STATUSES = ('failed', 'cancelled')


@dataclass
class Job:
    id: int
    operation: str
    status: str
    container_name: Optional[str] = None
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    duration_ms: Optional[int] = None
    error_message: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'Job':
        return cls(
            id=row['id'],
            container_name=row['container_name'],
            operation=row['operation'],
            status=row['status'],
            started_at=row['started_at'],
            completed_at=row['completed_at'],
            duration_ms=row['duration_ms'],
            error_message=row['error_message'],
            metadata=load_json(row['metadata'], {}) or {},
        )

    @property
    def trigger(self) -> str:
        return self.metadata.get('trigger', 'manual')

    def to_dict(self) -> dict[str, Any]:
        record = {
            'id': self.id,
            'name': self.operation,
            'operation': self.operation,
            'status': self.status,
            'trigger': self.trigger,
            'containerName': self.container_name,
            'startedAt': self.started_at,
            'completedAt': self.completed_at,
            'duration': self.duration_ms,
            'durationMs': self.duration_ms,
            'error': self.error_message,
            'errorMessage': self.error_message,
            'metadata': self.metadata,
        }
        # Metadata keys are surfaced at the top level; canonical fields win.
        return {**self.metadata, **record}
