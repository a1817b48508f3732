from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from edgeconsole.models.base import load_json


@dataclass
class Snapshot:
    id: int
    container_name: str
    r2_key: str
    name: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[str] = None
    created_by: Optional[str] = None
    size_bytes: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)
    config: Optional[dict[str, Any]] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'Snapshot':
        return cls(
            id=row['id'],
            container_name=row['container_name'],
            name=row['name'],
            description=row['description'],
            r2_key=row['r2_key'],
            created_at=row['created_at'],
            created_by=row['created_by'],
            size_bytes=row['size_bytes'] or 0,
            metadata=load_json(row['metadata'], {}) or {},
        )

    def to_dict(self) -> dict[str, Any]:
        record = {
            'id': self.id,
            'containerName': self.container_name,
            'name': self.name,
            'description': self.description,
            'status': 'ready',
            'trigger': self.metadata.get('trigger', 'manual'),
            'createdAt': self.created_at,
            'createdBy': self.created_by,
            'size': self.size_bytes,
            'r2Key': self.r2_key,
            'metadata': self.metadata,
        }
        if self.config is not None:
            record['config'] = self.config
        return record
