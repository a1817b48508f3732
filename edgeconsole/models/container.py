from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

INSTANCE_TYPES = ('lite', 'basic', 'standard-1', 'standard-2', 'standard-3', 'standard-4')
DEFAULT_INSTANCE_TYPE = 'standard-1'
DEFAULT_MAX_INSTANCES = 5


@dataclass
class ContainerInstance:
    id: str
    container_name: str
    status: str
    location: Optional[str] = None
    started_at: Optional[str] = None
    cpu_percent: Optional[float] = None
    memory_mb: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'containerName': self.container_name,
            'status': self.status,
            'location': self.location,
            'startedAt': self.started_at,
            'cpuPercent': self.cpu_percent,
            'memoryMb': self.memory_mb,
        }


@dataclass
class Container:
    name: str
    class_name: str
    image: Optional[str] = None
    worker_name: Optional[str] = None
    instance_type: str = DEFAULT_INSTANCE_TYPE
    max_instances: int = DEFAULT_MAX_INSTANCES
    default_port: Optional[int] = None
    sleep_after: Optional[str] = None
    status: str = 'stopped'
    id: Optional[int] = None
    color: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    instances: list[ContainerInstance] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'Container':
        keys = row.keys()
        return cls(
            id=row['id'],
            name=row['name'],
            class_name=row['class_name'],
            image=row['image'],
            worker_name=row['worker_name'],
            instance_type=row['instance_type'],
            max_instances=row['max_instances'],
            default_port=row['default_port'],
            sleep_after=row['sleep_after'],
            status=row['status'],
            color=row['color'] if 'color' in keys else None,
            created_at=row['created_at'],
            updated_at=row['updated_at'],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'className': self.class_name,
            'workerName': self.worker_name,
            'image': self.image,
            'instanceType': self.instance_type,
            'maxInstances': self.max_instances,
            'defaultPort': self.default_port,
            'sleepAfter': self.sleep_after,
            'status': self.status,
            'color': self.color,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
            'instances': [instance.to_dict() for instance in self.instances],
            'instanceCount': len(self.instances),
        }
