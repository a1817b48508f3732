from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class TopologyNode:
    id: str
    name: str
    class_name: str
    status: str
    instance_count: int
    type: str
    position: Optional[dict[str, float]] = None

    def to_dict(self) -> dict[str, Any]:
        record = {
            'id': self.id,
            'name': self.name,
            'className': self.class_name,
            'status': self.status,
            'instanceCount': self.instance_count,
            'type': self.type,
        }
        if self.position is not None:
            record['position'] = self.position
        return record


@dataclass
class TopologyEdge:
    id: str
    source: str
    target: str
    binding_type: str
    binding_name: str
    animated: bool = False

    def to_dict(self) -> dict[str, Any]:
        record = {
            'id': self.id,
            'source': self.source,
            'target': self.target,
            'bindingType': self.binding_type,
            'bindingName': self.binding_name,
        }
        if self.animated:
            record['animated'] = True
        return record
