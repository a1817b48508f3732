from __future__ import annotations

from .container import Container, ContainerInstance
from .job import Job
from .schedule import ScheduledAction
from .snapshot import Snapshot
from .topology import TopologyEdge, TopologyNode
from .webhook import Webhook

__all__ = [
    'Container',
    'ContainerInstance',
    'Job',
    'ScheduledAction',
    'Snapshot',
    'TopologyEdge',
    'TopologyNode',
    'Webhook',
]
