from __future__ import annotations

import logging
import math
from typing import Any, Mapping

from edgeconsole.repositories import ContainerRepository, PositionRepository
from edgeconsole.services import demo_data
from edgeconsole.services.base import ValidationError

logger = logging.getLogger(__name__)


def _find_cycles(nodes: list[str], edges: list[tuple[str, str]]) -> list[list[str]]:
    """Return each dependency cycle once, as the list of node ids along it."""
    graph: dict[str, list[str]] = {node: [] for node in nodes}
    for source, target in edges:
        if source in graph and target in graph:
            graph[source].append(target)

    cycles: list[list[str]] = []
    seen: set[tuple[str, ...]] = set()
    state: dict[str, int] = {}
    stack: list[str] = []

    def visit(node: str) -> None:
        state[node] = 1
        stack.append(node)
        for nxt in graph[node]:
            if state.get(nxt) == 1:
                cycle = stack[stack.index(nxt):]
                pivot = cycle.index(min(cycle))
                key = tuple(cycle[pivot:] + cycle[:pivot])
                if key not in seen:
                    seen.add(key)
                    cycles.append(list(key))
            elif nxt not in state:
                visit(nxt)
        stack.pop()
        state[node] = 2

    for node in nodes:
        if node not in state:
            visit(node)
    return cycles


class TopologyService:
    """Dependency graph between containers and backing services."""

    def __init__(
        self,
        position_repo: PositionRepository,
        container_repo: ContainerRepository,
        nodes=None,
        edges=None,
    ):
        self._position_repo = position_repo
        self._container_repo = container_repo
        self._nodes = list(demo_data.TOPOLOGY_NODES if nodes is None else nodes)
        self._edges = list(demo_data.TOPOLOGY_EDGES if edges is None else edges)

    def get_topology(self) -> dict[str, Any]:
        positions = self._position_repo.list_all()
        nodes = []
        for node in self._nodes:
            record = node.to_dict()
            if node.id in positions:
                record['position'] = positions[node.id]
            nodes.append(record)
        return {'nodes': nodes, 'edges': [edge.to_dict() for edge in self._edges]}

    def detect_orphans(self) -> dict[str, list]:
        node_ids = [node.id for node in self._nodes]
        known = set(node_ids)
        connected = set()
        for edge in self._edges:
            connected.update((edge.source, edge.target))

        orphans = [node.id for node in self._nodes if node.type == 'container' and node.id not in connected]
        orphans.extend(name for name in self._container_repo.list_names() if name not in known)
        unused = [
            edge.binding_name for edge in self._edges
            if edge.source not in known or edge.target not in known
        ]
        cycles = _find_cycles(node_ids, [(edge.source, edge.target) for edge in self._edges])
        return {
            'orphanContainers': orphans,
            'unusedBindings': unused,
            'circularDependencies': cycles,
        }

    def save_positions(self, positions: Any) -> int:
        if not isinstance(positions, dict):
            raise ValidationError('Positions must be an object keyed by node id')
        cleaned: dict[str, dict[str, float]] = {}
        for node_id, pos in positions.items():
            if not isinstance(pos, Mapping):
                raise ValidationError(f'Position for {node_id} must be an object with x and y')
            coords = {}
            for axis in ('x', 'y'):
                value = pos.get(axis)
                if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                    raise ValidationError(f'Position for {node_id} needs numeric {axis}')
                coords[axis] = float(value)
            cleaned[node_id] = coords
        saved = self._position_repo.upsert_many(cleaned)
        logger.info('Saved %d topology positions', saved)
        return saved
