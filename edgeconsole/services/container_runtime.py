"""Container runtime interface.

The platform does not expose live instances to this service, so the only
runtime shipped here reports none.
"""
from __future__ import annotations

from typing import Protocol

from edgeconsole.models import ContainerInstance


class ContainerRuntime(Protocol):
    def list_instances(self, container_name: str) -> list[ContainerInstance]:
        ...


class NullContainerRuntime:
    """Runtime that knows about no running instances."""

    def list_instances(self, container_name: str) -> list[ContainerInstance]:
        return []
