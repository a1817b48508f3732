from __future__ import annotations

from typing import Any, Optional

from edgeconsole.repositories import ContainerRepository
from edgeconsole.services import demo_data
from edgeconsole.services.base import ValidationError
from edgeconsole.utils.validators import METRICS_RANGES, validate_choice

DEFAULT_RANGE = '1h'


class MetricsService:
    """Generated metric series for containers and the dashboard."""

    def __init__(self, container_repo: ContainerRepository):
        self._container_repo = container_repo

    @staticmethod
    def _range(value: Optional[str]) -> str:
        range_ = value or DEFAULT_RANGE
        ok, error = validate_choice(range_, METRICS_RANGES, 'range')
        if not ok:
            raise ValidationError(error)
        return range_

    def container_metrics(self, name: str, range_: Optional[str] = None) -> dict[str, Any]:
        return demo_data.container_metrics(name, self._range(range_))

    def dashboard(self, range_: Optional[str] = None) -> dict[str, Any]:
        return demo_data.dashboard_metrics(self._container_repo.list_names(), self._range(range_))
