from __future__ import annotations

import logging
import sqlite3
from typing import Any, Mapping

from edgeconsole.models import Container
from edgeconsole.models.container import DEFAULT_INSTANCE_TYPE, DEFAULT_MAX_INSTANCES
from edgeconsole.repositories import ColorRepository, ContainerRepository, JobRepository
from edgeconsole.services.base import ConflictError, NotFoundError, ValidationError
from edgeconsole.services.container_runtime import ContainerRuntime
from edgeconsole.utils.validators import (
    validate_color,
    validate_container_name,
    validate_duration,
    validate_instance_type,
    validate_optional_string,
    validate_positive_int,
    validate_required_fields,
)

logger = logging.getLogger(__name__)

CONTAINER_ACTIONS = ('restart', 'stop')
ACTION_DURATION_MS = 100
STOP_INSTANCE_DURATION_MS = 50


class ContainerService:
    """Container registry business logic."""

    def __init__(
        self,
        container_repo: ContainerRepository,
        color_repo: ColorRepository,
        job_repo: JobRepository,
        runtime: ContainerRuntime,
    ):
        self._container_repo = container_repo
        self._color_repo = color_repo
        self._job_repo = job_repo
        self._runtime = runtime

    def _hydrate(self, row) -> Container:
        container = Container.from_row(row)
        container.instances = self._runtime.list_instances(container.name)
        return container

    def list_containers(self) -> list[Container]:
        return [self._hydrate(row) for row in self._container_repo.list_all()]

    def get_container(self, name: str) -> Container:
        row = self._container_repo.get_by_name(name)
        if not row:
            raise NotFoundError('Container not found')
        return self._hydrate(row)

    def register(self, payload: Mapping[str, Any]) -> Container:
        ok, error = validate_required_fields(payload, ['name', 'className'])
        if not ok:
            raise ValidationError(error)

        name = payload['name']
        ok, error = validate_container_name(name)
        if not ok:
            raise ValidationError(error)

        for field in ('className', 'image', 'workerName'):
            ok, error = validate_optional_string(payload.get(field), field)
            if not ok:
                raise ValidationError(error)

        instance_type = payload.get('instanceType') or DEFAULT_INSTANCE_TYPE
        ok, error = validate_instance_type(instance_type)
        if not ok:
            raise ValidationError(error)

        max_instances = payload.get('maxInstances', DEFAULT_MAX_INSTANCES)
        if max_instances is None:
            max_instances = DEFAULT_MAX_INSTANCES
        ok, error = validate_positive_int(max_instances, 'maxInstances')
        if not ok:
            raise ValidationError(error)

        default_port = payload.get('defaultPort')
        if default_port is not None:
            ok, error = validate_positive_int(default_port, 'defaultPort', maximum=65535)
            if not ok:
                raise ValidationError(error)

        sleep_after = payload.get('sleepAfter')
        if sleep_after is not None:
            ok, error = validate_duration(sleep_after)
            if not ok:
                raise ValidationError(error)

        try:
            self._container_repo.create(
                name=name,
                class_name=payload['className'],
                image=payload.get('image'),
                worker_name=payload.get('workerName'),
                instance_type=instance_type,
                max_instances=max_instances,
                default_port=default_port,
                sleep_after=sleep_after,
            )
        except sqlite3.IntegrityError as exc:
            if 'UNIQUE constraint failed' in str(exc):
                raise ConflictError(f'Container {name} already exists') from exc
            raise

        logger.info('Registered container %s', name)
        return self.get_container(name)

    def delete(self, name: str) -> None:
        if self._container_repo.delete(name) == 0:
            raise NotFoundError('Container not found')
        self._color_repo.delete(name)
        logger.info('Deleted container %s', name)

    def perform_action(self, name: str, action: str) -> int:
        if action not in CONTAINER_ACTIONS:
            raise ValidationError(f'Unsupported action: {action}')
        job_id = self._job_repo.create(
            container_name=name,
            operation=action,
            status='completed',
            duration_ms=ACTION_DURATION_MS,
            metadata={'trigger': 'manual'},
        )
        logger.info('Container %s %s recorded as job %s', name, action, job_id)
        return job_id

    def stop_instance(self, name: str, instance_id: str) -> int:
        job_id = self._job_repo.create(
            container_name=name,
            operation='stop_instance',
            status='completed',
            duration_ms=STOP_INSTANCE_DURATION_MS,
            metadata={'instanceId': instance_id},
        )
        logger.info('Instance %s of %s stop recorded as job %s', instance_id, name, job_id)
        return job_id

    def set_color(self, name: str, color: str | None) -> str | None:
        if not color:
            self._color_repo.delete(name)
            logger.info('Cleared color for %s', name)
            return None
        ok, error = validate_color(color)
        if not ok:
            raise ValidationError(error)
        self._color_repo.upsert(name, color)
        logger.info('Set color for %s to %s', name, color)
        return color

    def list_instances(self, name: str):
        if not self._container_repo.get_by_name(name):
            raise NotFoundError('Container not found')
        return self._runtime.list_instances(name)
