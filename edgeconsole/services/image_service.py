from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from edgeconsole.repositories import JobRepository
from edgeconsole.services import demo_data
from edgeconsole.services.base import ValidationError
from edgeconsole.utils.timestamps import utc_now_iso
from edgeconsole.utils.validators import validate_optional_string

logger = logging.getLogger(__name__)


def _check_strings(payload: Mapping[str, Any], fields: tuple[str, ...]) -> None:
    for field in fields:
        ok, error = validate_optional_string(payload.get(field), field)
        if not ok:
            raise ValidationError(error)


class ImageService:
    """Image, build and rollout records. The registry is not wired up; data is fixed."""

    def __init__(self, job_repo: JobRepository):
        self._job_repo = job_repo

    def image_info(self, name: str) -> dict[str, Any]:
        return demo_data.image_info(name)

    def rollouts(self, name: str) -> dict[str, Any]:
        items = demo_data.rollouts(name)
        return {'rollouts': items, 'total': len(items)}

    def builds(self, name: str) -> dict[str, Any]:
        items = demo_data.builds(name)
        return {'builds': items, 'total': len(items)}

    def rebuild(self, name: str, payload: Optional[Mapping[str, Any]] = None, triggered_by: str = 'manual') -> dict[str, Any]:
        payload = payload or {}
        build_args = payload.get('buildArgs')
        if build_args is not None and not isinstance(build_args, dict):
            raise ValidationError('buildArgs must be an object')
        _check_strings(payload, ('tag',))
        tag = payload.get('tag') or 'latest'
        job_id = self._job_repo.create(
            container_name=name,
            operation='rebuild',
            status='pending',
            metadata={'trigger': 'manual', 'tag': tag, 'buildArgs': build_args or {}},
        )
        logger.info('Queued rebuild of %s:%s as job %s', name, tag, job_id)
        return {
            'id': f'build-{name}-{job_id}',
            'containerName': name,
            'status': 'pending',
            'tag': tag,
            'startedAt': utc_now_iso(),
            'triggeredBy': triggered_by,
            'jobId': job_id,
        }

    def rollback(self, name: str, payload: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
        payload = payload or {}
        _check_strings(payload, ('targetDigest', 'targetTag', 'reason'))
        target_digest = payload.get('targetDigest')
        if not target_digest:
            raise ValidationError('Missing required field: targetDigest')
        job_id = self._job_repo.create(
            container_name=name,
            operation='rollback',
            status='completed',
            metadata={
                'trigger': 'manual',
                'targetDigest': target_digest,
                'targetTag': payload.get('targetTag'),
                'reason': payload.get('reason'),
            },
        )
        logger.info('Recorded rollback of %s to %s as job %s', name, target_digest, job_id)
        return {'success': True, 'rolloutId': f'rollout-{name}-{job_id}'}
