from __future__ import annotations

import logging
from typing import Any, Optional

from edgeconsole.models import Job
from edgeconsole.models.job import CANCELLABLE_STATUSES, JOB_STATUSES, RETRYABLE_STATUSES
from edgeconsole.repositories import JobRepository
from edgeconsole.services.base import ConflictError, NotFoundError, ValidationError
from edgeconsole.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def _int_param(raw: Optional[str], field: str, default: int, minimum: int, maximum: Optional[int] = None) -> int:
    if raw is None or raw == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f'{field} must be an integer') from None
    if value < minimum or (maximum is not None and value > maximum):
        bound = f'between {minimum} and {maximum}' if maximum is not None else f'at least {minimum}'
        raise ValidationError(f'{field} must be {bound}')
    return value


class JobService:
    """Job history: listing, stats, cancel and retry."""

    def __init__(self, job_repo: JobRepository):
        self._job_repo = job_repo

    def list_jobs(
        self,
        *,
        status: Optional[str] = None,
        container: Optional[str] = None,
        page: Optional[str] = None,
        page_size: Optional[str] = None,
    ) -> dict[str, Any]:
        statuses = [item.strip() for item in status.split(',') if item.strip()] if status else []
        unknown = [item for item in statuses if item not in JOB_STATUSES]
        if unknown:
            raise ValidationError(f"Unknown job status: {', '.join(unknown)}")
        page_number = _int_param(page, 'page', 1, 1)
        size = _int_param(page_size, 'pageSize', DEFAULT_PAGE_SIZE, 1, MAX_PAGE_SIZE)

        rows = self._job_repo.list_filtered(
            statuses=statuses,
            container_name=container,
            limit=size,
            offset=(page_number - 1) * size,
        )
        total = self._job_repo.count(statuses=statuses, container_name=container)
        return {
            'jobs': [Job.from_row(row).to_dict() for row in rows],
            'total': total,
            'page': page_number,
            'pageSize': size,
        }

    def stats(self) -> dict[str, Any]:
        return self._job_repo.stats()

    def get_job(self, job_id: int) -> Job:
        row = self._job_repo.get_by_id(job_id)
        if not row:
            raise NotFoundError('Job not found')
        return Job.from_row(row)

    def cancel(self, job_id: int) -> Job:
        job = self.get_job(job_id)
        if job.status not in CANCELLABLE_STATUSES:
            raise ConflictError(f'Job {job_id} cannot be cancelled from status {job.status}')
        self._job_repo.set_status(job_id, 'cancelled', utc_now_iso())
        logger.info('Cancelled job %s', job_id)
        return self.get_job(job_id)

    def retry(self, job_id: int) -> Job:
        job = self.get_job(job_id)
        if job.status not in RETRYABLE_STATUSES:
            raise ConflictError(f'Job {job_id} cannot be retried from status {job.status}')
        new_id = self._job_repo.create(
            container_name=job.container_name,
            operation=job.operation,
            status='completed',
            duration_ms=job.duration_ms,
            metadata={'trigger': 'manual', 'retryOf': job_id},
        )
        self._job_repo.update_metadata(job_id, {**job.metadata, 'retriedAs': new_id})
        logger.info('Retried job %s as job %s', job_id, new_id)
        return self.get_job(new_id)
