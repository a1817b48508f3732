from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from edgeconsole.models import Job, ScheduledAction
from edgeconsole.repositories import JobRepository, ScheduleRepository
from edgeconsole.services.base import NotFoundError, ValidationError
from edgeconsole.utils.cron import next_run_time
from edgeconsole.utils.timestamps import utc_now_iso
from edgeconsole.utils.validators import (
    sanitize_string,
    validate_bool,
    validate_container_name,
    validate_cron_expression,
    validate_optional_string,
    validate_required_fields,
    validate_schedule_action,
    validate_timezone,
)

logger = logging.getLogger(__name__)

_EXECUTION_STATUS = {'completed': 'success', 'failed': 'failed'}


def _status_for(enabled: bool) -> str:
    return 'active' if enabled else 'paused'


def _execution(job: Job) -> dict[str, Any]:
    return {
        'id': job.id,
        'scheduleId': job.metadata.get('scheduleId'),
        'scheduleName': job.metadata.get('scheduleName'),
        'containerName': job.container_name,
        'action': job.operation,
        'status': _EXECUTION_STATUS.get(job.status, 'running'),
        'startedAt': job.started_at,
        'completedAt': job.completed_at,
        'duration': job.duration_ms,
        'error': job.error_message,
    }


class ScheduleService:
    """Schedule business logic."""

    def __init__(self, schedule_repo: ScheduleRepository, job_repo: JobRepository):
        self._schedule_repo = schedule_repo
        self._job_repo = job_repo

    @staticmethod
    def _validate(payload: Mapping[str, Any]) -> None:
        if 'containerName' in payload:
            ok, error = validate_container_name(payload['containerName'])
            if not ok:
                raise ValidationError(error)
        for field in ('name', 'description'):
            ok, error = validate_optional_string(payload.get(field), field)
            if not ok:
                raise ValidationError(error)
        if 'enabled' in payload:
            ok, error = validate_bool(payload['enabled'], 'enabled')
            if not ok:
                raise ValidationError(error)
        if 'action' in payload:
            ok, error = validate_schedule_action(payload['action'])
            if not ok:
                raise ValidationError(error)
        if 'cronExpression' in payload:
            ok, error = validate_cron_expression(payload['cronExpression'])
            if not ok:
                raise ValidationError(error)
        if 'timezone' in payload:
            ok, error = validate_timezone(payload['timezone'])
            if not ok:
                raise ValidationError(error)
        if 'actionParams' in payload and payload['actionParams'] is not None:
            if not isinstance(payload['actionParams'], dict):
                raise ValidationError('actionParams must be an object')

    def list_schedules(self, container: Optional[str] = None) -> list[ScheduledAction]:
        return [ScheduledAction.from_row(row) for row in self._schedule_repo.list_filtered(container)]

    def get_schedule(self, schedule_id: int) -> ScheduledAction:
        row = self._schedule_repo.get_by_id(schedule_id)
        if not row:
            raise NotFoundError('Schedule not found')
        return ScheduledAction.from_row(row)

    def create(self, payload: Mapping[str, Any]) -> ScheduledAction:
        ok, error = validate_required_fields(payload, ['containerName', 'name', 'action', 'cronExpression'])
        if not ok:
            raise ValidationError(error)
        payload = {'timezone': 'UTC', **payload}
        if payload['timezone'] is None:
            payload['timezone'] = 'UTC'
        self._validate(payload)

        enabled = payload.get('enabled', True)
        schedule_id = self._schedule_repo.create(
            container_name=payload['containerName'],
            name=sanitize_string(payload['name']),
            description=payload.get('description'),
            action_type=payload['action'],
            action_params=payload.get('actionParams'),
            cron_expression=payload['cronExpression'],
            timezone=payload['timezone'],
            enabled=enabled,
            status=_status_for(enabled),
            next_run_at=next_run_time(payload['cronExpression'], payload['timezone']),
        )
        logger.info('Created schedule %s (%s %s)', schedule_id, payload['action'], payload['containerName'])
        return self.get_schedule(schedule_id)

    def update(self, schedule_id: int, payload: Mapping[str, Any]) -> ScheduledAction:
        current = self.get_schedule(schedule_id)
        self._validate(payload)

        fields: dict[str, Any] = {}
        if 'containerName' in payload:
            fields['container_name'] = payload['containerName']
        if 'name' in payload:
            name = sanitize_string(payload['name'] or '')
            if not name:
                raise ValidationError('Missing required field: name')
            fields['name'] = name
        if 'description' in payload:
            fields['description'] = payload['description']
        if 'action' in payload:
            fields['action_type'] = payload['action']
        if 'actionParams' in payload:
            fields['action_params'] = payload['actionParams'] or {}
        if 'cronExpression' in payload:
            fields['cron_expression'] = payload['cronExpression']
        if 'timezone' in payload:
            fields['timezone'] = payload['timezone']

        enabled = payload['enabled'] if 'enabled' in payload else current.enabled
        fields['enabled'] = enabled
        fields['status'] = _status_for(enabled)
        fields['next_run_at'] = next_run_time(
            fields.get('cron_expression', current.cron_expression),
            fields.get('timezone', current.timezone),
        )

        self._schedule_repo.update(schedule_id, fields)
        logger.info('Updated schedule %s', schedule_id)
        return self.get_schedule(schedule_id)

    def delete(self, schedule_id: int) -> None:
        if self._schedule_repo.delete(schedule_id) == 0:
            raise NotFoundError('Schedule not found')
        logger.info('Deleted schedule %s', schedule_id)

    def history(self, schedule_id: int) -> dict[str, Any]:
        self.get_schedule(schedule_id)
        executions = [_execution(Job.from_row(row)) for row in self._job_repo.list_by_schedule(schedule_id)]
        return {'executions': executions, 'total': len(executions)}

    def trigger(self, schedule_id: int) -> tuple[int, ScheduledAction]:
        schedule = self.get_schedule(schedule_id)
        job_id = self._job_repo.create(
            container_name=schedule.container_name,
            operation=schedule.action,
            status='completed',
            duration_ms=0,
            metadata={
                'scheduleId': schedule.id,
                'scheduleName': schedule.name,
                'trigger': 'manual',
            },
        )
        self._schedule_repo.record_run(
            schedule_id,
            last_run_at=utc_now_iso(),
            status='success',
            next_run_at=next_run_time(schedule.cron_expression, schedule.timezone),
        )
        logger.info('Triggered schedule %s as job %s', schedule_id, job_id)
        return job_id, self.get_schedule(schedule_id)

    def process_due(self) -> list[ScheduledAction]:
        """Log the schedules that are due now. Nothing is executed or advanced."""
        due = [ScheduledAction.from_row(row) for row in self._schedule_repo.list_due(utc_now_iso())]
        logger.info('Found %d due scheduled actions', len(due))
        for schedule in due:
            logger.info(
                'Processing scheduled action: %s',
                {'id': schedule.id, 'containerName': schedule.container_name, 'action': schedule.action,
                 'cronExpression': schedule.cron_expression, 'nextRunAt': schedule.next_run_at},
            )
        return due
