from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from edgeconsole.repositories import JobRepository
from edgeconsole.services import demo_data
from edgeconsole.services.base import ValidationError
from edgeconsole.utils.timestamps import utc_now_iso
from edgeconsole.utils.validators import validate_duration, validate_env_var_key, validate_instance_type

logger = logging.getLogger(__name__)

UPDATE_CONFIG_DURATION_MS = 50
MAX_INSTANCES_WARNING = 100


def _encode(value: Any) -> str:
    return json.dumps(value, separators=(',', ':'))


def diff_configs(current: Mapping[str, Any], proposed: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Compare proposed keys with the current config by their JSON encoding."""
    changes = []
    for key, new_value in proposed.items():
        old_encoded = _encode(current[key]) if key in current else 'undefined'
        new_encoded = _encode(new_value)
        if old_encoded != new_encoded:
            changes.append({
                'field': key,
                'oldValue': old_encoded,
                'newValue': new_encoded,
                'type': 'modified' if key in current else 'added',
            })
    return changes


class ConfigService:
    """Container configuration: read, update, validate and diff."""

    def __init__(self, job_repo: JobRepository):
        self._job_repo = job_repo

    def get_config(self, name: str) -> dict[str, Any]:
        return demo_data.container_config(name)

    def update_config(self, name: str, updates: Any) -> dict[str, Any]:
        if not isinstance(updates, dict):
            raise ValidationError('Configuration update must be a JSON object')
        self._job_repo.create(
            container_name=name,
            operation='update_config',
            status='completed',
            duration_ms=UPDATE_CONFIG_DURATION_MS,
            metadata=updates,
        )
        logger.info('Recorded configuration update for %s (%s)', name, ', '.join(sorted(updates)))
        return {'name': name, **updates, 'updatedAt': utc_now_iso()}

    def validate(self, updates: Any) -> dict[str, Any]:
        if not isinstance(updates, dict):
            raise ValidationError('Configuration must be a JSON object')
        errors: list[dict[str, str]] = []
        warnings: list[dict[str, str]] = []

        if 'maxInstances' in updates:
            max_instances = updates['maxInstances']
            if isinstance(max_instances, bool) or not isinstance(max_instances, (int, float)):
                errors.append({'field': 'maxInstances', 'message': 'Must be a number'})
            else:
                if max_instances < 1:
                    errors.append({'field': 'maxInstances', 'message': 'Must be at least 1'})
                if max_instances > MAX_INSTANCES_WARNING:
                    warnings.append({'field': 'maxInstances', 'message': 'High instance count may increase costs'})

        if 'instanceType' in updates:
            ok, error = validate_instance_type(updates['instanceType'])
            if not ok:
                errors.append({'field': 'instanceType', 'message': error})

        env_vars = updates.get('envVars') or []
        if not isinstance(env_vars, list):
            raise ValidationError('envVars must be a list')
        for env_var in env_vars:
            key = env_var.get('key') if isinstance(env_var, dict) else None
            ok, error = validate_env_var_key(key)
            if not ok:
                errors.append({'field': f'envVars.{key}', 'message': error})

        health_check = updates.get('healthCheck')
        if isinstance(health_check, dict):
            for field in ('intervalSeconds', 'timeoutSeconds'):
                value = health_check.get(field)
                if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0):
                    errors.append({'field': f'healthCheck.{field}', 'message': 'Must be a positive number'})

        sleep = updates.get('sleep')
        if isinstance(sleep, dict) and sleep.get('sleepAfter') is not None:
            ok, error = validate_duration(sleep['sleepAfter'], 'sleep.sleepAfter')
            if not ok:
                errors.append({'field': 'sleep.sleepAfter', 'message': error})

        return {'valid': not errors, 'errors': errors, 'warnings': warnings}

    def diff(self, name: str, proposed: Any) -> list[dict[str, Any]]:
        if not isinstance(proposed, dict):
            raise ValidationError('Configuration must be a JSON object')
        return diff_configs(self.get_config(name), proposed)
