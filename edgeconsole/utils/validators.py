"""Validation helpers for edgeconsole."""
from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from apscheduler.triggers.cron import CronTrigger

from edgeconsole.models.container import INSTANCE_TYPES
from edgeconsole.models.schedule import SCHEDULE_ACTIONS
from edgeconsole.models.webhook import WEBHOOK_EVENTS

METRICS_RANGES = ('1h', '6h', '24h', '7d', '30d')
HTTP_TEST_METHODS = ('GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'HEAD', 'OPTIONS')

ENV_VAR_KEY_PATTERN = re.compile(r'^[A-Z_][A-Z0-9_]*$', re.IGNORECASE)
DURATION_PATTERN = re.compile(r'^\d+[smh]$')


def validate_required_fields(data: Dict, required_fields: List[str]) -> Tuple[bool, str]:
    """Validate that required fields are present in a dictionary."""
    for field in required_fields:
        if field not in data or data[field] is None or data[field] == '':
            return False, f"Missing required field: {field}"
    return True, ""


def validate_container_name(name: str) -> Tuple[bool, str]:
    """Validate container name (letters, digits, '.', '_' and '-')."""
    if not name:
        return False, "Container name is required"
    if not isinstance(name, str):
        return False, "Container name must be a string"
    if len(name) > 255:
        return False, "Container name is too long"
    if not re.match(r'^[a-zA-Z0-9][a-zA-Z0-9_.-]*$', name):
        return False, "Container name must start with alphanumeric and use only letters, numbers, '.', '_' or '-'"
    return True, ""


def validate_optional_string(value: Any, field: str) -> Tuple[bool, str]:
    if value is not None and not isinstance(value, str):
        return False, f"{field} must be a string"
    return True, ""


def validate_bool(value: Any, field: str) -> Tuple[bool, str]:
    if not isinstance(value, bool):
        return False, f"{field} must be true or false"
    return True, ""


def validate_instance_type(instance_type: str) -> Tuple[bool, str]:
    if instance_type not in INSTANCE_TYPES:
        return False, f"instanceType must be one of: {', '.join(INSTANCE_TYPES)}"
    return True, ""


def validate_positive_int(value: Any, field: str, minimum: int = 1, maximum: int | None = None) -> Tuple[bool, str]:
    if isinstance(value, bool) or not isinstance(value, int):
        return False, f"{field} must be an integer"
    if value < minimum:
        return False, f"{field} must be at least {minimum}"
    if maximum is not None and value > maximum:
        return False, f"{field} must be at most {maximum}"
    return True, ""


def validate_duration(value: str, field: str = 'sleepAfter') -> Tuple[bool, str]:
    """Validate a short duration such as ``30s``, ``5m`` or ``1h``."""
    if not isinstance(value, str) or not DURATION_PATTERN.match(value):
        return False, f"{field} must be a duration like 30s, 5m or 1h"
    return True, ""


def validate_color(color: str) -> Tuple[bool, str]:
    """Validate hex color values."""
    if not color:
        return False, 'Color is required'
    if not isinstance(color, str) or not re.match(r'^#[0-9a-fA-F]{6}$', color):
        return False, 'Color must be a hex value like #1ea7e1'
    return True, ''


def validate_url(url: str, schemes: List[str] | None = None) -> Tuple[bool, str]:
    """Validate URL format."""
    if schemes is None:
        schemes = ['http', 'https']
    if not url or not isinstance(url, str):
        return False, "URL is required"
    if len(url) > 2048:
        return False, "URL is too long"
    scheme_pattern = '|'.join(schemes)
    if not re.match(rf'^({scheme_pattern})://[^\s/]+[^\s]*$', url):
        return False, "Invalid URL format"
    return True, ""


def validate_webhook_events(events: Any) -> Tuple[bool, str]:
    if not isinstance(events, list) or not events:
        return False, "events must be a non-empty list"
    unknown = [event for event in events if event not in WEBHOOK_EVENTS]
    if unknown:
        return False, f"Unknown webhook events: {', '.join(map(str, unknown))}"
    return True, ""


def validate_cron_expression(expression: str) -> Tuple[bool, str]:
    """Validate cron expression format."""
    if not expression:
        return False, "Cron expression is required"
    if not isinstance(expression, str):
        return False, "Cron expression must be a string"
    try:
        CronTrigger.from_crontab(expression)
        return True, ""
    except Exception as exc:
        return False, f"Invalid cron expression: {str(exc)}"


def validate_timezone(name: str) -> Tuple[bool, str]:
    if not name or not isinstance(name, str):
        return False, "Timezone is required"
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False, f"Unknown timezone: {name}"
    return True, ""


def validate_schedule_action(action: str) -> Tuple[bool, str]:
    """Validate schedule action type."""
    if not action:
        return False, "Action is required"
    if not isinstance(action, str) or action not in SCHEDULE_ACTIONS:
        return False, f"Action must be one of: {', '.join(SCHEDULE_ACTIONS)}"
    return True, ""


def validate_choice(value: Any, choices: Iterable[str], field: str) -> Tuple[bool, str]:
    choices = tuple(choices)
    if value not in choices:
        return False, f"{field} must be one of: {', '.join(choices)}"
    return True, ""


def validate_env_var_key(key: Any) -> Tuple[bool, str]:
    if not isinstance(key, str) or not ENV_VAR_KEY_PATTERN.match(key):
        return False, "Invalid key format"
    return True, ""


def sanitize_string(value: str, max_length: int = 255) -> str:
    """Sanitize string input."""
    if not value:
        return ""
    value = re.sub(r'[\x00-\x1f\x7f-\x9f]', '', str(value))
    return value[:max_length].strip()
