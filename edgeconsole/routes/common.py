from __future__ import annotations

from typing import Any

from flask import request
from flask_login import current_user

from edgeconsole.services.base import ValidationError


def json_body() -> Any:
    """Parsed request body; an empty body reads as ``{}``."""
    data = request.get_json(force=True, silent=True)
    if data is None:
        if request.get_data(cache=True).strip():
            raise ValidationError('Invalid JSON body')
        return {}
    return data


def json_object() -> dict[str, Any]:
    data = json_body()
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def current_identity() -> str | None:
    return getattr(current_user, 'email', None)
