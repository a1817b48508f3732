from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def load_json(value: Any, default: Any = None) -> Any:
    """Parse a JSON column, tolerating NULL and corrupt values."""
    if value is None or value == '':
        return default
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        logger.warning('Ignoring malformed JSON column value: %r', value)
        return default


def dump_json(value: Any) -> str | None:
    if value is None:
        return None
    return json.dumps(value)
