from __future__ import annotations


class ServiceError(Exception):
    """Business-rule failure carrying the HTTP status it maps to."""

    status = 400

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status

    def to_dict(self) -> dict[str, str]:
        return {'error': self.message}


class ValidationError(ServiceError):
    status = 400


class NotFoundError(ServiceError):
    status = 404


class ConflictError(ServiceError):
    status = 409


def parse_id(raw, resource: str) -> int:
    """Row ids in paths must be integers; anything else cannot name a row."""
    try:
        return int(str(raw), 10)
    except ValueError:
        raise NotFoundError(f'{resource} not found') from None
