from __future__ import annotations

import logging
import secrets
from typing import Any, Mapping
from urllib.parse import urlsplit

from edgeconsole.models import Webhook
from edgeconsole.repositories import WebhookRepository
from edgeconsole.services.base import NotFoundError, ValidationError
from edgeconsole.utils.timestamps import utc_now_iso
from edgeconsole.utils.validators import (
    sanitize_string,
    validate_bool,
    validate_optional_string,
    validate_url,
    validate_webhook_events,
)

logger = logging.getLogger(__name__)

SECRET_PREFIX = 'whsec_'


def generate_secret() -> str:
    return SECRET_PREFIX + secrets.token_hex(24)


class WebhookService:
    """Webhook subscriptions. Deliveries are simulated; nothing is sent."""

    def __init__(self, webhook_repo: WebhookRepository):
        self._webhook_repo = webhook_repo

    def list_webhooks(self) -> list[Webhook]:
        return [Webhook.from_row(row) for row in self._webhook_repo.list_all()]

    def get_webhook(self, webhook_id: int) -> Webhook:
        row = self._webhook_repo.get_by_id(webhook_id)
        if not row:
            raise NotFoundError('Webhook not found')
        return Webhook.from_row(row)

    @staticmethod
    def _check_url(url: Any) -> None:
        ok, error = validate_url(url)
        if not ok:
            raise ValidationError(error)

    @staticmethod
    def _check_events(events: Any) -> None:
        ok, error = validate_webhook_events(events)
        if not ok:
            raise ValidationError(error)

    @staticmethod
    def _check_headers(headers: Any) -> None:
        if headers is None:
            return
        if not isinstance(headers, dict) or not all(isinstance(v, str) for v in headers.values()):
            raise ValidationError('headers must be an object of strings')

    @staticmethod
    def _check_scalars(payload: Mapping[str, Any]) -> None:
        for field in ('name', 'secret', 'containerFilter'):
            ok, error = validate_optional_string(payload.get(field), field)
            if not ok:
                raise ValidationError(error)
        if 'enabled' in payload:
            ok, error = validate_bool(payload['enabled'], 'enabled')
            if not ok:
                raise ValidationError(error)

    def create(self, payload: Mapping[str, Any]) -> Webhook:
        url = payload.get('url')
        if not url:
            raise ValidationError('Missing required field: url')
        self._check_url(url)
        self._check_scalars(payload)
        events = payload.get('events')
        self._check_events(events)
        headers = payload.get('headers')
        self._check_headers(headers)

        name = sanitize_string(payload.get('name') or '') or urlsplit(url).hostname
        webhook_id = self._webhook_repo.create(
            name=name,
            url=url,
            events=list(events),
            secret=payload.get('secret') or generate_secret(),
            container_filter=payload.get('containerFilter'),
            headers=headers,
            enabled=payload.get('enabled', True),
        )
        logger.info('Created webhook %s for %s', webhook_id, url)
        return self.get_webhook(webhook_id)

    def update(self, webhook_id: int, payload: Mapping[str, Any]) -> Webhook:
        self.get_webhook(webhook_id)
        self._check_scalars(payload)
        fields: dict[str, Any] = {}
        if 'url' in payload:
            self._check_url(payload['url'])
            fields['url'] = payload['url']
        if 'events' in payload:
            self._check_events(payload['events'])
            fields['events'] = list(payload['events'])
        if 'headers' in payload:
            self._check_headers(payload['headers'])
            fields['headers'] = payload['headers'] or {}
        if 'name' in payload:
            fields['name'] = sanitize_string(payload['name'] or '') or None
        if 'containerFilter' in payload:
            fields['container_filter'] = payload['containerFilter']
        if 'secret' in payload:
            fields['secret'] = payload['secret'] or generate_secret()
        if 'enabled' in payload:
            fields['enabled'] = payload['enabled']

        self._webhook_repo.update(webhook_id, fields)
        logger.info('Updated webhook %s (%s)', webhook_id, ', '.join(sorted(fields)) or 'no fields')
        return self.get_webhook(webhook_id)

    def delete(self, webhook_id: int) -> None:
        if self._webhook_repo.delete(webhook_id) == 0:
            raise NotFoundError('Webhook not found')
        logger.info('Deleted webhook %s', webhook_id)

    def deliveries(self, webhook_id: int) -> dict[str, Any]:
        self.get_webhook(webhook_id)
        return {'deliveries': [], 'total': 0}

    def test(self, webhook_id: int) -> dict[str, Any]:
        webhook = self.get_webhook(webhook_id)
        self._webhook_repo.record_trigger(webhook_id, 200)
        logger.info('Simulated test delivery for webhook %s', webhook_id)
        return {
            'success': True,
            'statusCode': 200,
            'message': f'Test event delivered to {webhook.url}',
            'deliveredAt': utc_now_iso(),
        }
