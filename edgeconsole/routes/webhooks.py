from __future__ import annotations

from flask import jsonify

from edgeconsole.routes.common import json_object
from edgeconsole.services.base import parse_id


def register_webhook_routes(router, *, webhook_service):
    """Register webhook routes."""

    @router.route('GET', '/api/webhooks')
    def list_webhooks():
        webhooks = [webhook.to_dict() for webhook in webhook_service.list_webhooks()]
        return jsonify({'webhooks': webhooks, 'total': len(webhooks)}), 200

    @router.route('POST', '/api/webhooks')
    def create_webhook():
        webhook = webhook_service.create(json_object())
        # The generated secret is shown once, at creation.
        return jsonify(webhook.to_dict(reveal_secret=True)), 200

    @router.route('PUT', '/api/webhooks/{webhook_id}')
    def update_webhook(webhook_id):
        webhook = webhook_service.update(parse_id(webhook_id, 'Webhook'), json_object())
        return jsonify(webhook.to_dict()), 200

    @router.route('DELETE', '/api/webhooks/{webhook_id}')
    def delete_webhook(webhook_id):
        webhook_service.delete(parse_id(webhook_id, 'Webhook'))
        return jsonify({'success': True}), 200

    @router.route('GET', '/api/webhooks/{webhook_id}/deliveries')
    def webhook_deliveries(webhook_id):
        return jsonify(webhook_service.deliveries(parse_id(webhook_id, 'Webhook'))), 200

    @router.route('POST', '/api/webhooks/{webhook_id}/test')
    def test_webhook(webhook_id):
        return jsonify(webhook_service.test(parse_id(webhook_id, 'Webhook'))), 200
