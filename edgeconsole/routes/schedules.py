from __future__ import annotations

from flask import jsonify, request

from edgeconsole.routes.common import json_object
from edgeconsole.services.base import parse_id


def register_schedule_routes(router, *, schedule_service):
    """Register scheduled action routes."""

    @router.route('GET', '/api/schedules')
    def list_schedules():
        schedules = [s.to_dict() for s in schedule_service.list_schedules(request.args.get('container'))]
        return jsonify({'schedules': schedules, 'total': len(schedules)}), 200

    @router.route('POST', '/api/schedules')
    def create_schedule():
        return jsonify(schedule_service.create(json_object()).to_dict()), 200

    @router.route('GET', '/api/schedules/{schedule_id}')
    def get_schedule(schedule_id):
        return jsonify(schedule_service.get_schedule(parse_id(schedule_id, 'Schedule')).to_dict()), 200

    @router.route('PUT', '/api/schedules/{schedule_id}')
    def update_schedule(schedule_id):
        schedule = schedule_service.update(parse_id(schedule_id, 'Schedule'), json_object())
        return jsonify(schedule.to_dict()), 200

    @router.route('DELETE', '/api/schedules/{schedule_id}')
    def delete_schedule(schedule_id):
        schedule_service.delete(parse_id(schedule_id, 'Schedule'))
        return jsonify({'success': True}), 200

    @router.route('GET', '/api/schedules/{schedule_id}/history')
    def schedule_history(schedule_id):
        return jsonify(schedule_service.history(parse_id(schedule_id, 'Schedule'))), 200

    @router.route('POST', '/api/schedules/{schedule_id}/trigger')
    def trigger_schedule(schedule_id):
        job_id, schedule = schedule_service.trigger(parse_id(schedule_id, 'Schedule'))
        return jsonify({'success': True, 'jobId': job_id, 'schedule': schedule.to_dict()}), 200
