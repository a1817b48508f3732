from __future__ import annotations

from flask import jsonify, request

from edgeconsole.services.base import parse_id


def register_job_routes(router, *, job_service):
    """Register job history routes."""

    @router.route('GET', '/api/jobs')
    def list_jobs():
        return jsonify(job_service.list_jobs(
            status=request.args.get('status'),
            container=request.args.get('container'),
            page=request.args.get('page'),
            page_size=request.args.get('pageSize'),
        )), 200

    @router.route('GET', '/api/jobs/stats')
    def job_stats():
        return jsonify(job_service.stats()), 200

    @router.route('GET', '/api/jobs/{job_id}')
    def get_job(job_id):
        return jsonify(job_service.get_job(parse_id(job_id, 'Job')).to_dict()), 200

    @router.route('POST', '/api/jobs/{job_id}/cancel')
    def cancel_job(job_id):
        return jsonify(job_service.cancel(parse_id(job_id, 'Job')).to_dict()), 200

    @router.route('POST', '/api/jobs/{job_id}/retry')
    def retry_job(job_id):
        return jsonify(job_service.retry(parse_id(job_id, 'Job')).to_dict()), 200
