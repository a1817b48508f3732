from __future__ import annotations

from flask import jsonify

from edgeconsole.routes.common import json_object


def register_container_routes(router, *, container_service):
    """Register container registry routes."""

    @router.route('GET', '/api/containers')
    def list_containers():
        containers = [container.to_dict() for container in container_service.list_containers()]
        return jsonify({'containers': containers, 'total': len(containers)}), 200

    @router.route('POST', '/api/containers/register')
    def register_container():
        container = container_service.register(json_object())
        return jsonify({'success': True, 'container': container.to_dict()}), 200

    @router.route('GET', '/api/containers/{name}/instances')
    def list_instances(name):
        instances = [instance.to_dict() for instance in container_service.list_instances(name)]
        return jsonify({'instances': instances, 'total': len(instances)}), 200

    @router.route('DELETE', '/api/containers/{name}/instances/{instance_id}')
    def stop_instance(name, instance_id):
        job_id = container_service.stop_instance(name, instance_id)
        return jsonify({
            'success': True,
            'message': f'Instance {instance_id} stop initiated',
            'jobId': job_id,
        }), 200

    def action_view(action):
        def view(name):
            job_id = container_service.perform_action(name, action)
            return jsonify({
                'success': True,
                'message': f'Container {name} {action} initiated',
                'jobId': job_id,
            }), 200
        view.__name__ = f'{action}_container'
        return view

    router.add('POST', '/api/containers/{name}/restart', action_view('restart'))
    router.add('POST', '/api/containers/{name}/stop', action_view('stop'))

    @router.route('PUT', '/api/containers/{name}/color')
    def update_color(name):
        color = container_service.set_color(name, json_object().get('color'))
        return jsonify({'success': True, 'color': color}), 200


def register_container_item_routes(router, *, container_service):
    """Register single-container routes; these go after every sub-resource route."""

    @router.route('GET', '/api/containers/{name}')
    def get_container(name):
        return jsonify({'container': container_service.get_container(name).to_dict()}), 200

    @router.route('DELETE', '/api/containers/{name}')
    def delete_container(name):
        container_service.delete(name)
        return jsonify({'success': True, 'message': f'Container {name} deleted'}), 200
