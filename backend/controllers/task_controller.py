from flask import jsonify, request

from backend.services import tasks


def _payload():
    return request.get_json(silent=True) or {}


class TaskController:
    @staticmethod
    def get_tasks(actor):
        return jsonify(tasks.list_tasks(actor)), 200

    @staticmethod
    def create_task(actor):
        data = _payload()
        task = tasks.create_task(
            actor,
            title=data.get('title'),
            description=data.get('description'),
            due_date=data.get('dueDate'),
            zone_refs=data.get('assignedZones', []),
        )
        return jsonify(task), 201

    @staticmethod
    def update_status(actor, task_id):
        return jsonify(tasks.update_task_status(actor, task_id, _payload().get('status'))), 200

    @staticmethod
    def add_comment(actor, task_id):
        return jsonify(tasks.add_comment(actor, task_id, _payload().get('comment'))), 201

    @staticmethod
    def delete_task(actor, task_id):
        tasks.delete_task(actor, task_id)
        return jsonify({"message": "Task deleted"}), 200
