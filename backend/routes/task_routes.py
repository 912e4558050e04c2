from flask import Blueprint

from backend.controllers.task_controller import TaskController
from backend.session import auth_required

task_bp = Blueprint('tasks', __name__)

@task_bp.route('/tasks', methods=['GET'])
@auth_required
def get_tasks(actor):
    return TaskController.get_tasks(actor)

@task_bp.route('/tasks', methods=['POST'])
@auth_required
def create_task(actor):
    return TaskController.create_task(actor)

@task_bp.route('/tasks/<int:task_id>/status', methods=['PUT'])
@task_bp.route('/tasks/<int:task_id>', methods=['PUT']) # Legacy path
@auth_required
def update_task_status(actor, task_id):
    return TaskController.update_status(actor, task_id)

@task_bp.route('/tasks/<int:task_id>/comments', methods=['POST'])
@auth_required
def add_comment(actor, task_id):
    return TaskController.add_comment(actor, task_id)

@task_bp.route('/tasks/<int:task_id>', methods=['DELETE'])
@auth_required
def delete_task(actor, task_id):
    return TaskController.delete_task(actor, task_id)
