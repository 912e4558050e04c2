from flask import Blueprint

from backend.controllers.admin_controller import AdminController
from backend.session import auth_required

admin_bp = Blueprint('admin', __name__)

@admin_bp.route('/auth/login', methods=['POST'])
def login():
    return AdminController.login()

@admin_bp.route('/users/me', methods=['GET'])
@auth_required
def profile(actor):
    return AdminController.get_profile(actor)

@admin_bp.route('/users', methods=['GET'])
@auth_required
def get_users(actor):
    return AdminController.get_users(actor)

@admin_bp.route('/users', methods=['POST'])
@auth_required
def create_user(actor):
    return AdminController.create_user(actor)

@admin_bp.route('/users/<int:user_id>', methods=['GET'])
@auth_required
def get_user(actor, user_id):
    return AdminController.get_user(actor, user_id)

@admin_bp.route('/users/<int:user_id>', methods=['PUT'])
@auth_required
def update_user(actor, user_id):
    return AdminController.update_user(actor, user_id)

@admin_bp.route('/users/<int:user_id>', methods=['DELETE'])
@auth_required
def delete_user(actor, user_id):
    return AdminController.delete_user(actor, user_id)

@admin_bp.route('/users/<int:user_id>/change-password', methods=['PUT'])
@auth_required
def change_password(actor, user_id):
    return AdminController.change_password(actor, user_id)

@admin_bp.route('/logs', methods=['GET'])
@auth_required
def get_logs(actor):
    return AdminController.get_logs(actor)
