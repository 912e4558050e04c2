from flask import jsonify, request

from backend.errors import ValidationError
from backend.services import accounts
from backend.services.audit import DEFAULT_LOG_LIMIT, list_logs


def _payload():
    return request.get_json(silent=True) or {}


class AdminController:
    # --- Auth ---
    @staticmethod
    def login():
        data = _payload()
        username = data.get('username')
        password = data.get('password')
        if not username or not password:
            raise ValidationError("username and password are required")
        if not isinstance(username, str) or not isinstance(password, str):
            raise ValidationError("username and password must be strings")

        session = accounts.authenticate(username, password)
        return jsonify(session), 200

    @staticmethod
    def get_profile(actor):
        return jsonify(accounts.get_current_user(actor)), 200

    @staticmethod
    def change_password(actor, user_id):
        data = _payload()
        accounts.change_password(
            actor,
            user_id,
            current_password=data.get('currentPassword'),
            new_password=data.get('newPassword'),
        )
        return jsonify({"message": "Password changed successfully"}), 200

    # --- User Management ---
    @staticmethod
    def get_users(actor):
        return jsonify(accounts.list_users(actor)), 200

    @staticmethod
    def get_user(actor, user_id):
        return jsonify(accounts.get_user(actor, user_id)), 200

    @staticmethod
    def create_user(actor):
        return jsonify(accounts.create_user(actor, _payload())), 201

    @staticmethod
    def update_user(actor, user_id):
        return jsonify(accounts.update_user(actor, user_id, _payload())), 200

    @staticmethod
    def delete_user(actor, user_id):
        accounts.delete_user(actor, user_id)
        return jsonify({"message": "User deleted"}), 200

    # --- Logs ---
    @staticmethod
    def get_logs(actor):
        limit = request.args.get('limit', DEFAULT_LOG_LIMIT, type=int)
        return jsonify(list_logs(actor, max(1, min(limit, 500)))), 200
