import datetime
import hmac
import logging

from flask import current_app
from werkzeug.security import check_password_hash, generate_password_hash

from backend.errors import Conflict, Forbidden, InvalidCredentials, NotFound, ValidationError, require_text
from backend.extensions import db
from backend.models import USER_ROLES, City, StatusHistory, StatusUpdate, Task, TaskComment, User
from backend.policy import authorize
from backend.services.audit import record_event
from backend.services.transaction import atomic
from backend.session import issue_token

logger = logging.getLogger(__name__)


def verify_password(user, password):
    if not isinstance(password, str):
        return False
    if user.password_is_hashed:
        return check_password_hash(user.password, password)
    return hmac.compare_digest(user.password.encode('utf-8'), password.encode('utf-8'))


def set_password(user, new_password):
    user.password = generate_password_hash(new_password)
    user.password_is_hashed = True


def authenticate(username, password):
    user = User.query.filter_by(username=username).first()
    if not user or not verify_password(user, password):
        logger.warning("Failed login for '%s'", username)
        raise InvalidCredentials()

    with atomic("login"):
        user.last_login_at = datetime.datetime.now()
        record_event("User Login", f"User '{user.username}' logged in", user=user.username)

    expires = current_app.config['JWT_ACCESS_TOKEN_EXPIRES']
    return {
        "token": issue_token(user),
        "expiresIn": int(expires.total_seconds()),
        "role": user.role,
        "username": user.username,
    }


def _get_user(user_id):
    user = db.session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def get_current_user(actor):
    return _get_user(actor.id).to_dict()


def list_users(actor):
    authorize('user.list', actor)
    return [u.to_dict() for u in User.query.order_by(User.id).all()]


def get_user(actor, user_id):
    authorize('user.list', actor)
    return _get_user(user_id).to_dict()


def _is_seed_admin(user):
    return user.is_seed


def _resolve_zone_ref(role, zone_ref):
    """Zone users are bound to one existing zone; admins to the sentinel."""
    if role != 'user':
        return current_app.config['ADMIN_ZONE_REF']
    zone_ref = require_text(zone_ref, 'zoneRef')
    if not City.query.filter_by(identifier=zone_ref).first():
        raise ValidationError(f"Unknown zone '{zone_ref}'")
    return zone_ref


def _check_username_free(username, exclude_id=None):
    query = User.query.filter_by(username=username)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    if query.first():
        raise Conflict("Username already exists")


def create_user(actor, data):
    authorize('user.manage', actor)

    username = require_text(data.get('username'), 'username')
    password = require_text(data.get('password'), 'password', strip=False)
    email = require_text(data.get('email'), 'email', required=False) or None
    role = data.get('role', 'user')
    if role not in USER_ROLES:
        raise ValidationError(f"role must be one of {', '.join(USER_ROLES)}")

    zone_ref = _resolve_zone_ref(role, data.get('zoneRef'))
    _check_username_free(username)

    user = User(username=username, role=role, zone_ref=zone_ref, email=email)
    set_password(user, password)
    with atomic("create user"):
        db.session.add(user)
        record_event("User Created", f"User '{username}' created as {role}", user=actor.username)
    return user.to_dict()


def update_user(actor, user_id, data):
    authorize('user.manage', actor)
    user = _get_user(user_id)

    if 'username' in data:
        username = require_text(data.get('username'), 'username')
        _check_username_free(username, exclude_id=user.id)
        user.username = username

    role = data.get('role', user.role)
    if role not in USER_ROLES:
        raise ValidationError(f"role must be one of {', '.join(USER_ROLES)}")
    if role != user.role and _is_seed_admin(user):
        raise Forbidden("The role of the main admin cannot be changed")

    if 'role' in data or 'zoneRef' in data:
        user.zone_ref = _resolve_zone_ref(role, data.get('zoneRef', user.zone_ref))
        user.role = role

    if 'email' in data:
        user.email = require_text(data.get('email'), 'email', required=False) or None

    password = require_text(data.get('password'), 'password', required=False, strip=False)
    if password:
        set_password(user, password)

    with atomic("update user"):
        record_event("User Updated", f"User '{user.username}' updated", user=actor.username)
    return user.to_dict()


def _has_history(user):
    owned = (
        StatusUpdate.query.filter_by(updated_by=user.id),
        StatusHistory.query.filter_by(updated_by=user.id),
        TaskComment.query.filter_by(user_id=user.id),
        Task.query.filter_by(created_by=user.id),
    )
    return any(q.first() is not None for q in owned)


def delete_user(actor, user_id):
    authorize('user.manage', actor)
    user = _get_user(user_id)

    if user.id == actor.id:
        raise Forbidden("You cannot delete your own account")
    if _is_seed_admin(user):
        raise Forbidden("The main admin cannot be deleted")
    if _has_history(user):
        raise Conflict("User has recorded activity and cannot be deleted")

    with atomic("delete user"):
        db.session.delete(user)
        record_event("User Deleted", f"User '{user.username}' deleted", user=actor.username)


def change_password(actor, user_id, current_password, new_password):
    authorize('user.change_password', actor, user_id, "You can only change your own password")
    user = _get_user(user_id)

    if not actor.is_superadmin:
        if not current_password:
            raise ValidationError("currentPassword is required")
        if not verify_password(user, current_password):
            raise ValidationError("Current password is incorrect")
    new_password = require_text(new_password, 'newPassword', strip=False)

    set_password(user, new_password)
    with atomic("change password"):
        record_event("Password Changed", f"Password changed for '{user.username}'", user=actor.username)
