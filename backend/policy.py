# Resources: zone.update_status -> City, task.* -> Task, user.change_password -> target user id
import logging

from backend.errors import Forbidden

logger = logging.getLogger(__name__)

ADMIN_ACTIONS = {
    'user.list',
    'zone.create',
    'task.create',
    'report.view',
    'log.view',
}

SUPERADMIN_ACTIONS = {
    'user.manage',
}

ZONE_SCOPED_TASK_ACTIONS = {
    'task.view',
    'task.update_status',
    'task.comment',
}


def _task_assigned_to(task, zone_ref):
    return any(a.zone_ref == zone_ref for a in task.assignments)


def can(action, actor, resource=None):
    if actor is None:
        return False

    if action in SUPERADMIN_ACTIONS:
        return actor.is_superadmin

    if action in ADMIN_ACTIONS:
        return actor.is_admin

    if action == 'zone.update_status':
        if actor.is_admin:
            return True
        return resource is not None and resource.identifier == actor.zone_ref

    if action in ZONE_SCOPED_TASK_ACTIONS:
        if actor.is_admin:
            return True
        return resource is not None and _task_assigned_to(resource, actor.zone_ref)

    if action == 'task.delete':
        if actor.is_superadmin:
            return True
        if actor.role == 'admin':
            return resource is not None and resource.created_by == actor.id
        return False

    if action == 'user.change_password':
        # resource is the target user id
        return actor.is_superadmin or resource == actor.id

    raise ValueError(f"Unknown action: {action}")


def authorize(action, actor, resource=None, message=None):
    if not can(action, actor, resource):
        logger.warning("Denied %s for %r", action, actor)
        raise Forbidden(message or "Forbidden")
