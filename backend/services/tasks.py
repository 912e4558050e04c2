import datetime

from backend.errors import NotFound, ValidationError, require_text
from backend.extensions import db
from backend.models import TASK_STATUSES, City, Task, TaskAssignment, TaskComment
from backend.policy import authorize, can
from backend.services.audit import record_event
from backend.services.transaction import atomic


def _get_task(task_id):
    task = db.session.get(Task, task_id)
    if not task:
        raise NotFound("Task not found")
    return task


def _parse_due_date(value):
    if not value:
        return None
    try:
        # Accepts "2024-05-01" as well as a full ISO timestamp
        return datetime.date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError("dueDate must be an ISO date (YYYY-MM-DD)")


def _clean_zone_refs(zone_refs):
    if zone_refs is None:
        return []
    if not isinstance(zone_refs, (list, tuple)) or not all(isinstance(z, str) for z in zone_refs):
        raise ValidationError("assignedZones must be a list of zone identifiers")

    refs = list(dict.fromkeys(zone_refs))
    known = {
        identifier for (identifier,) in
        db.session.query(City.identifier).filter(City.identifier.in_(refs)).all()
    } if refs else set()
    unknown = [r for r in refs if r not in known]
    if unknown:
        raise ValidationError(f"Unknown zones: {', '.join(unknown)}")
    return refs


def _assign(task, zone_ref):
    db.session.add(TaskAssignment(task=task, zone_ref=zone_ref))
    db.session.flush()


def create_task(actor, title, description, due_date=None, zone_refs=None):
    authorize('task.create', actor)

    title = require_text(title, 'title')
    description = require_text(description, 'description', required=False)
    due = _parse_due_date(due_date)
    refs = _clean_zone_refs(zone_refs)

    with atomic("create task"):
        task = Task(
            title=title,
            description=description or '',
            due_date=due,
            status='pending',
            created_by=actor.id,
        )
        db.session.add(task)
        db.session.flush()
        for zone_ref in refs:
            _assign(task, zone_ref)
        record_event("Task Created", f"Task '{title}' assigned to {len(refs)} zone(s)", user=actor.username)

    db.session.refresh(task)
    return task.to_dict()


def list_tasks(actor):
    query = Task.query
    if not actor.is_admin:
        query = query.join(TaskAssignment).filter(TaskAssignment.zone_ref == actor.zone_ref)
    tasks = query.order_by(Task.created_at.desc(), Task.id.desc()).all()
    return [t.to_dict() for t in tasks if can('task.view', actor, t)]


def update_task_status(actor, task_id, status):
    task = _get_task(task_id)
    authorize('task.update_status', actor, task, "You do not have permission to update this task")

    # pending <-> updated, no terminal state
    if status not in TASK_STATUSES:
        raise ValidationError(f"status must be one of {', '.join(TASK_STATUSES)}")

    with atomic("update task status"):
        task.status = status
        record_event("Task Status", f"Task #{task.id} marked {status}", user=actor.username)
    return {"id": task.id, "status": task.status}


def add_comment(actor, task_id, comment):
    task = _get_task(task_id)
    authorize('task.comment', actor, task, "You do not have permission to comment on this task")

    comment = require_text(comment, 'comment')

    entry = TaskComment(task=task, user_id=actor.id, comment=comment)
    with atomic("add comment"):
        db.session.add(entry)
    return entry.to_dict()


def delete_task(actor, task_id):
    task = _get_task(task_id)
    authorize('task.delete', actor, task, "You can only delete tasks you created")

    with atomic("delete task"):
        db.session.delete(task)
        record_event("Task Deleted", f"Task '{task.title}' deleted", user=actor.username)
