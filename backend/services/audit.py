from backend.extensions import db
from backend.models import SystemLog
from backend.policy import authorize

DEFAULT_LOG_LIMIT = 50


def record_event(event, description, user="System"):
    # Joins the caller's transaction; committed together with the change it describes
    db.session.add(SystemLog(event=event, description=description[:255], user=user))


def list_logs(actor, limit=DEFAULT_LOG_LIMIT):
    authorize('log.view', actor)
    logs = SystemLog.query.order_by(SystemLog.timestamp.desc(), SystemLog.id.desc()).limit(limit).all()
    return [l.to_dict() for l in logs]
