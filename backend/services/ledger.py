import datetime

from backend.errors import NotFound, ValidationError, require_text
from backend.extensions import db
from backend.models import ZONE_STATUSES, City, StatusHistory, StatusUpdate
from backend.policy import authorize
from backend.services.audit import record_event
from backend.services.transaction import atomic


def _get_city(city_id):
    city = db.session.get(City, city_id)
    if not city:
        raise NotFound("City not found")
    return city


def update_status(actor, city_id, status, comment):
    try:
        city_id = int(city_id)
    except (TypeError, ValueError):
        raise ValidationError("cityId is required")
    city = _get_city(city_id)
    authorize('zone.update_status', actor, city, "You can only update your assigned city")

    if status not in ZONE_STATUSES:
        raise ValidationError(f"status must be one of {', '.join(ZONE_STATUSES)}")
    comment = require_text(comment, 'comment', required=False) or ''

    now = datetime.datetime.now()
    record = dict(city_id=city.id, status=status, comment=comment, updated_by=actor.id, updated_at=now)
    update = StatusUpdate(**record)
    with atomic("status update"):
        db.session.add(update)
        db.session.add(StatusHistory(**record))
        record_event("Status Updated", f"{city.identifier} marked {status}", user=actor.username)
    return update.to_dict()


def get_history(city_id):
    _get_city(city_id)
    history = (
        StatusHistory.query.filter_by(city_id=city_id)
        .order_by(StatusHistory.updated_at.desc(), StatusHistory.id.desc())
        .all()
    )
    return [h.to_dict() for h in history]
