import logging
import re

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased

from backend.errors import ServerError, require_text
from backend.extensions import db
from backend.models import City, StatusUpdate, User
from backend.policy import authorize
from backend.services.audit import record_event

logger = logging.getLogger(__name__)

PREFIX_LENGTH = 3
SEQUENCE_WIDTH = 3
ALLOCATION_ATTEMPTS = 3

_SEQUENCE = re.compile(r'[0-9]{%d,}' % SEQUENCE_WIDTH)


def identifier_prefix(name):
    # Names shorter than three characters use the whole name
    return name.strip()[:PREFIX_LENGTH].upper()


def next_identifier(prefix):
    existing = db.session.query(City.identifier).filter(
        City.identifier.startswith(prefix, autoescape=True)
    ).all()

    suffixes = []
    for (identifier,) in existing:
        suffix = identifier[len(prefix):]
        # KAR001 is not part of the KA sequence
        if _SEQUENCE.fullmatch(suffix):
            suffixes.append(int(suffix))

    next_num = max(suffixes) + 1 if suffixes else 1
    return f"{prefix}{next_num:0{SEQUENCE_WIDTH}d}"


def create_zone(actor, name):
    authorize('zone.create', actor)

    name = require_text(name, 'name')

    prefix = identifier_prefix(name)
    for attempt in range(ALLOCATION_ATTEMPTS):
        city = City(name=name, identifier=next_identifier(prefix))
        db.session.add(city)
        record_event("Zone Created", f"Zone '{name}' created as {city.identifier}", user=actor.username)
        try:
            db.session.commit()
        except IntegrityError:
            # Another request took the same identifier first
            db.session.rollback()
            logger.warning("Identifier %s already taken, retrying", city.identifier)
            continue
        return city.to_dict()

    raise ServerError("Could not allocate a zone identifier")


def latest_status_id():
    """Correlated subquery: id of the newest StatusUpdate of the outer City."""
    newer = aliased(StatusUpdate)
    return (
        select(newer.id)
        .where(newer.city_id == City.id)
        .order_by(newer.updated_at.desc(), newer.id.desc())
        .limit(1)
        .correlate(City)
        .scalar_subquery()
    )


def current_status(city_id):
    return (
        StatusUpdate.query.filter_by(city_id=city_id)
        .order_by(StatusUpdate.updated_at.desc(), StatusUpdate.id.desc())
        .first()
    )


def list_zones():
    rows = (
        db.session.query(City, StatusUpdate, User.username)
        .outerjoin(StatusUpdate, StatusUpdate.id == latest_status_id())
        .outerjoin(User, User.id == StatusUpdate.updated_by)
        .order_by(City.name.asc(), City.id.asc())
        .all()
    )

    zones = []
    for city, update, updated_by in rows:
        zone = city.to_dict()
        zone.update({
            "status": update.status if update else None,
            "comment": update.comment if update else None,
            "lastUpdated": update.updated_at.isoformat() if update else None,
            "updatedBy": updated_by,
        })
        zones.append(zone)
    return zones
