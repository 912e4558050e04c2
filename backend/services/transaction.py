import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from backend.errors import ApiError, ServerError
from backend.extensions import db

logger = logging.getLogger(__name__)


@contextmanager
def atomic(operation):
    """
    Commit everything added inside the block, or nothing.
    Database failures surface as ServerError after the rollback.
    """
    try:
        yield db.session
        db.session.commit()
    except ApiError:
        db.session.rollback()
        raise
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("%s failed, transaction rolled back", operation)
        raise ServerError("Server error")
