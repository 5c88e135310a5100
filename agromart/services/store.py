import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from agromart.errors import (
    CONSTRAINT_MESSAGE,
    Conflict,
    NotFound,
    StorageFailure,
    ValidationFailed,
    is_unique_violation,
)
from agromart.extensions import db

logger = logging.getLogger(__name__)


@contextmanager
def transaction(conflict_message="Conflict. Resource already exists."):
    """Commit the session on success; roll back and translate errors otherwise.

    Only unique-key violations are conflicts. Other integrity failures (CHECK,
    NOT NULL, foreign keys) mean the data itself was rejected.
    """
    try:
        yield db.session
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.warning("Integrity error: %s", exc.orig)
        if is_unique_violation(exc):
            raise Conflict(conflict_message) from exc
        raise ValidationFailed(CONSTRAINT_MESSAGE) from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Database write failed")
        raise StorageFailure() from exc
    except Exception:
        db.session.rollback()
        raise


def get_or_404(model, object_id, label):
    record = db.session.get(model, object_id)
    if record is None:
        raise NotFound(f"{label} not found")
    return record
