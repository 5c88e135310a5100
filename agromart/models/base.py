import secrets
from datetime import date, datetime, timezone
from decimal import Decimal

from agromart.extensions import db

OBJECT_ID_LENGTH = 24


def generate_object_id():
    return secrets.token_hex(OBJECT_ID_LENGTH // 2)


def utcnow():
    return datetime.now(timezone.utc)


def as_utc(value):
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ObjectIdMixin:
    id = db.Column(db.String(OBJECT_ID_LENGTH), primary_key=True, default=generate_object_id)


class TimestampMixin:
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


def _jsonable(value):
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


class SerializerMixin:
    # Columns a client may read, filter and sort on; subclasses narrow this.
    public_fields = ()
    # Attributes derived at read time, never stored.
    computed_fields = ()

    def to_dict(self, fields=None):
        selected = fields or (tuple(self.public_fields) + tuple(self.computed_fields))
        return {name: _jsonable(getattr(self, name)) for name in selected}
