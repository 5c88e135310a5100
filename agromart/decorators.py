import re
from functools import wraps

from flask import abort
from flask_login import current_user

from agromart.errors import InvalidIdentifier

OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


def is_object_id(value):
    return isinstance(value, str) and OBJECT_ID_PATTERN.fullmatch(value) is not None


def ensure_object_id(value, label="ID"):
    if not is_object_id(value):
        raise InvalidIdentifier(f"Invalid {label} format")
    return value.lower()


def role_required(*roles):
    def wrapper(func):
        @wraps(func)
        def inner(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)
            if current_user.role not in roles:
                abort(403)
            return func(*args, **kwargs)

        return inner

    return wrapper


def object_id_required(param, label="ID"):
    """Reject a malformed path identifier before the view touches the database."""

    def wrapper(func):
        @wraps(func)
        def inner(*args, **kwargs):
            kwargs[param] = ensure_object_id(kwargs.get(param), label)
            return func(*args, **kwargs)

        return inner

    return wrapper
