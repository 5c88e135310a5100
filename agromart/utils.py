from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation

from agromart.errors import ValidationFailed

TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off"}


def is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def clean_text(value):
    if value is None:
        return None
    return str(value).strip() or None


def normalize_payload(payload, aliases):
    """Map legacy client field names (e.g. ``toolName``) onto column names."""
    normalized = {}
    for key, value in payload.items():
        normalized[aliases.get(key, key)] = value
    return normalized


def parse_datetime(value, label):
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        raw = (str(value) if value is not None else "").strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError as exc:
            raise ValidationFailed(f"Invalid {label} date.") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    # SQLite drops the offset on write, so store UTC.
    return parsed.astimezone(timezone.utc)


def parse_date(value, label):
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return parse_datetime(value, label).date()


def parse_decimal(value, label):
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValidationFailed(f"{label} must be a number.") from exc
    if not number.is_finite():
        raise ValidationFailed(f"{label} must be a number.")
    return number


def parse_int(value, label):
    try:
        return int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise ValidationFailed(f"{label} must be an integer.") from exc


def parse_bool(value, label):
    if isinstance(value, bool):
        return value
    raw = str(value).strip().lower()
    if raw in TRUE_VALUES:
        return True
    if raw in FALSE_VALUES:
        return False
    raise ValidationFailed(f"{label} must be true or false.")


def require_fields(payload, required):
    missing = [name for name in required if is_blank(payload.get(name))]
    if missing:
        raise ValidationFailed(f"Missing required fields: {', '.join(missing)}")


def reject_disallowed_fields(payload, allowed):
    disallowed = sorted(set(payload) - set(allowed))
    if disallowed:
        raise ValidationFailed("Invalid updates!", details=[f"Field not updatable: {name}" for name in disallowed])
