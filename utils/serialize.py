from dataclasses import asdict
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation

from services.errors import ValidationError


def _plain(value):
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def to_json(record):
    if record is None:
        return None
    return _plain(asdict(record))


def to_json_list(records):
    return [to_json(r) for r in records]


def parse_date(value, field="date") -> date:
    # Expect ISO format like "2026-01-20"
    try:
        return date.fromisoformat(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}. Use YYYY-MM-DD")


def parse_time(value, field="time") -> time:
    # "14:00" or "14:00:00"
    try:
        return time.fromisoformat(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}. Use HH:MM")


def parse_decimal(value, field="price", required=True):
    if value is None or value == "":
        if required:
            raise ValidationError(f"{field} is required")
        return None
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number")
    if number < 0:
        raise ValidationError(f"{field} must not be negative")
    return number


def parse_int(value, field, required=True, minimum=None):
    if value is None or value == "":
        if required:
            raise ValidationError(f"{field} is required")
        return None
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(f"{field} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer")
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field} must be at least {minimum}")
    return number
