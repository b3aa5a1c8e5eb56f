import hashlib
import re
from datetime import date, datetime
from typing import Union

from Dojodesk.core.errors import ValidationError

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def hash_password(plain: str) -> str:
    """Return SHA256 hex digest of the input."""
    return hashlib.sha256(plain.encode()).hexdigest()


def parse_date(value: Union[str, date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(f"invalid date: {value!r}") from None


def to_iso(value: Union[str, date, datetime]) -> str:
    return parse_date(value).isoformat()


def validate_time(value: str) -> str:
    s = str(value or "").strip()
    if not _TIME_RE.match(s):
        raise ValidationError(f"invalid time (expected HH:MM): {value!r}")
    return s


def validate_day_of_week(value) -> int:
    try:
        dow = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"invalid day_of_week: {value!r}") from None
    if not 0 <= dow <= 6:
        raise ValidationError(f"day_of_week must be 0 (Mon) .. 6 (Sun), got {dow}")
    return dow


def require_non_negative(name: str, value) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer") from None
    if n < 0:
        raise ValidationError(f"{name} must be non-negative")
    return n


def require_text(name: str, value) -> str:
    s = (value or "").strip() if isinstance(value, str) else ""
    if not s:
        raise ValidationError(f"{name} is required")
    return s
