"""Validation helpers shared across budget tracker services."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Tuple

from .categories import AnyCategory, EntryType, default_category, resolve_category
from .exceptions import ValidationError
from .models import parse_date

MIN_YEAR = 1900
MAX_YEAR = 9999
NAME_MAX_LENGTH = 100
MAX_AMOUNT = 1_000_000_000_000  # one trillion yen


def parse_amount(raw: object, field: str) -> int:
    """Convert raw input to a positive whole number of yen."""
    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be a numeric value")
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError) as exc:  # type: ignore[arg-type]
        raise ValidationError(f"{field} must be a numeric value") from exc

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a numeric value")
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"{field} must be at most {MAX_AMOUNT:,}")
    if amount != amount.to_integral_value():
        raise ValidationError(f"{field} must be a whole number of yen")
    return int(amount)


def validate_required_str(value: object, field: str, max_length: int) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{field} cannot be empty")
    if len(trimmed) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return trimmed


def validate_optional_str(value: object, field: str, max_length: int) -> str:
    """Like :func:`validate_required_str` but ``None`` and blanks become ``""``."""
    if value is None:
        return ""
    if isinstance(value, str) and not value.strip():
        return ""
    return validate_required_str(value, field, max_length)


def validate_enum(value: object, field: str, allowed: Iterable[str]) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    canonical = value.strip().lower()
    allowed = set(allowed)
    if canonical not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(sorted(allowed))}")
    return canonical


def validate_entry_type(value: object) -> EntryType:
    return EntryType(validate_enum(value, "type", (member.value for member in EntryType)))


def validate_category(entry_type: EntryType, value: object) -> AnyCategory:
    if value is None or value == "":
        return default_category(entry_type)
    if not isinstance(value, str):
        raise ValidationError("category must be a string")
    return resolve_category(entry_type, value.strip().lower())


def validate_date(value: object, field: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a date or YYYY-MM-DD string")
    try:
        return parse_date(value)
    except ValueError as exc:
        raise ValidationError(f"{field} is not a valid date: {value!r}") from exc


def _validate_int(value: object, field: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise ValidationError(f"{field} must be an integer") from exc
    raise ValidationError(f"{field} must be an integer")


def validate_year(value: object, field: str) -> int:
    year = _validate_int(value, field)
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValidationError(f"{field} must be between {MIN_YEAR} and {MAX_YEAR}")
    return year


def validate_month(value: object, field: str) -> int:
    month = _validate_int(value, field)
    if not 1 <= month <= 12:
        raise ValidationError(f"{field} must be between 1 and 12")
    return month


def validate_recurring_range(
    start_year: int,
    start_month: int,
    end_year: object,
    end_month: object,
) -> Tuple[Optional[int], Optional[int]]:
    """Validate the optional end of a recurring expense against its start."""
    if end_year is None and end_month is None:
        return None, None
    if end_year is None or end_month is None:
        raise ValidationError("endYear and endMonth must be given together")
    year = validate_year(end_year, "endYear")
    month = validate_month(end_month, "endMonth")
    if (year, month) < (start_year, start_month):
        raise ValidationError("recurring expense cannot end before it starts")
    return year, month
