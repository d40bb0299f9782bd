from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union

from ..core.exceptions import ValidationError


def parse_iso_date(value: Optional[str], field_name: str = "date") -> date:
    """Parse YYYY-MM-DD (or a full ISO timestamp) into a date."""
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    raw = str(value).strip()
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        pass
    try:
        # Calendar day as written; no shift to UTC.
        return datetime.fromisoformat(raw[:-1] if raw.endswith("Z") else raw).date()
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO date (YYYY-MM-DD)")


def parse_iso_datetime(value: Optional[str], field_name: str = "date") -> datetime:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    try:
        return _parse_iso_datetime(str(value).strip())
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO date or datetime")


def _parse_iso_datetime(raw: str) -> datetime:
    # fromisoformat before 3.11 rejects a trailing 'Z'.
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is not None:
        # DATETIME columns hold naive UTC.
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def now_utc() -> datetime:
    """Current UTC time as a naive datetime.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value: Optional[Union[datetime, date]]) -> Optional[str]:
    return value.isoformat() if value is not None else None
