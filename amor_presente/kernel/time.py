from __future__ import annotations

from datetime import datetime, timezone

UTC = timezone.utc


def utc_now() -> datetime:
    """Return a tz-aware UTC timestamp."""
    return datetime.now(UTC)


def is_tz_aware(value: datetime) -> bool:
    """True if a datetime is timezone-aware (has a non-None UTC offset)."""
    return value.tzinfo is not None and value.utcoffset() is not None


def coerce_utc(value: datetime, *, assume_naive_is_utc: bool = True) -> datetime:
    """Coerce any datetime to tz-aware UTC."""
    if is_tz_aware(value):
        return value.astimezone(UTC)

    if not assume_naive_is_utc:
        raise ValueError("Naive datetime cannot be coerced without an explicit assumption")

    return value.replace(tzinfo=UTC)
