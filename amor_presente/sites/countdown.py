"""Countdown to the event shown on the public page."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from amor_presente.kernel.time import coerce_utc, utc_now


@dataclass(frozen=True)
class TimeLeft:
    days: int
    hours: int
    minutes: int
    seconds: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


ZERO = TimeLeft(0, 0, 0, 0)


def time_left(target: datetime, now: datetime | None = None) -> TimeLeft:
    """Whole days/hours/minutes/seconds until `target`; all zero once it has passed."""
    remaining = int((coerce_utc(target) - coerce_utc(now or utc_now())).total_seconds())
    if remaining <= 0:
        return ZERO
    days, remaining = divmod(remaining, 86400)
    hours, remaining = divmod(remaining, 3600)
    minutes, seconds = divmod(remaining, 60)
    return TimeLeft(days=days, hours=hours, minutes=minutes, seconds=seconds)


def event_target(event_date: date, event_time: time | None, tz: str) -> datetime:
    """The event instant: date plus time (midnight when absent) in the event timezone."""
    local = datetime.combine(event_date, (event_time or time(0, 0)).replace(tzinfo=None))
    return local.replace(tzinfo=ZoneInfo(tz))


def countdown_for(
    event_date: date | None,
    event_time: time | None,
    tz: str,
    now: datetime | None = None,
) -> dict | None:
    if not event_date:
        return None
    target = event_target(event_date, event_time, tz)
    return {
        "target": target.isoformat(),
        **time_left(target, now).to_dict(),
    }
