from datetime import datetime, timezone
from typing import Optional

MINUTES_IN_DAY = 1440
MINUTES_IN_MONTH = 43200
MINUTES_IN_TWO_MONTHS = 86400


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def _distance(minutes: int) -> str:
    if minutes < 1:
        return "less than a minute"
    if minutes < 45:
        return _plural(minutes, "minute")
    if minutes < 90:
        return "about 1 hour"
    if minutes < MINUTES_IN_DAY:
        return f"about {_plural(round(minutes / 60), 'hour')}"
    if minutes < 2520:
        return "1 day"
    if minutes < MINUTES_IN_MONTH:
        return _plural(round(minutes / MINUTES_IN_DAY), "day")
    if minutes < MINUTES_IN_TWO_MONTHS:
        return f"about {_plural(round(minutes / MINUTES_IN_MONTH), 'month')}"

    months = minutes // MINUTES_IN_MONTH
    if months < 12:
        return _plural(months, "month")
    years, remainder = divmod(months, 12)
    if remainder < 3:
        return f"about {_plural(years, 'year')}"
    if remainder < 9:
        return f"over {_plural(years, 'year')}"
    return f"almost {_plural(years + 1, 'year')}"


def format_relative_time(moment: datetime, now: Optional[datetime] = None) -> str:
    """Distance between `moment` and `now` in words, e.g. "5 minutes ago" or "in about 2 hours"."""
    now = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    seconds = (now - moment).total_seconds()
    words = _distance(round(abs(seconds) / 60))
    return f"{words} ago" if seconds >= 0 else f"in {words}"
