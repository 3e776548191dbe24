from __future__ import annotations

from datetime import date, datetime, timedelta


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def to_naive_local(moment: datetime) -> datetime:
    """Drop the offset of an aware datetime after converting it to local time."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into a naive local datetime.

    A trailing ``Z`` or an explicit offset is converted to local time.
    """
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    return to_naive_local(datetime.fromisoformat(value))


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def start_of_day(moment: datetime) -> datetime:
    """Local midnight of the day containing ``moment``."""
    return datetime.combine(moment.date(), datetime.min.time())


def day_window(moment: datetime) -> tuple[datetime, datetime]:
    start = start_of_day(moment)
    return start, start + timedelta(hours=24)


def minutes_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 60
