from datetime import datetime, date, timezone


def utcnow() -> datetime:
    """Current time as naive UTC, the form timestamps are stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def utc_date(value: datetime) -> date:
    return as_utc_naive(value).date()
