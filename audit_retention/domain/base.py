from datetime import UTC, datetime


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored"""
    return datetime.now(UTC).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)
