from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns round-trip through SQLite and Postgres."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime | None) -> datetime | None:
    """Drop timezone info after converting to UTC; naive values are assumed to already be UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
