from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Naive UTC now, matching how timestamps are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values are taken as UTC already."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
