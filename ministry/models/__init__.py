"""SQLModel tables for recurrence rules and event instances."""
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current UTC time, naive, as stored in every timestamp column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
