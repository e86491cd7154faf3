"""Time utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Naive UTC timestamp, matching the naive DateTime columns in every table."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
