from __future__ import annotations

from datetime import datetime, timezone
from typing import Union


# PUBLIC_INTERFACE
def to_iso_utc(value: Union[datetime, str]) -> str:
    """
    Normalize a stored timestamp into a canonical ISO-8601 string in UTC.

    Args:
        value: A datetime (aware or naive) or an ISO-8601 string as returned by
            the storage driver. Naive values are taken to be UTC.

    Returns:
        A string like '2025-01-25T10:15:30.123+00:00'.
    """
    if isinstance(value, str):
        s = value.strip()
        # fromisoformat only accepts a trailing 'Z' from Python 3.11
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        value = datetime.fromisoformat(s)

    if not isinstance(value, datetime):
        raise TypeError(f"Unsupported timestamp type: {type(value).__name__}")

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
