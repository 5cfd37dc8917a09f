"""
saved_at timestamps for state files: UTC, millisecond precision, Z suffix.

    2026-01-31T09:15:02.417Z
"""

from datetime import datetime, timezone


def utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
