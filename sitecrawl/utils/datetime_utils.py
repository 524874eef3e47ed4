from datetime import datetime, timezone
from typing import Optional

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def to_iso(value: datetime) -> str:
    """Render a datetime as ISO-8601 with millisecond precision and a `Z` suffix."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"

def file_timestamp(value: Optional[datetime] = None) -> str:
    """Timestamp safe for file names, e.g. `2024-05-01T10-20-30-123Z`."""
    return to_iso(value or utc_now()).replace(":", "-").replace(".", "-")

