"""Request timestamps in the formats providers expect in headers."""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import format_datetime


def http_date(now: datetime | None = None) -> str:
    """Return an RFC 1123 GMT timestamp (``Tue, 01 Jul 2025 08:00:00 GMT``)."""

    moment = now or datetime.now(tz=timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


__all__ = ["http_date"]
