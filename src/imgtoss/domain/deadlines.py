"""Helpers for the optional per-call deadline accepted by network operations.

Callers that need cancellation pass an absolute ``deadline``; adapters turn it
into a timeout for the single HTTP exchange they are about to perform.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _align(deadline: datetime, now: datetime) -> tuple[datetime, datetime]:
    if deadline.tzinfo is not None and now.tzinfo is None:
        now = now.replace(tzinfo=deadline.tzinfo)
    elif deadline.tzinfo is None and now.tzinfo is not None:
        deadline = deadline.replace(tzinfo=now.tzinfo)
    return deadline, now


def remaining_seconds(deadline: datetime | None, *, now: datetime | None = None) -> float | None:
    """Return seconds left until ``deadline`` (never negative), ``None`` if unbounded."""

    if deadline is None:
        return None
    deadline, current = _align(deadline, now or _utcnow())
    return max((deadline - current).total_seconds(), 0.0)


def deadline_expired(deadline: datetime | None, *, now: datetime | None = None) -> bool:
    """Return ``True`` once ``deadline`` has been reached."""

    if deadline is None:
        return False
    deadline, current = _align(deadline, now or _utcnow())
    return deadline <= current


def deadline_after(seconds: float, *, now: datetime | None = None) -> datetime:
    """Build an absolute deadline ``seconds`` from ``now``."""

    if seconds <= 0:
        raise ValueError("seconds must be positive")
    return (now or _utcnow()) + timedelta(seconds=seconds)


__all__ = ["remaining_seconds", "deadline_expired", "deadline_after"]
