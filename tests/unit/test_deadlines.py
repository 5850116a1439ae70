"""Unit coverage for the per-call deadline helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.imgtoss.domain import deadlines

pytestmark = pytest.mark.unit

NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_remaining_seconds_unbounded_without_deadline() -> None:
    assert deadlines.remaining_seconds(None) is None
    assert deadlines.deadline_expired(None) is False


def test_remaining_seconds_counts_down_and_clamps() -> None:
    deadline = NOW + timedelta(seconds=5)

    assert deadlines.remaining_seconds(deadline, now=NOW) == 5.0
    assert deadlines.remaining_seconds(deadline, now=NOW + timedelta(seconds=9)) == 0.0


def test_naive_and_aware_values_are_aligned() -> None:
    deadline = (NOW + timedelta(seconds=2)).replace(tzinfo=None)

    assert deadlines.remaining_seconds(deadline, now=NOW) == 2.0
    assert deadlines.deadline_expired(deadline, now=NOW + timedelta(seconds=2)) is True


def test_deadline_after_requires_positive_seconds() -> None:
    assert deadlines.deadline_after(3, now=NOW) == NOW + timedelta(seconds=3)

    with pytest.raises(ValueError):
        deadlines.deadline_after(0, now=NOW)
