"""Process-wide cache of connection-test outcomes mirrored to a JSON file.

Entries are keyed by a SHA-256 digest of the fields that can change network
reachability (provider, endpoint, access key id and secret, bucket, region).
Each entry moves ``absent -> valid -> expired -> absent``; an expired entry is
never handed out again, it is removed the moment it is touched.

The on-disk mirror is a JSON object ``{key: {config_hash, outcome, timestamp}}``
with ``timestamp`` in epoch seconds. A missing or unparseable file is treated
as an empty cache.
"""

from __future__ import annotations

import hashlib
import json
import math
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable

import structlog

from ..domain import ConnectionTestOutcome, StorageConfig

logger = structlog.get_logger(__name__)

DEFAULT_TTL = timedelta(seconds=300)
KEY_SEPARATOR = "|"


def _default_clock() -> datetime:
    return datetime.now(timezone.utc)


def cache_key(config: StorageConfig) -> str:
    """Return the hex SHA-256 key identifying ``config``'s reachability."""

    parts = [
        config.provider.value,
        config.endpoint,
        config.access_key_id,
        config.access_key_secret,
        config.bucket,
        config.region,
    ]
    return hashlib.sha256(KEY_SEPARATOR.join(parts).encode("utf-8")).hexdigest()


@dataclass(slots=True)
class _CacheEntry:
    config_hash: str
    outcome: ConnectionTestOutcome
    recorded_at: datetime

    def is_valid(self, *, now: datetime, ttl: timedelta) -> bool:
        return now - self.recorded_at <= ttl

    def to_json(self) -> dict[str, Any]:
        return {
            "config_hash": self.config_hash,
            "outcome": self.outcome.to_dict(),
            "timestamp": self.recorded_at.timestamp(),
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "_CacheEntry":
        timestamp = float(data["timestamp"])
        if not math.isfinite(timestamp):
            raise ValueError(f"timestamp must be finite, got {timestamp!r}")
        return cls(
            config_hash=str(data["config_hash"]),
            outcome=ConnectionTestOutcome.from_dict(data["outcome"]),
            recorded_at=datetime.fromtimestamp(timestamp, tz=timezone.utc),
        )


def _copy_outcome(outcome: ConnectionTestOutcome) -> ConnectionTestOutcome:
    buckets = outcome.available_buckets
    return replace(outcome, available_buckets=list(buckets) if buckets is not None else None)


class ConnectionTestCache:
    """Time-expiring store of connection-test outcomes guarded by one lock.

    The lock covers only the in-memory table; the JSON mirror is written from
    a snapshot after the lock is released, and callers run probes outside of
    it. Every method does blocking file I/O, so async callers go through
    ``asyncio.to_thread``. Returned outcomes are copies of the cached ones.
    """

    def __init__(
        self,
        cache_path: Path | None = None,
        *,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if ttl < timedelta(0):
            raise ValueError("ttl must be non-negative")
        self._path = cache_path
        self._ttl = ttl
        self._clock = clock or _default_clock
        self._lock = threading.Lock()
        self._entries: dict[str, _CacheEntry] = {}
        self._loaded = False
        self._io_lock = threading.Lock()
        self._generation = 0
        self._written_generation = 0

    @classmethod
    def from_settings(cls, settings: Any) -> "ConnectionTestCache":
        return cls(
            settings.cache_path,
            ttl=timedelta(seconds=settings.connection_cache_ttl_seconds),
        )

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def lookup(self, config: StorageConfig) -> ConnectionTestOutcome | None:
        key = cache_key(config)
        with self._lock:
            self._ensure_loaded()
            entry = self._entries.get(key)
            if entry is None:
                logger.debug("connection_cache.miss", key=key[:8])
                return None
            if not entry.is_valid(now=self._clock(), ttl=self._ttl):
                del self._entries[key]
                logger.debug("connection_cache.expired", key=key[:8])
                return None
            logger.debug("connection_cache.hit", key=key[:8], success=entry.outcome.success)
            return _copy_outcome(entry.outcome)

    def record(self, config: StorageConfig, outcome: ConnectionTestOutcome) -> None:
        key = cache_key(config)
        with self._lock:
            self._ensure_loaded()
            now = self._clock()
            self._entries[key] = _CacheEntry(
                config_hash=key, outcome=_copy_outcome(outcome), recorded_at=now
            )
            snapshot = self._snapshot()
            evicted = self._evict_expired(now)
        self._write(*snapshot)
        logger.info(
            "connection_cache.recorded",
            key=key[:8],
            success=outcome.success,
            evicted=evicted,
        )

    def invalidate(self, config: StorageConfig) -> None:
        key = cache_key(config)
        with self._lock:
            self._ensure_loaded()
            removed = self._entries.pop(key, None) is not None
            snapshot = self._snapshot()
        self._write(*snapshot)
        logger.info("connection_cache.invalidated", key=key[:8], removed=removed)

    def invalidate_all(self) -> None:
        with self._lock:
            self._ensure_loaded()
            count = len(self._entries)
            self._entries.clear()
            snapshot = self._snapshot()
        self._write(*snapshot)
        logger.info("connection_cache.cleared", entries=count)

    def __len__(self) -> int:
        with self._lock:
            self._ensure_loaded()
            return len(self._entries)

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        self._entries = self._load()
        self._loaded = True

    def _load(self) -> dict[str, _CacheEntry]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                raise ValueError("cache mirror must be a JSON object")
            entries = {key: _CacheEntry.from_json(value) for key, value in raw.items()}
        except (OSError, ValueError, KeyError, TypeError, AttributeError, OverflowError) as exc:
            logger.warning("connection_cache.load.invalid", path=str(self._path), error=str(exc))
            return {}
        now = self._clock()
        valid = {
            key: entry
            for key, entry in entries.items()
            if entry.is_valid(now=now, ttl=self._ttl)
        }
        logger.info(
            "connection_cache.loaded",
            path=str(self._path),
            entries=len(valid),
            dropped=len(entries) - len(valid),
        )
        return valid

    def _snapshot(self) -> tuple[int, dict[str, Any]]:
        self._generation += 1
        payload = {key: entry.to_json() for key, entry in self._entries.items()}
        return self._generation, payload

    def _write(self, generation: int, payload: dict[str, Any]) -> None:
        # Runs outside the table lock; a snapshot older than the last one written is skipped.
        if self._path is None:
            return
        with self._io_lock:
            if generation <= self._written_generation:
                return
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            except OSError as exc:
                logger.warning(
                    "connection_cache.save.failed", path=str(self._path), error=str(exc)
                )
                return
            self._written_generation = generation

    def _evict_expired(self, now: datetime) -> int:
        expired = [
            key
            for key, entry in self._entries.items()
            if not entry.is_valid(now=now, ttl=self._ttl)
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)


__all__ = ["ConnectionTestCache", "DEFAULT_TTL", "cache_key"]
