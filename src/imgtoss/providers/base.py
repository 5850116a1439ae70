"""Capability set shared by the object-storage adapters.

Every adapter binds one :class:`StorageConfig` to its provider's signing
scheme and URL conventions. Adapters must:

* sign every request freshly (time-windowed credentials are never reused);
* report progress to the optional sink at start (0%) and on success (100%),
  synchronously, on the caller's execution context;
* translate transport errors and deadline expiry into the operation's
  :class:`StorageOperationError` subclass so callers only see one error shape;
* declare which probe statuses count as success explicitly.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import ClassVar, Mapping
from urllib.parse import quote

import httpx

from ..domain import (
    ObjectInfo,
    ProbeReport,
    ProgressSink,
    StorageConfig,
    StorageProvider,
    UploadProgress,
    remaining_seconds,
)
from ..exceptions import StorageOperationError

DEFAULT_TIMEOUT_SECONDS = 30.0
BODY_PREVIEW_LIMIT = 500


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def body_preview(text: str) -> str:
    if len(text) > BODY_PREVIEW_LIMIT:
        return text[:BODY_PREVIEW_LIMIT] + "...(truncated)"
    return text


def encode_key(key: str) -> str:
    """Percent-encode an object key for use in a URL path, keeping separators."""

    return quote(key.lstrip("/"), safe="/-_.~")


def mask_access_key(access_key_id: str) -> str:
    return f"{access_key_id[:4]}***" if access_key_id else ""


def emit_progress(sink: ProgressSink | None, image_id: str, *, total: int, done: bool) -> None:
    """Report the start (``done=False``) or completion of an upload."""

    if sink is None:
        return
    sink(
        UploadProgress(
            image_id=image_id,
            progress=100.0 if done else 0.0,
            bytes_uploaded=total if done else 0,
            total_bytes=total,
        )
    )


async def send_request(
    method: str,
    url: str,
    *,
    headers: Mapping[str, str],
    failure: type[StorageOperationError],
    content: bytes | None = None,
    params: Mapping[str, str] | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    deadline: datetime | None = None,
) -> httpx.Response:
    """Perform one HTTP exchange, bounded by ``deadline`` when given."""

    remaining = remaining_seconds(deadline)
    if remaining is not None and remaining <= 0:
        raise failure(None, "deadline expired before the request was sent")

    try:
        async with httpx.AsyncClient(timeout=timeout_seconds) as client:
            call = client.request(
                method,
                url,
                headers=dict(headers),
                content=content,
                params=dict(params) if params else None,
            )
            if remaining is None:
                return await call
            return await asyncio.wait_for(call, remaining)
    except asyncio.TimeoutError as exc:
        raise failure(None, "deadline exceeded while waiting for the response") from exc
    except httpx.HTTPError as exc:
        raise failure(None, f"HTTP error: {exc}") from exc


class StorageAdapter(ABC):
    """Abstract adapter implemented once per storage provider."""

    provider: ClassVar[StorageProvider]
    # Statuses outside 2xx that still prove the service is reachable.
    reachable_statuses: ClassVar[frozenset[int]] = frozenset()

    config: StorageConfig

    @abstractmethod
    async def upload(
        self,
        key: str,
        data: bytes,
        content_type: str,
        progress_sink: ProgressSink | None = None,
        *,
        deadline: datetime | None = None,
    ) -> str:
        """Store ``data`` under ``key`` and return the object's public URL."""

    @abstractmethod
    async def delete(self, key: str, *, deadline: datetime | None = None) -> None:
        """Remove ``key`` from the bucket."""

    @abstractmethod
    async def list_objects(
        self, prefix: str = "", *, deadline: datetime | None = None
    ) -> list[ObjectInfo]:
        """List objects under ``prefix``."""

    @abstractmethod
    async def probe(self, *, deadline: datetime | None = None) -> ProbeReport:
        """Issue a lightweight signed request proving the target is reachable."""

    @abstractmethod
    def object_url(self, key: str) -> str:
        """Return the public URL of ``key`` without performing I/O."""

    def cdn_url(self, key: str) -> str | None:
        cdn_domain = (self.config.cdn_domain or "").strip().rstrip("/")
        if not cdn_domain:
            return None
        for scheme in ("https://", "http://"):
            if cdn_domain.lower().startswith(scheme):
                cdn_domain = cdn_domain[len(scheme):]
                break
        return f"https://{cdn_domain}/{encode_key(key)}"


__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "StorageAdapter",
    "body_preview",
    "emit_progress",
    "encode_key",
    "is_success",
    "mask_access_key",
    "send_request",
    "utcnow",
]
