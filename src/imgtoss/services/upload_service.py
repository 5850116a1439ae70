"""Upload orchestrator bound to a single storage adapter."""

from __future__ import annotations

import time
from datetime import datetime
from typing import Iterable

import structlog

from ..core.config import ClientSettings
from ..domain import (
    ConnectionTestOutcome,
    ObjectInfo,
    ProgressSink,
    StorageConfig,
    UploadResult,
)
from ..exceptions import AppError, ProbeFailed, UploadFailed
from ..media import render_object_key, sniff_content_type, validate_object_key
from ..providers import StorageAdapter, create_adapter
from ..providers.base import mask_access_key

logger = structlog.get_logger(__name__)

MAX_PREFIX_LENGTH = 1000


class UploadService:
    """Single entry point for uploads, deletes, listings and connection tests.

    The adapter is chosen once from ``config.provider``; construction raises
    :class:`~src.imgtoss.exceptions.UnsupportedProvider` when no adapter
    exists for the tag. Progress sinks are called synchronously from the
    upload path, so a slow sink slows the upload down.
    """

    def __init__(
        self,
        config: StorageConfig,
        *,
        adapter: StorageAdapter | None = None,
        settings: ClientSettings | None = None,
    ) -> None:
        self.config = config
        if adapter is None:
            settings = settings or ClientSettings()
            adapter = create_adapter(
                config,
                timeout_seconds=settings.request_timeout_seconds,
                key_time_seconds=settings.tencent_key_time_seconds,
            )
        self.adapter = adapter

    async def upload_image(
        self,
        key: str,
        data: bytes,
        progress_sink: ProgressSink | None = None,
        *,
        deadline: datetime | None = None,
    ) -> str:
        """Upload ``data`` under ``key`` and return its public URL."""

        problem = validate_object_key(key)
        if problem is not None:
            raise UploadFailed(None, problem)
        content_type = sniff_content_type(data)
        return await self.adapter.upload(
            key, data, content_type, progress_sink, deadline=deadline
        )

    async def upload_many(
        self,
        items: Iterable[tuple[str, bytes]],
        progress_sink: ProgressSink | None = None,
        *,
        deadline: datetime | None = None,
    ) -> list[UploadResult]:
        """Upload ``(key, data)`` pairs one after another.

        A failing item yields a failed :class:`UploadResult` at its position;
        the remaining items are still attempted.
        """

        results: list[UploadResult] = []
        for key, data in items:
            try:
                url = await self.upload_image(key, data, progress_sink, deadline=deadline)
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "upload.item.failed",
                    key=key,
                    provider=self.config.provider.value,
                    error=str(exc),
                )
                results.append(UploadResult.failed(key, str(exc)))
            else:
                results.append(UploadResult.succeeded(key, url))
        return results

    async def delete_object(self, key: str, *, deadline: datetime | None = None) -> None:
        await self.adapter.delete(key, deadline=deadline)

    async def list_objects(
        self, prefix: str = "", *, deadline: datetime | None = None
    ) -> list[ObjectInfo]:
        if len(prefix) > MAX_PREFIX_LENGTH:
            raise ValueError(f"prefix must be at most {MAX_PREFIX_LENGTH} characters")
        return await self.adapter.list_objects(prefix, deadline=deadline)

    def object_url(self, key: str) -> str:
        return self.adapter.object_url(key)

    def object_key_for(self, filename: str, *, now: datetime | None = None) -> str:
        return render_object_key(self.config.path_template, filename, now=now)

    async def test_connection(self, *, deadline: datetime | None = None) -> ConnectionTestOutcome:
        """Probe the provider and describe the result without raising."""

        logger.info(
            "connection_test.start",
            provider=self.config.provider.value,
            bucket=self.config.bucket,
            access_key=mask_access_key(self.config.access_key_id),
        )
        started = time.perf_counter()
        try:
            report = await self.adapter.probe(deadline=deadline)
        except ProbeFailed as exc:
            outcome = ConnectionTestOutcome(
                success=False,
                error=str(exc),
                latency_ms=_elapsed_ms(started),
                bucket_exists=exc.bucket_exists,
                available_buckets=exc.available_buckets,
            )
        except AppError as exc:
            outcome = ConnectionTestOutcome(
                success=False,
                error=str(exc),
                latency_ms=_elapsed_ms(started),
            )
        else:
            outcome = ConnectionTestOutcome(
                success=True,
                error=report.warning,
                latency_ms=_elapsed_ms(started),
                bucket_exists=report.bucket_exists,
                available_buckets=report.available_buckets,
            )
        logger.info(
            "connection_test.finished",
            provider=self.config.provider.value,
            success=outcome.success,
            latency_ms=outcome.latency_ms,
            error=outcome.error,
        )
        return outcome


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


__all__ = ["MAX_PREFIX_LENGTH", "UploadService"]
