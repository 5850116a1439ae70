"""AWS S3 adapter (virtual-hosted style, SigV4 with unsigned payload).

Objects live at ``https://<bucket>.s3.<region>.amazonaws.com/<key>``. The
probe is a signed ``HEAD`` on the bucket; 403 still proves that DNS, TLS and
routing work, so it is reported as a reachable success with a warning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, ClassVar

from ..domain import ObjectInfo, ProbeReport, ProgressSink, StorageConfig, StorageProvider
from ..exceptions import DeleteFailed, ListFailed, ProbeFailed, UploadFailed
from ..signing import aws
from .base import (
    DEFAULT_TIMEOUT_SECONDS,
    StorageAdapter,
    body_preview,
    emit_progress,
    is_success,
    send_request,
    utcnow,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AwsS3Adapter(StorageAdapter):
    """Talk to AWS S3 with SigV4-signed requests."""

    provider: ClassVar[StorageProvider] = StorageProvider.AWS
    reachable_statuses: ClassVar[frozenset[int]] = frozenset({403})

    config: StorageConfig
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    clock: Callable[[], datetime] = utcnow
    log: logging.Logger = field(default_factory=lambda: logger)

    @property
    def host(self) -> str:
        return f"{self.config.bucket}.s3.{self.config.region}.amazonaws.com"

    def object_url(self, key: str) -> str:
        return self.cdn_url(key) or f"https://{self.host}{self._path(key)}"

    async def upload(
        self,
        key: str,
        data: bytes,
        content_type: str,
        progress_sink: ProgressSink | None = None,
        *,
        deadline: datetime | None = None,
    ) -> str:
        self.log.info(
            "aws.upload.start",
            extra={
                "key": key,
                "bucket": self.config.bucket,
                "region": self.config.region,
                "content_type": content_type,
                "size_bytes": len(data),
            },
        )
        emit_progress(progress_sink, key, total=len(data), done=False)

        path = self._path(key)
        response = await send_request(
            "PUT",
            f"https://{self.host}{path}",
            headers=self._headers("PUT", path, extra={"Content-Type": content_type}),
            content=data,
            failure=UploadFailed,
            timeout_seconds=self.timeout_seconds,
            deadline=deadline,
        )
        if not is_success(response.status_code):
            self.log.error(
                "aws.upload.failed status=%s body_preview=%s",
                response.status_code,
                body_preview(response.text),
                extra={"key": key, "bucket": self.config.bucket},
            )
            raise UploadFailed(response.status_code, response.text)

        self.log.info("aws.upload.success", extra={"key": key, "bucket": self.config.bucket})
        emit_progress(progress_sink, key, total=len(data), done=True)
        return self.object_url(key)

    async def delete(self, key: str, *, deadline: datetime | None = None) -> None:
        path = self._path(key)
        response = await send_request(
            "DELETE",
            f"https://{self.host}{path}",
            headers=self._headers("DELETE", path),
            failure=DeleteFailed,
            timeout_seconds=self.timeout_seconds,
            deadline=deadline,
        )
        if not is_success(response.status_code):
            raise DeleteFailed(response.status_code, response.text)
        self.log.info("aws.delete.success", extra={"key": key, "bucket": self.config.bucket})

    async def list_objects(
        self, prefix: str = "", *, deadline: datetime | None = None
    ) -> list[ObjectInfo]:
        params = {"list-type": "2"}
        if prefix:
            params["prefix"] = prefix
        response = await send_request(
            "GET",
            f"https://{self.host}/",
            headers=self._headers("GET", "/", params=params),
            params=params,
            failure=ListFailed,
            timeout_seconds=self.timeout_seconds,
            deadline=deadline,
        )
        if not is_success(response.status_code):
            raise ListFailed(response.status_code, response.text)
        return []

    async def probe(self, *, deadline: datetime | None = None) -> ProbeReport:
        self.log.info(
            "aws.probe.start",
            extra={"bucket": self.config.bucket, "region": self.config.region},
        )
        response = await send_request(
            "HEAD",
            f"https://{self.host}/",
            headers=self._headers("HEAD", "/"),
            failure=ProbeFailed,
            timeout_seconds=self.timeout_seconds,
            deadline=deadline,
        )
        status_code = response.status_code
        self.log.info("aws.probe.status", extra={"status_code": status_code})
        if is_success(status_code):
            return ProbeReport(status_code=status_code)
        if status_code in self.reachable_statuses:
            return ProbeReport(
                status_code=status_code,
                warning="authentication failed, check credentials",
            )
        raise ProbeFailed(status_code, response.text)

    @staticmethod
    def _path(key: str) -> str:
        return aws.encode_path(f"/{key.lstrip('/')}")

    def _headers(
        self,
        method: str,
        path: str,
        *,
        extra: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, str]:
        headers = {
            "Host": self.host,
            "X-Amz-Date": aws.amz_date(self.clock()),
            "X-Amz-Content-Sha256": aws.UNSIGNED_PAYLOAD,
        }
        headers.update(extra or {})
        headers["Authorization"] = aws.sign(
            self.config.access_key_id,
            self.config.access_key_secret,
            method,
            path,
            headers,
            params,
            region=self.config.region,
        )
        return headers
