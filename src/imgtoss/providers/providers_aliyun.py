"""Aliyun OSS adapter.

Objects are addressed virtual-host style: ``https://<bucket>.<endpoint>/<key>``.
Requests carry ``Date`` and ``Authorization: OSS <id>:<signature>`` headers.
Only 2xx answers to the probe count as success.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, ClassVar

from ..domain import ObjectInfo, ProbeReport, ProgressSink, StorageConfig, StorageProvider
from ..exceptions import (
    DeleteFailed,
    ListFailed,
    ProbeFailed,
    StorageOperationError,
    UploadFailed,
)
from ..signing import aliyun
from .base import (
    DEFAULT_TIMEOUT_SECONDS,
    StorageAdapter,
    body_preview,
    emit_progress,
    encode_key,
    is_success,
    send_request,
    utcnow,
)

logger = logging.getLogger(__name__)

_ERROR_HINTS = {
    "InvalidBucketName": "bucket name rejected by the server, check its format",
    "NoSuchBucket": "bucket does not exist, check bucket name and region",
    "AccessDenied": "access denied, check credentials and permissions",
    "SignatureDoesNotMatch": "signature mismatch, check the access key secret",
}


@dataclass(slots=True)
class AliyunAdapter(StorageAdapter):
    """Talk to Aliyun OSS with header-signed requests."""

    provider: ClassVar[StorageProvider] = StorageProvider.ALIYUN

    config: StorageConfig
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    clock: Callable[[], datetime] = utcnow
    log: logging.Logger = field(default_factory=lambda: logger)

    @property
    def host(self) -> str:
        return f"{self.config.bucket}.{self.config.endpoint_host}"

    def object_url(self, key: str) -> str:
        return self.cdn_url(key) or self._url(key)

    async def upload(
        self,
        key: str,
        data: bytes,
        content_type: str,
        progress_sink: ProgressSink | None = None,
        *,
        deadline: datetime | None = None,
    ) -> str:
        self._check_bucket(UploadFailed)
        self.log.info(
            "aliyun.upload.start",
            extra={
                "key": key,
                "bucket": self.config.bucket,
                "endpoint": self.config.endpoint_host,
                "content_type": content_type,
                "size_bytes": len(data),
            },
        )
        headers = self._headers("PUT", key, content_type=content_type)
        emit_progress(progress_sink, key, total=len(data), done=False)

        response = await send_request(
            "PUT",
            self._url(key),
            headers=headers,
            content=data,
            failure=UploadFailed,
            timeout_seconds=self.timeout_seconds,
            deadline=deadline,
        )
        if not is_success(response.status_code):
            self._log_failure("aliyun.upload.failed", key, response.status_code, response.text)
            raise UploadFailed(response.status_code, response.text)

        self.log.info(
            "aliyun.upload.success",
            extra={"key": key, "bucket": self.config.bucket, "status_code": response.status_code},
        )
        emit_progress(progress_sink, key, total=len(data), done=True)
        return self.object_url(key)

    async def delete(self, key: str, *, deadline: datetime | None = None) -> None:
        response = await send_request(
            "DELETE",
            self._url(key),
            headers=self._headers("DELETE", key),
            failure=DeleteFailed,
            timeout_seconds=self.timeout_seconds,
            deadline=deadline,
        )
        if not is_success(response.status_code):
            self._log_failure("aliyun.delete.failed", key, response.status_code, response.text)
            raise DeleteFailed(response.status_code, response.text)
        self.log.info("aliyun.delete.success", extra={"key": key, "bucket": self.config.bucket})

    async def list_objects(
        self, prefix: str = "", *, deadline: datetime | None = None
    ) -> list[ObjectInfo]:
        response = await send_request(
            "GET",
            f"https://{self.host}/",
            headers=self._headers("GET", ""),
            params={"prefix": prefix} if prefix else None,
            failure=ListFailed,
            timeout_seconds=self.timeout_seconds,
            deadline=deadline,
        )
        if not is_success(response.status_code):
            raise ListFailed(response.status_code, response.text)
        # TODO: parse ListBucketResult XML into ObjectInfo entries.
        return []

    async def probe(self, *, deadline: datetime | None = None) -> ProbeReport:
        url = f"https://{self.host}/"
        self.log.info(
            "aliyun.probe.start",
            extra={"bucket": self.config.bucket, "endpoint": self.config.endpoint_host},
        )
        response = await send_request(
            "HEAD",
            url,
            headers=self._headers("HEAD", ""),
            failure=ProbeFailed,
            timeout_seconds=self.timeout_seconds,
            deadline=deadline,
        )
        self.log.info("aliyun.probe.status", extra={"url": url, "status_code": response.status_code})
        if is_success(response.status_code):
            return ProbeReport(status_code=response.status_code, bucket_exists=True)
        raise ProbeFailed(response.status_code, response.text, bucket_exists=False)

    def _url(self, key: str) -> str:
        return f"https://{self.host}/{encode_key(key)}"

    def _headers(self, method: str, key: str, *, content_type: str | None = None) -> dict[str, str]:
        headers = {"Date": aliyun.http_date(self.clock())}
        if content_type:
            headers["Content-Type"] = content_type
        resource = aliyun.canonical_resource(self.config.bucket, key)
        headers["Authorization"] = aliyun.sign(
            self.config.access_key_id,
            self.config.access_key_secret,
            method,
            resource,
            headers,
        )
        return headers

    def _check_bucket(self, failure: type[StorageOperationError]) -> None:
        bucket = self.config.bucket
        if not bucket:
            raise failure(None, "bucket name cannot be empty")
        if " " in bucket:
            raise failure(None, "bucket name cannot contain spaces")
        if "_" in bucket:
            self.log.warning(
                "aliyun.bucket.underscore",
                extra={"bucket": bucket},
            )

    def _log_failure(self, event: str, key: str, status_code: int, body: str) -> None:
        hint = next((text for code, text in _ERROR_HINTS.items() if code in body), None)
        self.log.error(
            "%s status=%s hint=%s body_preview=%s",
            event,
            status_code,
            hint,
            body_preview(body),
            extra={"key": key, "bucket": self.config.bucket, "status_code": status_code},
        )
