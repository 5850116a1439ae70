"""Tencent COS adapter.

Buckets are named ``<name>-<appid>`` and addressed as
``https://<bucket>.cos.<region>.myqcloud.com/<key>``. Authorization uses the
KeyTime-windowed ``q-sign-*`` token, regenerated for every request.

The probe lists buckets at ``service.cos.myqcloud.com``: a 200 answer must
mention the configured bucket, and 403 counts as "reachable" because the
service answered a well-formed but unauthenticated request.
"""

from __future__ import annotations

import base64
import hashlib
import logging
import re
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
from ..signing import tencent
from ..signing.dates import http_date
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

SERVICE_HOST = "service.cos.myqcloud.com"
_BUCKET_NAME_RE = re.compile(r"<Name>(.*?)</Name>")

_ERROR_HINTS = {
    "NoSuchBucket": "bucket does not exist, expected format is <name>-<appid>",
    "BucketNotExists": "bucket does not exist, expected format is <name>-<appid>",
    "InvalidBucketName": "invalid bucket name, expected format is <name>-<appid>",
    "AccessDenied": "access denied, check SecretId, SecretKey and bucket permissions",
    "SignatureDoesNotMatch": "signature mismatch, check SecretKey and local clock",
}


def parse_bucket_names(xml_body: str) -> list[str]:
    """Extract ``<Name>`` values from a ListAllMyBuckets answer."""

    return [match.strip() for match in _BUCKET_NAME_RE.findall(xml_body)]


@dataclass(slots=True)
class TencentAdapter(StorageAdapter):
    """Talk to Tencent COS with KeyTime-signed requests."""

    provider: ClassVar[StorageProvider] = StorageProvider.TENCENT
    reachable_statuses: ClassVar[frozenset[int]] = frozenset({403})

    config: StorageConfig
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    key_time_seconds: int = tencent.DEFAULT_KEY_TIME_SECONDS
    clock: Callable[[], datetime] = utcnow
    log: logging.Logger = field(default_factory=lambda: logger)

    @property
    def host(self) -> str:
        return f"{self.config.bucket}.cos.{self.config.region}.myqcloud.com"

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
            "tencent.upload.start",
            extra={
                "key": key,
                "bucket": self.config.bucket,
                "region": self.config.region,
                "content_type": content_type,
                "size_bytes": len(data),
            },
        )
        emit_progress(progress_sink, key, total=len(data), done=False)

        content_md5 = base64.b64encode(hashlib.md5(data).digest()).decode("ascii")
        headers = self._headers(
            "PUT",
            key,
            extra={
                "Content-Type": content_type,
                "Content-Length": str(len(data)),
                "Content-MD5": content_md5,
            },
        )
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
            self._log_failure("tencent.upload.failed", key, response.status_code, response.text)
            raise UploadFailed(response.status_code, response.text)

        self.log.info(
            "tencent.upload.success",
            extra={"key": key, "bucket": self.config.bucket, "status_code": response.status_code},
        )
        emit_progress(progress_sink, key, total=len(data), done=True)
        return self.object_url(key)

    async def delete(self, key: str, *, deadline: datetime | None = None) -> None:
        self._check_bucket(DeleteFailed)
        response = await send_request(
            "DELETE",
            self._url(key),
            headers=self._headers("DELETE", key),
            failure=DeleteFailed,
            timeout_seconds=self.timeout_seconds,
            deadline=deadline,
        )
        if not is_success(response.status_code):
            self._log_failure("tencent.delete.failed", key, response.status_code, response.text)
            raise DeleteFailed(response.status_code, response.text)
        self.log.info("tencent.delete.success", extra={"key": key, "bucket": self.config.bucket})

    async def list_objects(
        self, prefix: str = "", *, deadline: datetime | None = None
    ) -> list[ObjectInfo]:
        self._check_bucket(ListFailed)
        params = {"prefix": prefix} if prefix else {}
        response = await send_request(
            "GET",
            f"https://{self.host}/",
            headers=self._headers("GET", "", params=params),
            params=params,
            failure=ListFailed,
            timeout_seconds=self.timeout_seconds,
            deadline=deadline,
        )
        if not is_success(response.status_code):
            raise ListFailed(response.status_code, response.text)
        return []

    async def probe(self, *, deadline: datetime | None = None) -> ProbeReport:
        self.log.info("tencent.probe.start", extra={"bucket": self.config.bucket})
        headers = {"Host": SERVICE_HOST, "Date": http_date(self.clock())}
        headers["Authorization"] = self._sign("GET", "/", headers, {})
        response = await send_request(
            "GET",
            f"https://{SERVICE_HOST}/",
            headers=headers,
            failure=ProbeFailed,
            timeout_seconds=self.timeout_seconds,
            deadline=deadline,
        )
        status_code = response.status_code
        self.log.info(
            "tencent.probe.status",
            extra={"status_code": status_code, "body_preview": body_preview(response.text)},
        )

        if status_code == 200:
            buckets = parse_bucket_names(response.text)
            if self.config.bucket in buckets:
                return ProbeReport(
                    status_code=status_code,
                    bucket_exists=True,
                    available_buckets=buckets,
                )
            raise ProbeFailed(
                status_code,
                f"bucket '{self.config.bucket}' does not exist or is not accessible",
                bucket_exists=False,
                available_buckets=buckets,
            )
        if status_code in self.reachable_statuses:
            return ProbeReport(
                status_code=status_code,
                warning="authentication failed, check SecretId and SecretKey",
            )
        raise ProbeFailed(status_code, response.text)

    def _url(self, key: str) -> str:
        return f"https://{self.host}/{encode_key(key)}"

    def _headers(
        self,
        method: str,
        key: str,
        *,
        extra: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, str]:
        headers = {"Host": self.host, "Date": http_date(self.clock())}
        headers.update(extra or {})
        headers["Authorization"] = self._sign(method, f"/{key.lstrip('/')}", headers, params or {})
        return headers

    def _sign(
        self, method: str, uri: str, headers: dict[str, str], params: dict[str, str]
    ) -> str:
        return tencent.sign(
            self.config.access_key_id,
            self.config.access_key_secret,
            method,
            uri,
            headers,
            params,
            now=self.clock(),
            expires_in=self.key_time_seconds,
        )

    def _check_bucket(self, failure: type[StorageOperationError]) -> None:
        if "-" not in self.config.bucket:
            self.log.error("tencent.bucket.invalid_format", extra={"bucket": self.config.bucket})
            raise failure(
                None,
                "Tencent COS bucket must be formatted as <bucket-name>-<appid>",
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
