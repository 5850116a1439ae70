"""Value objects exchanged between callers, the orchestrator and adapters.

``StorageConfig`` is built by the configuration persistence layer and passed
by value into every operation; nothing in this package mutates it. Progress,
result and connection-test records are transient values handed back to the
caller, the core keeps no history of them.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Mapping


class StorageProvider(str, Enum):
    """Closed set of provider tags accepted in :class:`StorageConfig`."""

    ALIYUN = "aliyun"
    TENCENT = "tencent"
    AWS = "aws"
    CUSTOM = "custom"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Connection and business settings of one object-storage target.

    Only ``provider``, ``endpoint``, ``access_key_id``, ``access_key_secret``,
    ``bucket`` and ``region`` influence network behaviour. ``path_template``,
    ``cdn_domain`` and the compression fields are business settings.
    """

    provider: StorageProvider
    endpoint: str
    access_key_id: str
    access_key_secret: str
    bucket: str
    region: str
    path_template: str = "images/{filename}"
    cdn_domain: str | None = None
    compression_enabled: bool = False
    compression_quality: int = 80

    @property
    def endpoint_host(self) -> str:
        """Endpoint without scheme and trailing slash."""

        host = self.endpoint.strip()
        for scheme in ("https://", "http://"):
            if host.lower().startswith(scheme):
                host = host[len(scheme):]
                break
        return host.rstrip("/")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "StorageConfig":
        """Build a config from a JSON-like mapping (as persisted by callers)."""

        return cls(
            provider=StorageProvider(str(data["provider"]).lower()),
            endpoint=data.get("endpoint", ""),
            access_key_id=data.get("access_key_id", ""),
            access_key_secret=data.get("access_key_secret", ""),
            bucket=data.get("bucket", ""),
            region=data.get("region", ""),
            path_template=data.get("path_template", "images/{filename}"),
            cdn_domain=data.get("cdn_domain") or None,
            compression_enabled=bool(data.get("compression_enabled", False)),
            compression_quality=int(data.get("compression_quality", 80)),
        )


@dataclass(slots=True)
class UploadProgress:
    """Progress snapshot for one object."""

    image_id: str
    progress: float
    bytes_uploaded: int
    total_bytes: int
    speed: int | None = None


ProgressSink = Callable[[UploadProgress], None]


@dataclass(slots=True)
class UploadResult:
    """Outcome of uploading one object.

    Either ``uploaded_url`` is set and ``error`` is ``None`` or the reverse.
    Use :meth:`succeeded` / :meth:`failed` to build instances.
    """

    image_id: str
    success: bool
    uploaded_url: str | None = None
    error: str | None = None

    @classmethod
    def succeeded(cls, image_id: str, url: str) -> "UploadResult":
        return cls(image_id=image_id, success=True, uploaded_url=url)

    @classmethod
    def failed(cls, image_id: str, error: str) -> "UploadResult":
        return cls(image_id=image_id, success=False, error=error or "Unknown error")


@dataclass(slots=True)
class UploadBatchSummary:
    """Counts reported for a batch upload."""

    total: int
    succeeded: int
    failed: int


def summarize_results(results: list[UploadResult]) -> UploadBatchSummary:
    succeeded = sum(1 for result in results if result.success)
    return UploadBatchSummary(
        total=len(results),
        succeeded=succeeded,
        failed=len(results) - succeeded,
    )


@dataclass(slots=True)
class ConnectionTestOutcome:
    """Structured result of a connectivity test.

    ``latency_ms`` is set whenever a network attempt actually ran, whether it
    succeeded or not.
    """

    success: bool
    error: str | None = None
    latency_ms: int | None = None
    bucket_exists: bool | None = None
    available_buckets: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConnectionTestOutcome":
        buckets = data.get("available_buckets")
        latency = data.get("latency_ms")
        return cls(
            success=bool(data["success"]),
            error=data.get("error"),
            latency_ms=int(latency) if latency is not None else None,
            bucket_exists=data.get("bucket_exists"),
            available_buckets=list(buckets) if buckets is not None else None,
        )


@dataclass(slots=True)
class ProbeReport:
    """What an adapter learned from a successful probe."""

    status_code: int
    warning: str | None = None
    bucket_exists: bool | None = None
    available_buckets: list[str] | None = None


@dataclass(slots=True)
class ObjectInfo:
    """Listing entry for a stored object."""

    key: str
    size: int
    last_modified: datetime
    etag: str
    url: str


@dataclass(slots=True)
class ConfigValidation:
    """Result of the validate-and-test flow."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    connection_test: ConnectionTestOutcome | None = None
