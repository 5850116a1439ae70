"""Multi-provider object storage client for image uploads.

Signs requests for Aliyun OSS, Tencent COS and AWS S3, uploads images with
progress reporting and caches connection tests on disk.
"""

from .core.config import ClientSettings
from .domain import (
    ConfigValidation,
    ConnectionTestOutcome,
    StorageConfig,
    StorageProvider,
    UploadProgress,
    UploadResult,
)
from .services import ConfigValidationService, ConnectionTestCache, ProgressRegistry, UploadService

__all__ = [
    "ClientSettings",
    "ConfigValidation",
    "ConfigValidationService",
    "ConnectionTestCache",
    "ConnectionTestOutcome",
    "ProgressRegistry",
    "StorageConfig",
    "StorageProvider",
    "UploadProgress",
    "UploadResult",
    "UploadService",
]
