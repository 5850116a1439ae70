"""Domain values and deadline helpers of the storage client."""

from .deadlines import deadline_after, deadline_expired, remaining_seconds
from .models import (
    ConfigValidation,
    ConnectionTestOutcome,
    ObjectInfo,
    ProbeReport,
    ProgressSink,
    StorageConfig,
    StorageProvider,
    UploadBatchSummary,
    UploadProgress,
    UploadResult,
    summarize_results,
)

__all__ = [
    "ConfigValidation",
    "ConnectionTestOutcome",
    "ObjectInfo",
    "ProbeReport",
    "ProgressSink",
    "StorageConfig",
    "StorageProvider",
    "UploadBatchSummary",
    "UploadProgress",
    "UploadResult",
    "deadline_after",
    "deadline_expired",
    "remaining_seconds",
    "summarize_results",
]
