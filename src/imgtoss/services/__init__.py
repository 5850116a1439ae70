"""Service layer: upload orchestration, connection-test caching and validation."""

from .config_validation import ConfigValidationService, validate_config_fields
from .connection_cache import ConnectionTestCache, cache_key
from .progress import ProgressRegistry
from .upload_service import UploadService

__all__ = [
    "ConfigValidationService",
    "ConnectionTestCache",
    "ProgressRegistry",
    "UploadService",
    "cache_key",
    "validate_config_fields",
]
