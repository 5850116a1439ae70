"""Validate-and-test flow for storage configurations.

Cheap field checks run first. Only a configuration that passes them reaches
the connection-test cache, and only a cache miss triggers a network probe,
whose outcome is then recorded.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Callable

import structlog

from ..domain import ConfigValidation, ConnectionTestOutcome, StorageConfig
from ..exceptions import ConfigurationError
from .connection_cache import ConnectionTestCache, cache_key
from .upload_service import UploadService

logger = structlog.get_logger(__name__)

_REQUIRED_FIELDS = (
    ("endpoint", "Endpoint is required"),
    ("access_key_id", "Access Key ID is required"),
    ("access_key_secret", "Access Key Secret is required"),
    ("bucket", "Bucket name is required"),
    ("region", "Region is required"),
    ("path_template", "Path template is required"),
)


def validate_config_fields(config: StorageConfig) -> list[str]:
    """Return human-readable problems with ``config``; empty when it looks usable."""

    errors = [
        message
        for attribute, message in _REQUIRED_FIELDS
        if not str(getattr(config, attribute) or "").strip()
    ]
    if not 0 <= config.compression_quality <= 100:
        errors.append("Compression quality must be between 0 and 100")
    if not config.endpoint.startswith(("http://", "https://")):
        errors.append("Endpoint must be a valid URL starting with http:// or https://")
    return errors


class ConfigValidationService:
    """Run field checks and cached connection tests for configurations."""

    def __init__(
        self,
        cache: ConnectionTestCache,
        *,
        service_factory: Callable[[StorageConfig], UploadService] = UploadService,
    ) -> None:
        self._cache = cache
        self._service_factory = service_factory

    async def validate_config(
        self,
        config: StorageConfig,
        *,
        force_revalidate: bool = False,
        deadline: datetime | None = None,
    ) -> ConfigValidation:
        errors = validate_config_fields(config)
        if errors:
            logger.info(
                "config.validation.failed",
                provider=config.provider.value,
                errors=len(errors),
            )
            return ConfigValidation(valid=False, errors=errors)

        if force_revalidate:
            await asyncio.to_thread(self._cache.invalidate, config)

        try:
            outcome = await self.test_connection(config, deadline=deadline)
        except ConfigurationError as exc:
            logger.warning(
                "config.validation.unsupported",
                provider=config.provider.value,
                error=str(exc),
            )
            return ConfigValidation(valid=False, errors=[str(exc)])
        return ConfigValidation(valid=outcome.success, errors=[], connection_test=outcome)

    async def test_connection(
        self, config: StorageConfig, *, deadline: datetime | None = None
    ) -> ConnectionTestOutcome:
        """Return the cached outcome for ``config`` or probe and record a new one."""

        cached = await asyncio.to_thread(self._cache.lookup, config)
        if cached is not None:
            logger.info(
                "config.connection_test.cached",
                key=cache_key(config)[:8],
                success=cached.success,
            )
            return cached

        service = self._service_factory(config)
        outcome = await service.test_connection(deadline=deadline)
        await asyncio.to_thread(self._cache.record, config, outcome)
        return outcome

    def cached_connection_status(self, config: StorageConfig) -> ConnectionTestOutcome | None:
        return self._cache.lookup(config)

    def clear_config_cache(self, config: StorageConfig) -> None:
        self._cache.invalidate(config)

    def clear_all(self) -> None:
        self._cache.invalidate_all()


__all__ = ["ConfigValidationService", "validate_config_fields"]
