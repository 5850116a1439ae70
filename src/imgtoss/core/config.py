"""Runtime settings for the storage client.

Values come from ``IMGTOSS_*`` environment variables. Storage credentials are
not settings: they arrive per call inside :class:`~src.imgtoss.domain.StorageConfig`.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_config_dir() -> Path:
    return Path.home() / ".config" / "imgtoss"


class ClientSettings(BaseSettings):
    """Pydantic settings container for adapters and the connection cache."""

    model_config = SettingsConfigDict(env_prefix="IMGTOSS_")

    config_dir: Path = Field(
        default_factory=_default_config_dir,
        description="Directory holding the connection-test cache mirror.",
    )
    connection_cache_file: str = Field(
        default="connection_cache.json",
        min_length=1,
        description="File name of the JSON cache mirror inside config_dir.",
    )
    connection_cache_ttl_seconds: int = Field(
        default=300,
        ge=0,
        description="How long a recorded connection test stays valid.",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout applied to every provider HTTP request in seconds.",
    )
    tencent_key_time_seconds: int = Field(
        default=3600,
        ge=60,
        description="Validity window of Tencent COS KeyTime signatures.",
    )
    log_level: str = Field(default="INFO", description="Root logging level.")

    @property
    def cache_path(self) -> Path:
        return self.config_dir / self.connection_cache_file


__all__ = ["ClientSettings"]
