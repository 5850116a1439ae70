"""Factory selecting the adapter for a configuration's provider tag."""

from ..domain import StorageConfig, StorageProvider
from ..exceptions import UnsupportedProvider
from ..signing.tencent import DEFAULT_KEY_TIME_SECONDS
from .base import DEFAULT_TIMEOUT_SECONDS, StorageAdapter
from .providers_aliyun import AliyunAdapter
from .providers_aws import AwsS3Adapter
from .providers_tencent import TencentAdapter


def create_adapter(
    config: StorageConfig,
    *,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    key_time_seconds: int = DEFAULT_KEY_TIME_SECONDS,
) -> StorageAdapter:
    """Instantiate the adapter for ``config.provider``."""
    provider = config.provider
    if provider == StorageProvider.ALIYUN:
        return AliyunAdapter(config=config, timeout_seconds=timeout_seconds)
    if provider == StorageProvider.TENCENT:
        return TencentAdapter(
            config=config,
            timeout_seconds=timeout_seconds,
            key_time_seconds=key_time_seconds,
        )
    if provider == StorageProvider.AWS:
        return AwsS3Adapter(config=config, timeout_seconds=timeout_seconds)
    raise UnsupportedProvider(getattr(provider, "value", str(provider)))
