"""Object-storage adapters, one per supported provider."""

from .base import StorageAdapter
from .providers_aliyun import AliyunAdapter
from .providers_aws import AwsS3Adapter
from .providers_factory import create_adapter
from .providers_tencent import TencentAdapter

__all__ = [
    "StorageAdapter",
    "AliyunAdapter",
    "AwsS3Adapter",
    "TencentAdapter",
    "create_adapter",
]
