"""Smoke-check that the public modules expose their expected symbols."""

from __future__ import annotations

from importlib import import_module
from types import ModuleType

import pytest

MODULES_AND_SYMBOLS = [
    ("src.imgtoss", "UploadService"),
    ("src.imgtoss.core.config", "ClientSettings"),
    ("src.imgtoss.logging", "configure_logging"),
    ("src.imgtoss.exceptions", "UploadFailed"),
    ("src.imgtoss.domain", "StorageConfig"),
    ("src.imgtoss.domain.deadlines", "remaining_seconds"),
    ("src.imgtoss.signing.aliyun", "sign"),
    ("src.imgtoss.signing.tencent", "sign"),
    ("src.imgtoss.signing.aws", "sign"),
    ("src.imgtoss.media", "sniff_content_type"),
    ("src.imgtoss.providers", "create_adapter"),
    ("src.imgtoss.providers.providers_aliyun", "AliyunAdapter"),
    ("src.imgtoss.providers.providers_tencent", "TencentAdapter"),
    ("src.imgtoss.providers.providers_aws", "AwsS3Adapter"),
    ("src.imgtoss.services", "ConfigValidationService"),
    ("src.imgtoss.services.connection_cache", "ConnectionTestCache"),
    ("src.imgtoss.services.progress", "ProgressRegistry"),
]


@pytest.mark.parametrize(("module_name", "symbol"), MODULES_AND_SYMBOLS)
def test_importable_symbols(module_name: str, symbol: str) -> None:
    """Import modules and verify that public symbols are exposed."""

    module: ModuleType = import_module(module_name)
    assert hasattr(module, symbol), f"{module_name} missing {symbol}"
