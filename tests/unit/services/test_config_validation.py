from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import httpx
import pytest

from src.imgtoss.domain import StorageConfig, StorageProvider
from src.imgtoss.exceptions import ProbeFailed
from src.imgtoss.services import (
    ConfigValidationService,
    ConnectionTestCache,
    UploadService,
    validate_config_fields,
)

pytestmark = pytest.mark.unit

CONFIG = StorageConfig(
    provider=StorageProvider.ALIYUN,
    endpoint="https://unreachable.invalid",
    access_key_id="id",
    access_key_secret="secret",
    bucket="test-bucket",
    region="cn-hangzhou",
)


class CountingAdapter:
    def __init__(self) -> None:
        self.probe_calls = 0

    async def probe(self, *, deadline=None):
        self.probe_calls += 1
        raise ProbeFailed(None, "HTTP error: name resolution failed")

    def object_url(self, key):  # pragma: no cover - unused
        return key


@pytest.fixture
def adapter() -> CountingAdapter:
    return CountingAdapter()


@pytest.fixture
def validator(tmp_path: Path, adapter: CountingAdapter) -> ConfigValidationService:
    cache = ConnectionTestCache(tmp_path / "connection_cache.json")
    return ConfigValidationService(
        cache,
        service_factory=lambda config: UploadService(config, adapter=adapter),
    )


def test_field_validation_collects_every_problem() -> None:
    config = replace(
        CONFIG,
        endpoint="",
        access_key_id=" ",
        access_key_secret="",
        bucket="",
        region="",
        path_template="",
        compression_quality=101,
    )

    errors = validate_config_fields(config)

    assert errors == [
        "Endpoint is required",
        "Access Key ID is required",
        "Access Key Secret is required",
        "Bucket name is required",
        "Region is required",
        "Path template is required",
        "Compression quality must be between 0 and 100",
        "Endpoint must be a valid URL starting with http:// or https://",
    ]


def test_field_validation_rejects_endpoint_without_scheme() -> None:
    errors = validate_config_fields(replace(CONFIG, endpoint="oss-cn-hangzhou.aliyuncs.com"))

    assert errors == ["Endpoint must be a valid URL starting with http:// or https://"]


@pytest.mark.asyncio
async def test_field_errors_skip_the_network(validator, adapter) -> None:
    result = await validator.validate_config(replace(CONFIG, bucket=""))

    assert result.valid is False
    assert result.errors == ["Bucket name is required"]
    assert result.connection_test is None
    assert adapter.probe_calls == 0


@pytest.mark.asyncio
async def test_second_connection_test_hits_cache(validator, adapter) -> None:
    first = await validator.test_connection(CONFIG)
    second = await validator.test_connection(CONFIG)

    assert first.success is False
    assert second == first
    assert adapter.probe_calls == 1
    assert validator.cached_connection_status(CONFIG) == first


@pytest.mark.asyncio
async def test_validate_config_reports_connection_outcome(validator, adapter) -> None:
    result = await validator.validate_config(CONFIG)
    again = await validator.validate_config(CONFIG)

    assert result.valid is False
    assert result.errors == []
    assert result.connection_test is not None
    assert "name resolution failed" in result.connection_test.error
    assert again.connection_test == result.connection_test
    assert adapter.probe_calls == 1


@pytest.mark.asyncio
async def test_force_revalidate_bypasses_cache(validator, adapter) -> None:
    await validator.validate_config(CONFIG)
    await validator.validate_config(CONFIG, force_revalidate=True)

    assert adapter.probe_calls == 2


@pytest.mark.asyncio
async def test_clear_paths_drop_cached_status(validator) -> None:
    await validator.test_connection(CONFIG)
    validator.clear_config_cache(CONFIG)
    assert validator.cached_connection_status(CONFIG) is None

    await validator.test_connection(CONFIG)
    validator.clear_all()
    assert validator.cached_connection_status(CONFIG) is None


@pytest.mark.asyncio
async def test_unsupported_provider_is_reported_as_error(tmp_path: Path) -> None:
    validator = ConfigValidationService(ConnectionTestCache(tmp_path / "cache.json"))

    result = await validator.validate_config(replace(CONFIG, provider=StorageProvider.CUSTOM))

    assert result.valid is False
    assert result.errors == ["Unsupported storage provider 'custom'"]


@pytest.mark.asyncio
async def test_unreachable_host_through_real_adapter(monkeypatch, tmp_path: Path) -> None:
    calls: list[str] = []

    class FailingClient:
        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc_info):
            return None

        async def request(self, method, url, **kwargs):
            calls.append(url)
            raise httpx.ConnectError("name resolution failed")

    monkeypatch.setattr("httpx.AsyncClient", lambda timeout: FailingClient())
    validator = ConfigValidationService(ConnectionTestCache(tmp_path / "cache.json"))

    first = await validator.test_connection(CONFIG)
    second = await validator.test_connection(CONFIG)

    assert first.success is False
    assert first.latency_ms is not None
    assert second == first
    assert calls == ["https://test-bucket.unreachable.invalid/"]
