from __future__ import annotations

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from src.imgtoss.domain import StorageConfig, StorageProvider, UploadProgress
from src.imgtoss.exceptions import DeleteFailed, ProbeFailed, UploadFailed
from src.imgtoss.providers import AliyunAdapter
from tests.helpers.http_stubs import DummyResponse, install_client

pytestmark = pytest.mark.unit

NOW = datetime(2025, 7, 1, 8, 0, 0, tzinfo=timezone.utc)


def make_config(**overrides) -> StorageConfig:
    values = {
        "provider": StorageProvider.ALIYUN,
        "endpoint": "https://oss-cn-hangzhou.aliyuncs.com",
        "access_key_id": "LTAI-test",
        "access_key_secret": "secret",
        "bucket": "test-bucket",
        "region": "cn-hangzhou",
    }
    values.update(overrides)
    return StorageConfig(**values)


def make_adapter(**overrides) -> AliyunAdapter:
    return AliyunAdapter(config=make_config(**overrides), clock=lambda: NOW)


@pytest.mark.asyncio
async def test_upload_signs_request_and_reports_progress(monkeypatch) -> None:
    client = install_client(monkeypatch, [DummyResponse(200)])
    events: list[UploadProgress] = []

    url = await make_adapter().upload("img/1.png", b"\x89PNG-bytes", "image/png", events.append)

    assert url == "https://test-bucket.oss-cn-hangzhou.aliyuncs.com/img/1.png"
    request = client.requests[0]
    assert request["method"] == "PUT"
    assert request["url"] == "https://test-bucket.oss-cn-hangzhou.aliyuncs.com/img/1.png"
    assert request["content"] == b"\x89PNG-bytes"
    assert request["headers"]["Date"] == "Tue, 01 Jul 2025 08:00:00 GMT"
    assert request["headers"]["Content-Type"] == "image/png"
    assert request["headers"]["Authorization"].startswith("OSS LTAI-test:")
    assert [(e.progress, e.bytes_uploaded, e.total_bytes) for e in events] == [
        (0.0, 0, 11),
        (100.0, 11, 11),
    ]


@pytest.mark.asyncio
async def test_upload_non_2xx_raises_upload_failed(monkeypatch) -> None:
    install_client(monkeypatch, [DummyResponse(403, "<Code>AccessDenied</Code>")])
    events: list[UploadProgress] = []

    with pytest.raises(UploadFailed) as excinfo:
        await make_adapter().upload("img/1.png", b"data", "image/png", events.append)

    assert excinfo.value.status == 403
    assert "AccessDenied" in excinfo.value.body
    assert [e.progress for e in events] == [0.0]


@pytest.mark.asyncio
async def test_upload_transport_error_becomes_upload_failed(monkeypatch) -> None:
    install_client(monkeypatch, [httpx.ConnectError("connection refused")])

    with pytest.raises(UploadFailed) as excinfo:
        await make_adapter().upload("img/1.png", b"data", "image/png")

    assert excinfo.value.status is None
    assert "connection refused" in str(excinfo.value)


@pytest.mark.asyncio
async def test_expired_deadline_fails_before_any_request(monkeypatch) -> None:
    client = install_client(monkeypatch, [DummyResponse(200)])
    deadline = datetime.now(timezone.utc) - timedelta(seconds=1)

    with pytest.raises(UploadFailed, match="deadline"):
        await make_adapter().upload("img/1.png", b"data", "image/png", deadline=deadline)

    assert client.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("bucket", ["", "bad bucket"])
async def test_invalid_bucket_fails_upload_before_io(monkeypatch, bucket: str) -> None:
    client = install_client(monkeypatch, [])

    with pytest.raises(UploadFailed, match="bucket name") as excinfo:
        await make_adapter(bucket=bucket).upload("img/1.png", b"data", "image/png")

    assert excinfo.value.status is None
    assert client.requests == []


@pytest.mark.asyncio
async def test_delete_failure(monkeypatch) -> None:
    install_client(monkeypatch, [DummyResponse(404, "NoSuchKey")])

    with pytest.raises(DeleteFailed) as excinfo:
        await make_adapter().delete("img/1.png")

    assert excinfo.value.status == 404


@pytest.mark.asyncio
async def test_list_objects_sends_prefix_and_returns_empty(monkeypatch) -> None:
    client = install_client(monkeypatch, [DummyResponse(200, "<ListBucketResult/>")])

    result = await make_adapter().list_objects("img/")

    assert result == []
    assert client.requests[0]["params"] == {"prefix": "img/"}


@pytest.mark.asyncio
async def test_probe_success_and_403_failure(monkeypatch) -> None:
    client = install_client(monkeypatch, [DummyResponse(200), DummyResponse(403, "denied")])
    adapter = make_adapter()

    report = await adapter.probe()
    with pytest.raises(ProbeFailed) as excinfo:
        await adapter.probe()

    assert report.bucket_exists is True
    assert client.requests[0]["method"] == "HEAD"
    assert excinfo.value.status == 403
    assert excinfo.value.bucket_exists is False


def test_object_url_prefers_cdn_domain() -> None:
    adapter = make_adapter(cdn_domain="https://cdn.example.com/")

    assert adapter.object_url("img/1.png") == "https://cdn.example.com/img/1.png"


@pytest.mark.asyncio
async def test_object_url_matches_upload_target_for_unsafe_keys(monkeypatch) -> None:
    client = install_client(monkeypatch, [DummyResponse(200)])
    adapter = make_adapter()

    url = await adapter.upload("img/my cat 猫.png", b"data", "image/png")

    assert url == client.requests[0]["url"]
    assert url == (
        "https://test-bucket.oss-cn-hangzhou.aliyuncs.com/img/my%20cat%20%E7%8C%AB.png"
    )


def test_cdn_url_is_encoded_too() -> None:
    adapter = make_adapter(cdn_domain="cdn.example.com")

    assert adapter.object_url("a b.png") == "https://cdn.example.com/a%20b.png"
