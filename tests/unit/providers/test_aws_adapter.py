from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from src.imgtoss.domain import StorageConfig, StorageProvider
from src.imgtoss.exceptions import ListFailed, ProbeFailed
from src.imgtoss.providers import AwsS3Adapter
from tests.helpers.http_stubs import DummyResponse, install_client

pytestmark = pytest.mark.unit

NOW = datetime(2025, 7, 1, 8, 0, 0, tzinfo=timezone.utc)


def make_adapter() -> AwsS3Adapter:
    config = StorageConfig(
        provider=StorageProvider.AWS,
        endpoint="https://s3.us-east-1.amazonaws.com",
        access_key_id="AKIAtest",
        access_key_secret="secret",
        bucket="test-bucket",
        region="us-east-1",
    )
    return AwsS3Adapter(config=config, clock=lambda: NOW)


@pytest.mark.asyncio
async def test_upload_uses_virtual_host_and_sigv4(monkeypatch) -> None:
    client = install_client(monkeypatch, [DummyResponse(200)])

    url = await make_adapter().upload("img/a b.png", b"data", "image/png")

    request = client.requests[0]
    assert url == request["url"]
    assert request["url"] == "https://test-bucket.s3.us-east-1.amazonaws.com/img/a%20b.png"
    headers = request["headers"]
    assert headers["X-Amz-Date"] == "20250701T080000Z"
    assert headers["X-Amz-Content-Sha256"] == "UNSIGNED-PAYLOAD"
    assert headers["Authorization"].startswith(
        "AWS4-HMAC-SHA256 Credential=AKIAtest/20250701/us-east-1/s3/aws4_request, "
        "SignedHeaders=content-type;host;x-amz-content-sha256;x-amz-date, Signature="
    )


@pytest.mark.asyncio
async def test_probe_treats_403_as_reachable(monkeypatch) -> None:
    install_client(monkeypatch, [DummyResponse(200), DummyResponse(403)])
    adapter = make_adapter()

    ok = await adapter.probe()
    reachable = await adapter.probe()

    assert ok.warning is None
    assert reachable.status_code == 403
    assert reachable.warning is not None


@pytest.mark.asyncio
async def test_probe_404_fails(monkeypatch) -> None:
    install_client(monkeypatch, [DummyResponse(404, "NoSuchBucket")])

    with pytest.raises(ProbeFailed) as excinfo:
        await make_adapter().probe()

    assert excinfo.value.status == 404


@pytest.mark.asyncio
async def test_probe_timeout_becomes_probe_failed(monkeypatch) -> None:
    install_client(monkeypatch, [asyncio.TimeoutError()])
    deadline = datetime.now(timezone.utc) + timedelta(seconds=5)

    with pytest.raises(ProbeFailed) as excinfo:
        await make_adapter().probe(deadline=deadline)

    assert excinfo.value.status is None
    assert "deadline" in str(excinfo.value)


@pytest.mark.asyncio
async def test_list_objects_uses_v2_listing(monkeypatch) -> None:
    client = install_client(monkeypatch, [DummyResponse(200), DummyResponse(500, "err")])
    adapter = make_adapter()

    assert await adapter.list_objects("img/") == []
    with pytest.raises(ListFailed):
        await adapter.list_objects()

    assert client.requests[0]["params"] == {"list-type": "2", "prefix": "img/"}
    assert client.requests[1]["params"] == {"list-type": "2"}
