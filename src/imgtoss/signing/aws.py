"""AWS Signature Version 4 for S3 requests with an unsigned payload.

The caller supplies the ``host`` and ``x-amz-date`` headers it is going to
send; every supplied header is signed. The signing key is derived through the
usual ``date -> region -> s3 -> aws4_request`` HMAC-SHA256 chain.
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from hashlib import sha256
from typing import Mapping
from urllib.parse import quote

from ..exceptions import SigningError
from ._hmac import hmac_digest, lower_keys

ALGORITHM = "AWS4-HMAC-SHA256"
SERVICE = "s3"
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"
AMZ_DATE_FORMAT = "%Y%m%dT%H%M%SZ"


def amz_date(now: datetime | None = None) -> str:
    moment = now or datetime.now(tz=timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(AMZ_DATE_FORMAT)


def encode_path(path: str) -> str:
    """URI-encode an object path, keeping ``/`` separators."""

    return quote(path, safe="/-_.~")


def canonical_request(
    method: str,
    uri: str,
    headers: Mapping[str, str],
    params: Mapping[str, str] | None = None,
) -> tuple[str, str]:
    """Return ``(canonical_request, signed_headers)``."""

    normalized = lower_keys(headers)
    names = sorted(normalized)
    canonical_headers = "".join(f"{name}:{normalized[name].strip()}\n" for name in names)
    signed_headers = ";".join(names)
    query = "&".join(
        f"{quote(name, safe='-_.~')}={quote(value, safe='-_.~')}"
        for name, value in sorted((params or {}).items())
    )
    request = "\n".join(
        [
            method.upper(),
            uri,
            query,
            canonical_headers,
            signed_headers,
            UNSIGNED_PAYLOAD,
        ]
    )
    return request, signed_headers


def signing_key(secret: str, date_stamp: str, region: str) -> bytes:
    if not secret:
        raise SigningError("secret key must not be empty")
    k_date = hmac_digest(f"AWS4{secret}", date_stamp, sha256)
    k_region = hmac_digest(k_date, region, sha256)
    k_service = hmac_digest(k_region, SERVICE, sha256)
    return hmac_digest(k_service, "aws4_request", sha256)


def sign(
    access_key_id: str,
    secret: str,
    method: str,
    uri: str,
    headers: Mapping[str, str],
    params: Mapping[str, str] | None = None,
    *,
    region: str,
) -> str:
    """Return the ``Authorization`` header value for an S3 request."""

    normalized = lower_keys(headers)
    if "host" not in normalized:
        raise SigningError("S3 signature requires a host header")
    request_date = normalized.get("x-amz-date")
    if not request_date:
        raise SigningError("S3 signature requires an x-amz-date header")

    date_stamp = request_date[:8]
    scope = f"{date_stamp}/{region}/{SERVICE}/aws4_request"
    request, signed_headers = canonical_request(method, uri, normalized, params)
    string_to_sign = "\n".join(
        [
            ALGORITHM,
            request_date,
            scope,
            hashlib.sha256(request.encode("utf-8")).hexdigest(),
        ]
    )
    signature = hmac_digest(signing_key(secret, date_stamp, region), string_to_sign, sha256).hex()
    return (
        f"{ALGORITHM} Credential={access_key_id}/{scope}, "
        f"SignedHeaders={signed_headers}, Signature={signature}"
    )


__all__ = [
    "ALGORITHM",
    "UNSIGNED_PAYLOAD",
    "amz_date",
    "encode_path",
    "canonical_request",
    "signing_key",
    "sign",
]
