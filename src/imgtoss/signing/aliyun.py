"""Aliyun OSS header signature (``Authorization: OSS <id>:<signature>``).

String to sign::

    VERB \\n Content-MD5 \\n Content-Type \\n Date \\n CanonicalizedResource

where ``CanonicalizedResource`` is ``/bucket/key`` (``/bucket/`` for the
bucket root). The signature is ``Base64(HMAC-SHA1(secret, string))``.
"""

from __future__ import annotations

import base64
from hashlib import sha1
from typing import Mapping

from ..exceptions import SigningError
from ._hmac import hmac_digest, lower_keys
from .dates import http_date

PROVIDER_ID = "OSS"


def canonical_resource(bucket: str, key: str = "") -> str:
    return f"/{bucket}/{key.lstrip('/')}"


def string_to_sign(method: str, resource: str, headers: Mapping[str, str] | None) -> str:
    normalized = lower_keys(headers)
    date = normalized.get("date")
    if not date:
        raise SigningError("Aliyun signature requires a Date header")
    return "\n".join(
        [
            method.upper(),
            normalized.get("content-md5", ""),
            normalized.get("content-type", ""),
            date,
            resource,
        ]
    )


def sign(
    access_key_id: str,
    secret: str,
    method: str,
    resource: str,
    headers: Mapping[str, str] | None,
    params: Mapping[str, str] | None = None,
) -> str:
    """Return the ``Authorization`` header value for an OSS request.

    ``params`` is accepted for signature parity with the other signers; the
    requests issued by this client carry no sub-resources to canonicalize.
    """

    canonical = string_to_sign(method, resource, headers)
    signature = base64.b64encode(hmac_digest(secret, canonical, sha1)).decode("ascii")
    return f"{PROVIDER_ID} {access_key_id}:{signature}"


__all__ = ["PROVIDER_ID", "http_date", "canonical_resource", "string_to_sign", "sign"]
