"""Tencent COS request signature (``q-sign-algorithm=sha1&...``).

The signature is computed in two HMAC-SHA1 stages::

    KeyTime      = "<start>;<end>"
    SignKey      = hex(HMAC-SHA1(secret, KeyTime))
    HttpString   = method \\n uri \\n params \\n headers \\n
    StringToSign = "sha1\\n" KeyTime "\\n" sha1_hex(HttpString) "\\n"
    Signature    = hex(HMAC-SHA1(SignKey, StringToSign))

Parameters and headers are lower-cased, sorted and URL-encoded. A token is
only valid inside its KeyTime window, so every request must be signed anew.
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from hashlib import sha1
from typing import Mapping
from urllib.parse import quote

from ._hmac import hmac_digest, lower_keys

DEFAULT_KEY_TIME_SECONDS = 3600


def key_time(now: datetime | int | None = None, *, expires_in: int = DEFAULT_KEY_TIME_SECONDS) -> str:
    if now is None:
        start = int(datetime.now(tz=timezone.utc).timestamp())
    elif isinstance(now, datetime):
        start = int(now.timestamp())
    else:
        start = int(now)
    return f"{start};{start + expires_in}"


def _encode(value: str) -> str:
    return quote(value, safe="-_.~")


def _canonical_pairs(values: Mapping[str, str]) -> tuple[str, str]:
    names = sorted(values)
    pairs = "&".join(f"{_encode(name)}={_encode(values[name])}" for name in names)
    return ";".join(names), pairs


def http_string(
    method: str,
    uri: str,
    headers: Mapping[str, str] | None,
    params: Mapping[str, str] | None,
) -> str:
    _, param_pairs = _canonical_pairs(lower_keys(params))
    _, header_pairs = _canonical_pairs(lower_keys(headers))
    return f"{method.lower()}\n{uri}\n{param_pairs}\n{header_pairs}\n"


def sign(
    secret_id: str,
    secret_key: str,
    method: str,
    uri: str,
    headers: Mapping[str, str] | None,
    params: Mapping[str, str] | None = None,
    *,
    now: datetime | int | None = None,
    expires_in: int = DEFAULT_KEY_TIME_SECONDS,
) -> str:
    """Return the ``Authorization`` header value for a COS request."""

    window = key_time(now, expires_in=expires_in)
    sign_key = hmac_digest(secret_key, window, sha1).hex()

    header_list, _ = _canonical_pairs(lower_keys(headers))
    param_list, _ = _canonical_pairs(lower_keys(params))
    digest = hashlib.sha1(http_string(method, uri, headers, params).encode("utf-8")).hexdigest()
    string_to_sign = f"sha1\n{window}\n{digest}\n"
    signature = hmac_digest(sign_key, string_to_sign, sha1).hex()

    return (
        f"q-sign-algorithm=sha1&q-ak={secret_id}"
        f"&q-sign-time={window}&q-key-time={window}"
        f"&q-header-list={header_list}&q-url-param-list={param_list}"
        f"&q-signature={signature}"
    )


__all__ = ["DEFAULT_KEY_TIME_SECONDS", "key_time", "http_string", "sign"]
