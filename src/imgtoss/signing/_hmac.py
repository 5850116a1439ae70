"""HMAC primitive shared by the provider signers."""

from __future__ import annotations

import hmac
from typing import Callable, Mapping

from ..exceptions import SigningError


def hmac_digest(key: str | bytes, message: str, digestmod: Callable) -> bytes:
    """Return ``HMAC(key, message)`` or raise :class:`SigningError`.

    Empty key material is refused: every supported provider issues non-empty
    secrets, so an empty one is always a configuration mistake.
    """

    if isinstance(key, str):
        key = key.encode("utf-8")
    if not isinstance(key, (bytes, bytearray)):
        raise SigningError(f"unsupported key material type: {type(key).__name__}")
    if not key:
        raise SigningError("secret key must not be empty")
    try:
        return hmac.new(bytes(key), message.encode("utf-8"), digestmod).digest()
    except (TypeError, ValueError) as exc:
        raise SigningError(str(exc)) from exc


def lower_keys(headers: Mapping[str, str] | None) -> dict[str, str]:
    return {str(name).lower(): str(value) for name, value in (headers or {}).items()}
