"""Object key rendering and validation."""

from __future__ import annotations

import string
from datetime import datetime, timezone
from pathlib import PurePosixPath

from ..exceptions import ConfigurationError

MAX_KEY_BYTES = 1024

_FORMATTER = string.Formatter()


def render_object_key(template: str, filename: str, *, now: datetime | None = None) -> str:
    """Expand a path template such as ``images/{year}/{month}/{filename}``.

    Supported placeholders: ``filename``, ``name``, ``ext``, ``date``,
    ``year``, ``month``, ``day`` and ``timestamp``.
    """

    moment = now or datetime.now(tz=timezone.utc)
    base = PurePosixPath(filename.replace("\\", "/")).name
    suffix = PurePosixPath(base).suffix
    values = {
        "filename": base,
        "name": PurePosixPath(base).stem,
        "ext": suffix.lstrip("."),
        "date": moment.strftime("%Y-%m-%d"),
        "year": moment.strftime("%Y"),
        "month": moment.strftime("%m"),
        "day": moment.strftime("%d"),
        "timestamp": str(int(moment.timestamp())),
    }
    for _, field_name, _, _ in _FORMATTER.parse(template):
        if field_name is not None and field_name not in values:
            raise ConfigurationError(f"Unknown placeholder '{{{field_name}}}' in path template")
    return template.format(**values).lstrip("/")


def validate_object_key(key: str) -> str | None:
    """Return a problem description for ``key`` or ``None`` when it is usable."""

    if not key or not key.strip():
        return "object key must not be empty"
    if key.startswith("/"):
        return "object key must not start with '/'"
    if len(key.encode("utf-8")) > MAX_KEY_BYTES:
        return f"object key exceeds {MAX_KEY_BYTES} bytes"
    return None


__all__ = ["MAX_KEY_BYTES", "render_object_key", "validate_object_key"]
