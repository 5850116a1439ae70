"""Media helpers: content sniffing and object key templates."""

from .content_type import OCTET_STREAM, sniff_content_type
from .object_keys import render_object_key, validate_object_key

__all__ = ["OCTET_STREAM", "sniff_content_type", "render_object_key", "validate_object_key"]
