"""Runtime settings of the storage client."""

from .config import ClientSettings

__all__ = ["ClientSettings"]
