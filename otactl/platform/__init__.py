"""Platform helpers (filesystem)."""

from .files import atomic_write_json, exclusive_lock

__all__ = ["atomic_write_json", "exclusive_lock"]
