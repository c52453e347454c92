"""Media catalog access (read-only view of the external media index)."""

from .static_media_catalog import StaticMediaCatalog

__all__ = ["StaticMediaCatalog"]
