"""Outbound fetching of store detail pages."""

from .http_client import StoreFetcher, require_app_id

__all__ = ["StoreFetcher", "require_app_id"]
