"""
PlayShelf - app catalog enriched with metadata scraped from store detail pages.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import Config
from .extractor import AppMetadataExtractor
from .protocols import AppMetadata, CallerInputError, MetadataResult
from .service import MetadataService

__all__ = [
    "__version__",
    "AppMetadata",
    "AppMetadataExtractor",
    "CallerInputError",
    "Config",
    "MetadataResult",
    "MetadataService",
]
