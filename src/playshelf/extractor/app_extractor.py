"""
App Metadata Extractor - detail-page markup to AppMetadata

Runs one prioritized matcher chain per field over the same markup and
normalizes the hits into an :class:`~playshelf.protocols.AppMetadata`. The
extraction is total: a field with no hit keeps its empty default and never
affects the other fields.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Sequence

from ..config.config import ExtractionSettings
from ..observability.metrics import increment
from ..protocols import AppMetadata
from .matchers import FieldChain
from .strategies import FIELD_NAMES, build_chains
from .text import truncate

logger = logging.getLogger(__name__)


class AppMetadataExtractor:
    """
    Pattern-based extractor for store detail pages.

    Given the same markup it always produces the same record. Chain order can
    be tuned through ``ExtractionSettings.field_order`` since the best order is
    found empirically against live pages.
    """

    def __init__(
        self,
        settings: Optional[ExtractionSettings] = None,
        chains: Optional[Mapping[str, FieldChain]] = None,
    ) -> None:
        self.settings = settings or ExtractionSettings()
        self.chains: Dict[str, FieldChain] = dict(chains) if chains is not None else build_chains(self.settings.field_order)

        missing = [name for name in FIELD_NAMES if name not in self.chains]
        if missing:
            raise ValueError(f"Missing matcher chains for: {', '.join(missing)}")

    def chain_names(self) -> Dict[str, Sequence[str]]:
        """Matcher names per field, in the order they are tried."""
        return {name: chain.names for name, chain in self.chains.items()}

    def extract_fields(self, markup: str) -> Dict[str, Any]:
        """Resolve every field chain; fields without a hit are left out."""
        found: Dict[str, Any] = {}
        for name in FIELD_NAMES:
            value = self.chains[name].resolve(markup)
            if value is None:
                increment("extraction_misses_total", field=name)
                continue
            found[name] = value
        return found

    def extract(self, markup: str, app_id: str, source_url: str) -> AppMetadata:
        """Build the metadata record for ``app_id`` from detail-page markup."""
        found = self.extract_fields(markup)
        full_description = found.get("description", "")

        metadata = AppMetadata(
            app_id=app_id,
            source_url=source_url,
            icon_url=found.get("icon_url", ""),
            rating=found.get("rating", 0),
            downloads=found.get("downloads", ""),
            description=truncate(
                full_description,
                self.settings.description_max_length,
                self.settings.ellipsis,
            ),
            full_description=full_description,
            screenshots=tuple(found.get("screenshots", ())),
            reviews_count=found.get("reviews_count", ""),
            updated_on=found.get("updated_on", ""),
            version=found.get("version", ""),
        )

        logger.debug(
            "Extracted %d/%d fields for %s",
            len(found),
            len(FIELD_NAMES),
            app_id,
        )
        return metadata
