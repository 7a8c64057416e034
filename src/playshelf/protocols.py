"""
Core data types shared by the fetcher, the extractor and the service layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class CallerInputError(ValueError):
    """Raised when the caller supplies a missing or empty app identifier."""

    pass


class FetchFailureKind(Enum):
    """Why the detail page could not be retrieved."""

    ORIGIN_UNAVAILABLE = "origin_unavailable"  # non-2xx from the store
    TRANSPORT_ERROR = "transport_error"  # DNS, timeout, connection reset


class DegradationReason(Enum):
    """Why a metadata record carries only default values."""

    ORIGIN_UNAVAILABLE = "origin_unavailable"
    TRANSPORT_ERROR = "transport_error"
    PROCESSING_ERROR = "processing_error"

    @classmethod
    def from_failure(cls, kind: FetchFailureKind) -> "DegradationReason":
        return cls(kind.value)


@dataclass(frozen=True)
class FetchSuccess:
    """Markup of a detail page returned with a 2xx status."""

    url: str
    status: int
    markup: str
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class FetchFailure:
    """A recoverable failure to obtain the detail page."""

    url: str
    kind: FetchFailureKind
    status: Optional[int] = None
    error: Optional[str] = None
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return False


FetchResult = Union[FetchSuccess, FetchFailure]


@dataclass(frozen=True)
class AppMetadata:
    """
    Metadata scraped for one app.

    Every field except ``app_id`` and ``source_url`` is best-effort and falls
    back to an empty value, never ``None``.
    """

    app_id: str
    source_url: str
    icon_url: str = ""
    rating: float = 0
    downloads: str = ""
    description: str = ""
    full_description: str = ""
    screenshots: Tuple[str, ...] = field(default_factory=tuple)
    reviews_count: str = ""
    updated_on: str = ""
    version: str = ""

    @classmethod
    def empty(cls, app_id: str, source_url: str) -> "AppMetadata":
        """Build the degraded record used when nothing could be scraped."""
        return cls(app_id=app_id, source_url=source_url)

    @property
    def is_empty(self) -> bool:
        return self == AppMetadata.empty(self.app_id, self.source_url)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON shape consumed by the catalog UI."""
        return {
            "id": self.app_id,
            "iconUrl": self.icon_url,
            "rating": self.rating,
            "downloads": self.downloads,
            "description": self.description,
            "fullDescription": self.full_description,
            "screenshots": list(self.screenshots),
            "reviewsCount": self.reviews_count,
            "updatedOn": self.updated_on,
            "version": self.version,
            "sourceUrl": self.source_url,
        }


@dataclass(frozen=True)
class MetadataResult:
    """Outcome of one metadata request, degraded or not."""

    metadata: AppMetadata
    degraded: bool = False
    reason: Optional[DegradationReason] = None
    status: Optional[int] = None
    cached: bool = False

    @classmethod
    def ok(cls, metadata: AppMetadata) -> "MetadataResult":
        return cls(metadata=metadata)

    @classmethod
    def degrade(
        cls,
        app_id: str,
        source_url: str,
        reason: DegradationReason,
        status: Optional[int] = None,
    ) -> "MetadataResult":
        return cls(
            metadata=AppMetadata.empty(app_id, source_url),
            degraded=True,
            reason=reason,
            status=status,
        )

    def from_cache(self) -> "MetadataResult":
        return replace(self, cached=True)
