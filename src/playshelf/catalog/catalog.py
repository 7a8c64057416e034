"""
Known-apps catalog loaded from YAML.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

log = logging.getLogger(__name__)

ALL_CATEGORIES = "All"


class CatalogEntry(BaseModel):
    """One app listed by the catalog."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    title: str
    developer: str
    category: str
    featured: bool = False
    direct_download_url: Optional[str] = Field(default=None, alias="directDownloadUrl")

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("catalog entry id must not be empty")
        return v.strip()

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class Catalog:
    """In-memory catalog with category filtering and local search."""

    def __init__(self, entries: Iterable[CatalogEntry] = ()):
        self.entries: List[CatalogEntry] = []
        seen: set[str] = set()
        for entry in entries:
            if entry.id in seen:
                log.warning("Duplicate catalog entry ignored: %s", entry.id)
                continue
            seen.add(entry.id)
            self.entries.append(entry)

    @classmethod
    def from_yaml(cls, path: Path) -> "Catalog":
        if not path.is_file():
            log.warning("Catalog file not found: %s. Starting with an empty catalog.", path)
            return cls()
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls(CatalogEntry.model_validate(item) for item in data.get("apps", []))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def get(self, app_id: str) -> Optional[CatalogEntry]:
        for entry in self.entries:
            if entry.id == app_id:
                return entry
        return None

    def categories(self) -> List[str]:
        """Categories in order of first appearance."""
        return list(dict.fromkeys(entry.category for entry in self.entries))

    def filter(self, category: Optional[str] = None) -> List[CatalogEntry]:
        if not category or category.casefold() == ALL_CATEGORIES.casefold():
            return list(self.entries)
        wanted = category.casefold()
        return [entry for entry in self.entries if entry.category.casefold() == wanted]

    def featured(self, category: Optional[str] = None) -> List[CatalogEntry]:
        return [entry for entry in self.filter(category) if entry.featured]

    def search(self, query: str, category: Optional[str] = None, featured: bool = False) -> List[CatalogEntry]:
        """Case-insensitive substring search over id, title, developer and category."""
        needle = query.strip().casefold()
        candidates = self.featured(category) if featured else self.filter(category)
        if not needle:
            return candidates
        return [
            entry
            for entry in candidates
            if any(needle in field.casefold() for field in (entry.id, entry.title, entry.developer, entry.category))
        ]
