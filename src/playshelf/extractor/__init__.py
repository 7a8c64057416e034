"""
PlayShelf Extraction Module - ordered fallback matching over detail pages

Each field of the metadata record is recovered by a chain of independent
matchers tried in priority order (first match wins):

- icon, rating, downloads, description, screenshots
- review count, last-updated date, current version

Matchers are plain callables so a markup change on the store side is fixed by
editing a single rule without touching the combinator or other fields.
"""

from .app_extractor import AppMetadataExtractor
from .matchers import FieldChain, FunctionMatcher, Matcher, RegexMatcher, collect_all, first_match
from .strategies import FIELD_NAMES, build_chains, default_chains, parse_rating
from .text import clean_description, clean_inline, decode_entities, strip_tags, truncate

__all__ = [
    "AppMetadataExtractor",
    "FieldChain",
    "FunctionMatcher",
    "Matcher",
    "RegexMatcher",
    "collect_all",
    "first_match",
    "FIELD_NAMES",
    "build_chains",
    "default_chains",
    "parse_rating",
    "clean_description",
    "clean_inline",
    "decode_entities",
    "strip_tags",
    "truncate",
]
