"""
Structured data (JSON-LD) lookups for the detail page.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterator, Optional

from selectolax.lexbor import LexborHTMLParser

logger = logging.getLogger(__name__)


def iter_json_ld(markup: str) -> Iterator[Any]:
    """Yield every decodable ``application/ld+json`` document in the page."""
    parser = LexborHTMLParser(markup)
    for script in parser.css('script[type="application/ld+json"]'):
        payload = script.text(deep=True, strip=True)
        if not payload:
            continue
        try:
            yield json.loads(payload)
        except json.JSONDecodeError as e:
            logger.debug("Skipping malformed JSON-LD block: %s", e)


def _find_key(node: Any, key: str) -> Iterator[Any]:
    if isinstance(node, dict):
        for k, v in node.items():
            if k == key:
                yield v
            else:
                yield from _find_key(v, key)
    elif isinstance(node, list):
        for item in node:
            yield from _find_key(item, key)


def json_ld_rating_value(markup: str) -> Optional[str]:
    """Return ``aggregateRating.ratingValue`` from the first JSON-LD block carrying one."""
    if "application/ld+json" not in markup:
        return None
    for document in iter_json_ld(markup):
        for aggregate in _find_key(document, "aggregateRating"):
            if isinstance(aggregate, dict) and aggregate.get("ratingValue") is not None:
                return str(aggregate["ratingValue"])
    return None
