"""
Text clean-up helpers for fragments cut out of detail-page markup.
"""

from __future__ import annotations

import re

_LINE_BREAK = re.compile(r"<br\s*/?>", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")

# Only the entities the store actually emits inside description blocks.
# &amp; goes last so "&amp;quot;" decodes to "&quot;" and not to a quote.
_ENTITIES = (("&quot;", '"'), ("&amp;", "&"))


def strip_tags(fragment: str) -> str:
    """Remove every markup tag, keeping the text between them."""
    return _TAG.sub("", fragment)


def decode_entities(text: str) -> str:
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return text


def clean_description(fragment: str) -> str:
    """Turn a description block into plain text with newlines for ``<br>``."""
    text = _LINE_BREAK.sub("\n", fragment)
    return decode_entities(strip_tags(text))


def clean_inline(fragment: str) -> str:
    """Text of a short metadata cell: tags removed, surrounding whitespace trimmed."""
    return strip_tags(fragment).strip()


def truncate(text: str, max_length: int, ellipsis: str = "...") -> str:
    """Cut ``text`` to ``max_length`` characters and append ``ellipsis`` if it was longer."""
    if len(text) > max_length:
        return text[:max_length] + ellipsis
    return text
