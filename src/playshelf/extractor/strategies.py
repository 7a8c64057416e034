"""
Default matcher chains for every scraped field of the detail page.

The store's markup is undocumented and changes without notice, so each field
keeps a short list of independent rules ordered from most to least trusted.
English and Arabic wording is supported because the page is requested with a
fixed Arabic locale but is sometimes served in English.
"""

from __future__ import annotations

import re
from typing import Dict, Mapping, Optional, Sequence, Tuple

from .matchers import FieldChain, FunctionMatcher, RegexMatcher, collect_all
from .structured_data import json_ld_rating_value
from .text import clean_description, clean_inline

FIELD_NAMES: Tuple[str, ...] = (
    "icon_url",
    "rating",
    "downloads",
    "description",
    "screenshots",
    "reviews_count",
    "updated_on",
    "version",
)

MAX_RATING = 5.0

# --- Locale wording ---

ICON_MARKERS = r'(?:alt="Icon image"|class="T75aBb[^"]*"|itemprop="image")'
STAR_WORDS = r"(?:stars?|out of|نجوم|نجمة)"
DOWNLOAD_WORDS = r"(?:downloads|عملية تنزيل|تنزيل)"
REVIEW_WORDS = r"(?:reviews|مراجعات|مراجعة)"
MAGNITUDE_WORDS = r"(?:K|M|B|ألف|مليون)"
SCREENSHOT_ALTS = r"(?:Screenshot Image|صورة لقطة الشاشة)"
UPDATED_LABELS = r"(?:Updated on|تاريخ التحديث)"
VERSION_LABELS = r"(?:Current Version|الإصدار الحالي)"

# Low-resolution variants of screenshots carry this marker in their URL.
THUMBNAIL_MARKERS: Tuple[str, ...] = ("cp-anchor",)

DOWNLOAD_COUNT = r"[0-9][0-9,.]*[KMB]?\+"


def parse_rating(raw: str) -> Optional[float]:
    """Parse a rating, rejecting anything outside [0, 5]."""
    try:
        value = float(raw)
    except ValueError:
        return None
    if 0.0 <= value <= MAX_RATING:
        return value
    return None


def _non_blank(text: str) -> Optional[str]:
    return text if text.strip() else None


def _description(fragment: str) -> Optional[str]:
    return _non_blank(clean_description(fragment))


def _rating_from_json_ld(markup: str) -> Optional[float]:
    raw = json_ld_rating_value(markup)
    return parse_rating(raw) if raw is not None else None


SCREENSHOT_PATTERNS = (
    re.compile(rf'<img[^>]*\ssrc="([^"]+)"[^>]*\salt="{SCREENSHOT_ALTS}"', re.IGNORECASE),
    re.compile(rf'<img[^>]*\salt="{SCREENSHOT_ALTS}"[^>]*\ssrc="([^"]+)"', re.IGNORECASE),
)


def collect_screenshots(markup: str) -> Optional[Tuple[str, ...]]:
    """Every full-size screenshot URL in order of appearance, without duplicates."""
    urls = collect_all(SCREENSHOT_PATTERNS, markup, exclude=THUMBNAIL_MARKERS)
    return tuple(urls) or None


def _metadata_row(labels: str) -> str:
    return rf">\s*{labels}\s*</div>.*?<div[^>]*>(.*?)</div>"


def default_chains() -> Dict[str, FieldChain]:
    """Build the default, priority-ordered chain for each field."""
    return {
        "icon_url": FieldChain(
            "icon_url",
            (
                RegexMatcher("icon_src_first", rf'<img[^>]*\ssrc="([^"]+)"[^>]*\s{ICON_MARKERS}', flags=re.IGNORECASE),
                RegexMatcher("icon_marker_first", rf'<img[^>]*\s{ICON_MARKERS}[^>]*\ssrc="([^"]+)"', flags=re.IGNORECASE),
            ),
        ),
        "rating": FieldChain(
            "rating",
            (
                FunctionMatcher("json_ld", _rating_from_json_ld),
                RegexMatcher(
                    "star_rating_fragment",
                    r'"starRating":\s*\{\s*"?@type"?:\s*"Rating",\s*"?ratingValue"?:\s*"([0-9.]+)"',
                    transform=parse_rating,
                ),
                RegexMatcher(
                    "aria_label",
                    rf'aria-label="[^"]*?(?<![0-9.])([0-5]\.[0-9])(?![0-9])[^"]*?{STAR_WORDS}',
                    flags=re.IGNORECASE,
                    transform=parse_rating,
                ),
                RegexMatcher(
                    "visible_text",
                    r">\s*([0-5]\.[0-9])\s*<[^\n]*?(?:star|نجم)",
                    flags=re.IGNORECASE,
                    transform=parse_rating,
                ),
            ),
        ),
        "downloads": FieldChain(
            "downloads",
            (
                RegexMatcher(
                    "visible_text",
                    rf">\s*({DOWNLOAD_COUNT})\s*{DOWNLOAD_WORDS}",
                    flags=re.IGNORECASE,
                    transform=str.strip,
                ),
                RegexMatcher("script_data", rf'\["({DOWNLOAD_COUNT})"\]', transform=str.strip),
            ),
        ),
        "description": FieldChain(
            "description",
            (
                RegexMatcher(
                    "data_g_id",
                    r'data-g-id="description"[^>]*>(.*?)</div>',
                    flags=re.DOTALL,
                    transform=_description,
                ),
                RegexMatcher(
                    "itemprop",
                    r'itemprop="description"[^>]*><div[^>]*>(.*?)</div></div>',
                    flags=re.DOTALL,
                    transform=_description,
                ),
            ),
        ),
        "screenshots": FieldChain(
            "screenshots",
            (FunctionMatcher("screenshot_alt", collect_screenshots),),
        ),
        "reviews_count": FieldChain(
            "reviews_count",
            (
                RegexMatcher(
                    "visible_text",
                    rf">\s*([0-9][0-9,.]*\s*{MAGNITUDE_WORDS}?)\s*{REVIEW_WORDS}\s*<",
                    flags=re.IGNORECASE,
                    transform=str.strip,
                ),
            ),
        ),
        "updated_on": FieldChain(
            "updated_on",
            (
                RegexMatcher(
                    "metadata_row",
                    _metadata_row(UPDATED_LABELS),
                    flags=re.DOTALL | re.IGNORECASE,
                    transform=clean_inline,
                ),
            ),
        ),
        "version": FieldChain(
            "version",
            (
                RegexMatcher(
                    "metadata_row",
                    _metadata_row(VERSION_LABELS),
                    flags=re.DOTALL | re.IGNORECASE,
                    transform=clean_inline,
                ),
            ),
        ),
    }


def build_chains(field_order: Optional[Mapping[str, Sequence[str]]] = None) -> Dict[str, FieldChain]:
    """Default chains with the configured per-field priority overrides applied."""
    chains = default_chains()
    for field_name, preferred in (field_order or {}).items():
        if field_name not in chains:
            raise KeyError(f"Unknown field: {field_name}")
        chains[field_name] = chains[field_name].reordered(preferred)
    return chains
