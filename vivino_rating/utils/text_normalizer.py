"""Text normalization utilities for wine names and scraped rating text.

This module handles three distinct concerns:

1. **Wine name normalization** -- Produces the single key used by both the
   persistent cache and the in-flight coalescer, so that " Baron de Ley "
   and "baron de ley" collapse to one lookup.

2. **Rating text parsing** -- Converts locale-dependent numbers scraped
   from legacy card markup ("4,4", "1,234", "12 345") into floats and ints.

3. **Match scoring** -- Scores how closely the name Vivino returned matches
   the name that was queried, via rapidfuzz ``token_sort_ratio``.
"""

import re
from urllib.parse import urljoin, urlsplit

from rapidfuzz import fuzz

# Digits with optional "," "." or space group separators, e.g. "1,234" / "12 345".
_COUNT_PATTERN = re.compile(r"\d[\d,.\s]*")
_DECIMAL_PATTERN = re.compile(r"\d+(?:[.,]\d+)?")
_COUNT_SEPARATORS = re.compile(r"[,.\s]")


def normalize_wine_name(name: str) -> str:
    """Normalize a wine name into a cache / coalescing key.

    Trims surrounding whitespace and lower-cases.  Interior whitespace is
    left untouched.

    Args:
        name: Raw wine name as displayed by the retailer.

    Returns:
        Normalized key.
    """
    return name.strip().lower()


def parse_rating_text(text: str) -> float | None:
    """Parse a rating such as ``"4.4"`` or ``"4,4"`` into a float.

    A comma is treated as the decimal separator.

    Args:
        text: Raw text scraped from a rating element.

    Returns:
        The rating, or ``None`` if no number is present.
    """
    match = _DECIMAL_PATTERN.search(text or "")
    if match is None:
        return None
    return float(match.group(0).replace(",", "."))


def parse_review_count(text: str) -> int | None:
    """Parse a review count such as ``"1,234"`` or ``"12 345"`` into an int.

    All group separators are stripped before conversion.

    Args:
        text: Raw count text, without the trailing "ratings" word.

    Returns:
        The count, or ``None`` if no digits are present.
    """
    match = _COUNT_PATTERN.search(text or "")
    if match is None:
        return None
    digits = _COUNT_SEPARATORS.sub("", match.group(0))
    return int(digits) if digits.isdigit() else None


def absolute_detail_url(href: str, base_url: str) -> str:
    """Resolve *href* against *base_url*, keeping only scheme, host and path.

    Query strings and fragments are dropped so that tracking parameters on
    search-result links do not leak into the cached detail URL.
    """
    parts = urlsplit(urljoin(base_url, href))
    return f"{parts.scheme}://{parts.netloc}{parts.path}"


def match_confidence(query: str, result_name: str) -> float:
    """Compute fuzzy-match confidence (0.0--1.0) between *query* and *result_name*."""
    if not query or not result_name:
        return 0.0
    normalized_query = normalize_wine_name(query)
    normalized_result = normalize_wine_name(result_name)
    return fuzz.token_sort_ratio(normalized_query, normalized_result) / 100.0
