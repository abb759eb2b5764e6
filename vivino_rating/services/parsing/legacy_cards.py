"""Legacy wine-card rating extractor.

Before the embedded-state format, Vivino rendered each search hit as a
"wine card"::

    <div class="wine-card__content">
      <a class="link-color-alt-grey" href="/wines/123">Sample Legacy</a>
      <div class="text-inline-block light average__number">4,4</div>
      <div class="text-inline-block average__stars">
        <span class="text-micro">1,234 ratings</span>
      </div>
    </div>

Class names drifted between releases, so every lookup is an ordered list
of progressively looser patterns.  Cards lacking a link, a rating or a
review count are skipped; the first complete card wins.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Tag

from vivino_rating.interfaces.rating_extractor import IRatingExtractor
from vivino_rating.models.rating import RatingResult
from vivino_rating.utils.logging import get_logger
from vivino_rating.utils.text_normalizer import (
    absolute_detail_url,
    parse_rating_text,
    parse_review_count,
)

DEFAULT_BASE_URL = "https://www.vivino.com"

# Most specific first; the first selector matching any element wins.
CARD_SELECTORS: tuple[str, ...] = (
    ".wine-card__content",
    "[class*='wine-card']",
    "[data-testid*='wineCard'], [data-testid*='wine-card']",
)

LINK_SELECTORS: tuple[str, ...] = (
    "a.link-color-alt-grey",
    "a[href*='/wines/']",
    "a[href*='/w/']",
)

RATING_SELECTORS: tuple[str, ...] = (
    ".average__number",
    "[class*='averageValue']",
    "[class*='average__number']",
    "[class*='vivinoRating'] [class*='average']",
)

# The lookbehind keeps "4.4 1,234 ratings" from reading as 41234; the rating
# element itself is excluded before matching, so "4 123 ratings" stays 123.
REVIEW_COUNT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(?<![\d.,])(\d{1,3}(?:[.,\s]\d{3})+|\d+)\s*ratings?\b", re.IGNORECASE),
    re.compile(r"(?<![\d.,])(\d{1,3}(?:[.,\s]\d{3})+|\d+)\s*reviews?\b", re.IGNORECASE),
)


class LegacyCardExtractor(IRatingExtractor):
    """Extract the first complete wine card from server-rendered markup.

    Parameters
    ----------
    base_url:
        Used to resolve relative card links into absolute detail URLs.
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL) -> None:
        self._base_url = base_url.rstrip("/") + "/"
        self._logger = get_logger(__name__)

    def extract(self, html: str) -> RatingResult | None:
        soup = BeautifulSoup(html, "html.parser")
        cards = self._find_cards(soup)
        if not cards:
            return None

        for index, card in enumerate(cards):
            result = self._parse_card(card)
            if result is not None:
                self._logger.debug("legacy_card_match", card_index=index, card_count=len(cards))
                return result

        self._logger.debug("legacy_cards_incomplete", card_count=len(cards))
        return None

    def get_strategy_name(self) -> str:
        return "legacy_cards"

    # -- Private helpers -------------------------------------------------------

    @staticmethod
    def _find_cards(soup: BeautifulSoup) -> list[Tag]:
        for selector in CARD_SELECTORS:
            cards = soup.select(selector)
            if cards:
                return cards
        return []

    def _parse_card(self, card: Tag) -> RatingResult | None:
        link = self._find_link(card)
        if link is None:
            return None

        found = self._find_rating(card)
        if found is None:
            return None
        rating, rating_element = found

        review_count = self._find_review_count(card, rating_element)
        if review_count is None:
            return None

        return RatingResult(
            rating=rating,
            review_count=review_count,
            display_name=" ".join(link.get_text(" ", strip=True).split()),
            detail_url=absolute_detail_url(link["href"], self._base_url),
        )

    @staticmethod
    def _find_link(card: Tag) -> Tag | None:
        for selector in LINK_SELECTORS:
            for link in card.select(selector):
                if link.get("href"):
                    return link
        return None

    @staticmethod
    def _find_rating(card: Tag) -> tuple[float, Tag] | None:
        for selector in RATING_SELECTORS:
            for element in card.select(selector):
                rating = parse_rating_text(element.get_text(strip=True))
                if rating is not None:
                    return rating, element
        return None

    @staticmethod
    def _find_review_count(card: Tag, rating_element: Tag) -> int | None:
        text = " ".join(
            piece.strip()
            for piece in card.find_all(string=True)
            if piece.strip() and not any(parent is rating_element for parent in piece.parents)
        )
        for pattern in REVIEW_COUNT_PATTERNS:
            match = pattern.search(text)
            if match:
                return parse_review_count(match.group(1))
        return None
