"""Unit tests for the extraction strategies and ParserPipeline."""

from __future__ import annotations

import json
from typing import Any

import pytest

from tests.conftest import html_escape, wrap_page
from vivino_rating.interfaces.rating_extractor import IRatingExtractor
from vivino_rating.models.rating import RatingResult
from vivino_rating.services.parsing.legacy_cards import LegacyCardExtractor
from vivino_rating.services.parsing.pipeline import ParserPipeline
from vivino_rating.services.parsing.structured_state import StructuredStateExtractor


def _attribute_page(state: Any) -> str:
    return wrap_page(f'<div id="search-page" data-preloaded-state="{html_escape(json.dumps(state))}"></div>')


def _script_page(state: Any) -> str:
    return wrap_page(f"<script>window.__PRELOADED_STATE__ = {json.dumps(state)};\nwindow.other = 1;</script>")


def _state(vintage: dict[str, Any]) -> dict[str, Any]:
    return {"search_results": {"matches": [{"vintage": vintage}]}}


# ======================================================================
# StructuredStateExtractor
# ======================================================================


class TestStructuredStateExtractor:
    @pytest.fixture()
    def extractor(self) -> StructuredStateExtractor:
        return StructuredStateExtractor()

    def test_attribute_round_trip(
        self, extractor: StructuredStateExtractor, structured_page: str, expected_structured_result: RatingResult
    ) -> None:
        assert extractor.extract(structured_page) == expected_structured_result

    def test_inline_script(
        self,
        extractor: StructuredStateExtractor,
        preloaded_state: dict[str, Any],
        expected_structured_result: RatingResult,
    ) -> None:
        assert extractor.extract(_script_page(preloaded_state)) == expected_structured_result

    def test_single_quoted_attribute(
        self,
        extractor: StructuredStateExtractor,
        preloaded_state: dict[str, Any],
        expected_structured_result: RatingResult,
    ) -> None:
        page = wrap_page(f"<div data-preloaded-state='{html_escape(json.dumps(preloaded_state))}'></div>")
        assert extractor.extract(page) == expected_structured_result

    def test_wine_name_used_when_vintage_name_missing(self, extractor: StructuredStateExtractor) -> None:
        page = _attribute_page(_state({"wine": {"id": 7, "name": "Plain Wine"}, "statistics": {}}))
        result = extractor.extract(page)
        assert result.display_name == "Plain Wine"

    def test_missing_names_and_statistics_default(self, extractor: StructuredStateExtractor) -> None:
        page = _attribute_page(_state({"wine": {"id": 7}}))
        assert extractor.extract(page) == RatingResult(
            rating=0.0, review_count=0, display_name="", detail_url="https://www.vivino.com/wines/7"
        )

    def test_null_statistics_default_to_zero(self, extractor: StructuredStateExtractor) -> None:
        page = _attribute_page(
            _state({"name": "N", "wine": {"id": 7}, "statistics": {"ratings_average": None, "ratings_count": None}})
        )
        result = extractor.extract(page)
        assert (result.rating, result.review_count) == (0.0, 0)

    def test_missing_wine_id_is_no_data(self, extractor: StructuredStateExtractor) -> None:
        page = _attribute_page(_state({"name": "No Id", "wine": {}, "statistics": {"ratings_average": 4.0}}))
        assert extractor.extract(page) is None

    def test_empty_matches_is_no_data(self, extractor: StructuredStateExtractor) -> None:
        assert extractor.extract(_attribute_page({"search_results": {"matches": []}})) is None

    def test_missing_search_results_is_no_data(self, extractor: StructuredStateExtractor) -> None:
        assert extractor.extract(_attribute_page({"explore_vintage": {}})) is None

    def test_broken_attribute_falls_through_to_script(
        self,
        extractor: StructuredStateExtractor,
        preloaded_state: dict[str, Any],
        expected_structured_result: RatingResult,
    ) -> None:
        page = wrap_page(
            '<div data-preloaded-state="{&quot;search_results&quot;: oops"></div>'
            f"<script>window.__PRELOADED_STATE__ = {json.dumps(preloaded_state)};</script>"
        )
        assert extractor.extract(page) == expected_structured_result

    def test_attribute_wins_over_script(self, extractor: StructuredStateExtractor) -> None:
        attr_state = _state({"name": "From Attribute", "wine": {"id": 1}})
        script_state = _state({"name": "From Script", "wine": {"id": 2}})
        page = wrap_page(
            f'<div data-preloaded-state="{html_escape(json.dumps(attr_state))}"></div>'
            f"<script>window.__PRELOADED_STATE__ = {json.dumps(script_state)};</script>"
        )
        assert extractor.extract(page).display_name == "From Attribute"

    def test_no_state_anywhere(self, extractor: StructuredStateExtractor, legacy_page: str) -> None:
        assert extractor.extract(legacy_page) is None

    def test_custom_base_url(self, structured_page: str) -> None:
        result = StructuredStateExtractor(base_url="https://vivino.test/").extract(structured_page)
        assert result.detail_url == "https://vivino.test/wines/555"


# ======================================================================
# LegacyCardExtractor
# ======================================================================


class TestLegacyCardExtractor:
    @pytest.fixture()
    def extractor(self) -> LegacyCardExtractor:
        return LegacyCardExtractor()

    def test_legacy_card(self, extractor: LegacyCardExtractor, legacy_page: str) -> None:
        assert extractor.extract(legacy_page) == RatingResult(
            rating=4.4, review_count=1234, display_name="Sample Legacy", detail_url="https://www.vivino.com/wines/123"
        )

    def test_comma_decimal_and_dotted_thousands(self, extractor: LegacyCardExtractor) -> None:
        page = wrap_page(
            """<div class="wine-card__content">
                 <a class="link-color-alt-grey" href="/wines/42">Rioja <b>Reserva</b></a>
                 <div class="average__number">3,9</div>
                 <span class="text-micro">12.345 ratings</span>
               </div>"""
        )
        result = extractor.extract(page)
        assert result.rating == 3.9
        assert result.review_count == 12345
        assert result.display_name == "Rioja Reserva"

    def test_incomplete_card_skipped(self, extractor: LegacyCardExtractor) -> None:
        page = wrap_page(
            """<div class="wine-card__content">
                 <a class="link-color-alt-grey" href="/wines/1">No Reviews Yet</a>
                 <div class="average__number">4.0</div>
               </div>
               <div class="wine-card__content">
                 <a class="link-color-alt-grey" href="/wines/2">Second Card</a>
                 <div class="average__number">3.7</div>
                 <span class="text-micro">87 ratings</span>
               </div>"""
        )
        result = extractor.extract(page)
        assert result.display_name == "Second Card"
        assert result.detail_url == "https://www.vivino.com/wines/2"

    def test_non_numeric_rating_skipped(self, extractor: LegacyCardExtractor) -> None:
        page = wrap_page(
            """<div class="wine-card__content">
                 <a class="link-color-alt-grey" href="/wines/1">Unrated</a>
                 <div class="average__number">-</div>
                 <span class="text-micro">3 ratings</span>
               </div>"""
        )
        assert extractor.extract(page) is None

    def test_looser_test_id_pattern(self, extractor: LegacyCardExtractor) -> None:
        page = wrap_page(
            """<div data-testid="wineCard-0">
                 <a href="/w/987?year=2019&price_id=1">Other Wine 2019</a>
                 <div class="averageValue__ab12">3,8</div>
                 <div class="ratingCount">1 rating</div>
               </div>"""
        )
        assert extractor.extract(page) == RatingResult(
            rating=3.8, review_count=1, display_name="Other Wine 2019", detail_url="https://www.vivino.com/w/987"
        )

    def test_integer_rating_not_merged_into_count(self, extractor: LegacyCardExtractor) -> None:
        page = wrap_page(
            """<div class="wine-card__content">
                 <a class="link-color-alt-grey" href="/wines/8">Whole Number Wine</a>
                 <div class="average__number">4</div>
                 <span class="text-micro">123 ratings</span>
               </div>"""
        )
        result = extractor.extract(page)
        assert result.rating == 4.0
        assert result.review_count == 123

    def test_review_word_variant(self, extractor: LegacyCardExtractor) -> None:
        page = wrap_page(
            """<div class="wine-card__content">
                 <a href="/wines/5">Reviewed Wine</a>
                 <span class="average__number">4.1</span>
                 <span>(2 345 reviews)</span>
               </div>"""
        )
        result = extractor.extract(page)
        assert result.review_count == 2345

    def test_no_cards(self, extractor: LegacyCardExtractor, empty_page: str) -> None:
        assert extractor.extract(empty_page) is None


# ======================================================================
# ParserPipeline
# ======================================================================


class _ExplodingExtractor(IRatingExtractor):
    def extract(self, html: str) -> RatingResult | None:
        raise KeyError("vintage")

    def get_strategy_name(self) -> str:
        return "exploding"


class TestParserPipeline:
    def test_default_order(self) -> None:
        assert ParserPipeline.default().strategy_names == ["structured_state", "legacy_cards"]

    def test_structured_tier(self, structured_page: str, expected_structured_result: RatingResult) -> None:
        assert ParserPipeline.default().extract(structured_page) == expected_structured_result

    def test_legacy_fallback_when_no_state(self, legacy_page: str) -> None:
        result = ParserPipeline.default().extract(legacy_page)
        assert result.display_name == "Sample Legacy"

    def test_structured_wins_when_both_present(
        self, structured_page: str, legacy_page: str, expected_structured_result: RatingResult
    ) -> None:
        assert ParserPipeline.default().extract(structured_page + legacy_page) == expected_structured_result

    def test_legacy_used_when_state_is_broken(self, legacy_page: str) -> None:
        page = '<div data-preloaded-state="not json at all"></div>' + legacy_page
        assert ParserPipeline.default().extract(page).display_name == "Sample Legacy"

    def test_nothing_found(self, empty_page: str) -> None:
        assert ParserPipeline.default().extract(empty_page) is None

    def test_raising_strategy_is_skipped(self, legacy_page: str) -> None:
        pipeline = ParserPipeline([_ExplodingExtractor(), LegacyCardExtractor()])
        assert pipeline.extract(legacy_page).display_name == "Sample Legacy"

    def test_raising_last_strategy_is_no_data(self, empty_page: str) -> None:
        assert ParserPipeline([_ExplodingExtractor()]).extract(empty_page) is None
