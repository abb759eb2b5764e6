"""Ordered chain of rating extraction strategies.

Strategies are tried in priority order and the first non-``None`` result
wins.  A strategy that raises is logged and skipped exactly as if it had
found nothing, so a malformed state blob still lets the legacy card parser
have a go.
"""

from __future__ import annotations

from typing import Sequence

from vivino_rating.interfaces.rating_extractor import IRatingExtractor
from vivino_rating.models.rating import RatingResult
from vivino_rating.services.parsing.legacy_cards import LegacyCardExtractor
from vivino_rating.services.parsing.structured_state import StructuredStateExtractor
from vivino_rating.utils.logging import get_logger


class ParserPipeline:
    """Run extraction strategies until one yields a rating.

    Parameters
    ----------
    extractors:
        Strategies in priority order.
    """

    def __init__(self, extractors: Sequence[IRatingExtractor]) -> None:
        self._extractors = list(extractors)
        self._logger = get_logger(__name__)

    @classmethod
    def default(cls, base_url: str = "https://www.vivino.com") -> ParserPipeline:
        """Structured state first, legacy wine cards as fallback."""
        return cls([StructuredStateExtractor(base_url=base_url), LegacyCardExtractor(base_url=base_url)])

    @property
    def strategy_names(self) -> list[str]:
        return [extractor.get_strategy_name() for extractor in self._extractors]

    def extract(self, html: str) -> RatingResult | None:
        """Return the first strategy's result, or ``None`` if none found data."""
        for extractor in self._extractors:
            name = extractor.get_strategy_name()
            try:
                result = extractor.extract(html)
            except Exception as exc:  # noqa: BLE001
                self._logger.warning("extraction_strategy_failed", strategy=name, error=str(exc))
                continue

            if result is not None:
                self._logger.info(
                    "rating_extracted",
                    strategy=name,
                    display_name=result.display_name,
                    rating=result.rating,
                )
                return result

        self._logger.info("rating_not_found", strategies=self.strategy_names)
        return None
