"""Abstract base class for rating extraction strategies.

Vivino has changed its search-page format several times (server-rendered
wine cards, then an embedded JSON state blob).  Each format gets its own
extractor; :class:`~vivino_rating.services.parsing.pipeline.ParserPipeline`
tries them in priority order and takes the first hit.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from vivino_rating.models.rating import RatingResult


class IRatingExtractor(ABC):
    """Contract for one page-format strategy."""

    @abstractmethod
    def extract(self, html: str) -> RatingResult | None:
        """Extract the first search match from *html*.

        Parameters
        ----------
        html:
            The raw search-results page.

        Returns
        -------
        RatingResult or None
            The rating if this strategy recognized the page; ``None`` when
            its format is absent.

        Raises
        ------
        vivino_rating.utils.errors.ParseError
            If the format is present but malformed.  The pipeline treats
            this the same as ``None`` and moves to the next strategy.
        """

    @abstractmethod
    def get_strategy_name(self) -> str:
        """Return a short identifier, e.g. ``"structured_state"``."""
