"""Page-format extraction strategies and the pipeline that chains them.

Re-exports
----------
ParserPipeline
    Tries strategies in order; first hit wins.
StructuredStateExtractor, StateLocation
    Embedded JSON state blob strategy and its location descriptor.
LegacyCardExtractor
    Server-rendered wine-card strategy.
"""

from vivino_rating.services.parsing.legacy_cards import LegacyCardExtractor
from vivino_rating.services.parsing.pipeline import ParserPipeline
from vivino_rating.services.parsing.structured_state import StateLocation, StructuredStateExtractor

__all__ = [
    "LegacyCardExtractor",
    "ParserPipeline",
    "StateLocation",
    "StructuredStateExtractor",
]
