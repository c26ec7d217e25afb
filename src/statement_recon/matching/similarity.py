"""Description similarity between ledger payees and statement descriptions."""

from typing import Optional

from ..config import ReconConfig
from .keywords import KeywordExtractor


class SimilarityScorer:
    """
    Keyword-set similarity with a boost for well-known merchants.

    The score is the Jaccard index of the two keyword sets, raised by a
    fixed boost when the sets share an important merchant keyword.
    """

    def __init__(self, config: ReconConfig, extractor: Optional[KeywordExtractor] = None):
        """
        Initialize the scorer.

        Args:
            config: Application configuration
            extractor: Keyword extractor to reuse (built from config if omitted)
        """
        self.extractor = extractor or KeywordExtractor(config.keywords)
        self.important_merchants = frozenset(m.lower() for m in config.scoring.important_merchants)
        self.boost = config.scoring.important_merchant_boost

    def score(self, first: str, second: str) -> float:
        """Similarity in [0, 1] between two free-text descriptions."""
        return self.score_keywords(self.extractor.extract(first), self.extractor.extract(second))

    def score_keywords(self, first: frozenset[str], second: frozenset[str]) -> float:
        """Similarity in [0, 1] between two keyword sets."""
        if not first or not second:
            return 0.0

        common = first & second
        score = len(common) / len(first | second)

        if common & self.important_merchants:
            score += self.boost

        return max(0.0, min(1.0, score))
