"""Matching engine and strategies."""

from .engine import ReconciliationEngine
from .keywords import KeywordExtractor
from .similarity import SimilarityScorer
from .strategies import (
    Candidate,
    IndexedStatement,
    MatchingStrategy,
    ExactMatchStrategy,
    FuzzyMatchStrategy,
)

__all__ = [
    "ReconciliationEngine",
    "KeywordExtractor",
    "SimilarityScorer",
    "Candidate",
    "IndexedStatement",
    "MatchingStrategy",
    "ExactMatchStrategy",
    "FuzzyMatchStrategy",
]
