"""
Matching strategies for transaction reconciliation.
Each strategy picks at most one statement line for a ledger transaction.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..config import MatchingWeights
from ..models.transaction import LedgerTransaction, MatchType, StatementTransaction
from .similarity import SimilarityScorer


@dataclass(frozen=True)
class IndexedStatement:
    """Statement transaction with its input position and precomputed keywords."""

    index: int
    transaction: StatementTransaction
    keywords: frozenset[str]


@dataclass(frozen=True)
class Candidate:
    """A statement line selected for a ledger transaction, with its scores."""

    statement: IndexedStatement
    confidence: float
    date_delta_days: int
    amount_delta: Decimal
    similarity: float


class MatchingStrategy(ABC):
    """Abstract base class for matching strategies."""

    match_type: MatchType

    def __init__(self, scorer: SimilarityScorer, amount_tolerance: Decimal):
        """
        Initialize the strategy.

        Args:
            scorer: Description similarity scorer
            amount_tolerance: Maximum absolute amount difference
        """
        self.scorer = scorer
        self.amount_tolerance = amount_tolerance

    @abstractmethod
    def select(
        self,
        ledger_txn: LedgerTransaction,
        ledger_keywords: list[frozenset[str]],
        candidates: list[IndexedStatement],
    ) -> Optional[Candidate]:
        """
        Choose the statement line matching a ledger transaction.

        Args:
            ledger_txn: Ledger transaction to match
            ledger_keywords: Keyword sets of the payee and memo
            candidates: Unconsumed statement lines in input order

        Returns:
            Selected candidate, or None if nothing qualifies
        """
        pass

    def similarity(self, ledger_keywords: list[frozenset[str]], statement: IndexedStatement) -> float:
        """Best similarity of any ledger text against the statement description."""
        return max(
            (self.scorer.score_keywords(keywords, statement.keywords) for keywords in ledger_keywords),
            default=0.0,
        )

    @staticmethod
    def amount_delta(ledger_txn: LedgerTransaction, statement: IndexedStatement) -> Decimal:
        return statement.transaction.amount - ledger_txn.amount_decimal

    @staticmethod
    def date_delta(ledger_txn: LedgerTransaction, statement: IndexedStatement) -> int:
        return abs((statement.transaction.date - ledger_txn.date).days)


class ExactMatchStrategy(MatchingStrategy):
    """
    Exact match strategy - same date and amount within tolerance.
    Highest confidence matching pass.
    """

    match_type = MatchType.EXACT

    def select(
        self,
        ledger_txn: LedgerTransaction,
        ledger_keywords: list[frozenset[str]],
        candidates: list[IndexedStatement],
    ) -> Optional[Candidate]:
        """First candidate on the same date with a tolerable amount difference."""
        for statement in candidates:
            if statement.transaction.date != ledger_txn.date:
                continue
            delta = self.amount_delta(ledger_txn, statement)
            if abs(delta) <= self.amount_tolerance:
                return Candidate(
                    statement=statement,
                    confidence=1.0,
                    date_delta_days=0,
                    amount_delta=delta,
                    similarity=self.similarity(ledger_keywords, statement),
                )
        return None


class FuzzyMatchStrategy(MatchingStrategy):
    """
    Fuzzy match strategy - date within a window, amount within tolerance,
    ranked by a weighted blend of amount, date and description closeness.
    """

    match_type = MatchType.FUZZY

    def __init__(
        self,
        scorer: SimilarityScorer,
        amount_tolerance: Decimal,
        date_window_days: int = 3,
        min_confidence: float = 0.5,
        weights: Optional[MatchingWeights] = None,
    ):
        """
        Initialize with tolerances and weights.

        Args:
            scorer: Description similarity scorer
            amount_tolerance: Maximum absolute amount difference
            date_window_days: Maximum days between ledger and statement dates
            min_confidence: Combined score a candidate must exceed
            weights: Weights of the amount, date and description components
        """
        super().__init__(scorer, amount_tolerance)
        self.date_window_days = date_window_days
        self.min_confidence = min_confidence
        self.weights = weights or MatchingWeights()

    def select(
        self,
        ledger_txn: LedgerTransaction,
        ledger_keywords: list[frozenset[str]],
        candidates: list[IndexedStatement],
    ) -> Optional[Candidate]:
        """Best-scoring candidate inside the window, if it clears the floor."""
        scored: list[Candidate] = []

        for statement in candidates:
            days = self.date_delta(ledger_txn, statement)
            if days > self.date_window_days:
                continue
            delta = self.amount_delta(ledger_txn, statement)
            if abs(delta) > self.amount_tolerance:
                continue

            similarity = self.similarity(ledger_keywords, statement)
            scored.append(
                Candidate(
                    statement=statement,
                    confidence=self.combined_score(delta, days, similarity),
                    date_delta_days=days,
                    amount_delta=delta,
                    similarity=similarity,
                )
            )

        if not scored:
            return None

        best = min(
            scored,
            key=lambda c: (-round(c.confidence, 6), c.date_delta_days, -c.similarity, c.statement.index),
        )
        if best.confidence <= self.min_confidence:
            return None
        return best

    def combined_score(self, amount_delta: Decimal, days: int, similarity: float) -> float:
        """
        Weighted blend of amount closeness, date proximity and similarity.

        Args:
            amount_delta: Statement amount minus ledger amount
            days: Absolute date difference
            similarity: Description similarity in [0, 1]

        Returns:
            Score in [0, 1]
        """
        if amount_delta == 0 or self.amount_tolerance == 0:
            amount_closeness = 1.0
        else:
            amount_closeness = 1.0 - float(abs(amount_delta) / (2 * self.amount_tolerance))

        date_proximity = 1.0 - days / (self.date_window_days + 1)

        weights = self.weights
        total_weight = weights.amount + weights.date + weights.description
        if total_weight <= 0:
            return 0.0

        score = (
            weights.amount * amount_closeness
            + weights.date * date_proximity
            + weights.description * similarity
        ) / total_weight
        return max(0.0, min(1.0, score))
