"""
Two-pass matching engine for statement reconciliation.
Pairs ledger transactions with statement lines, exact matches first.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
import logging

from ..config import ReconConfig
from ..models.transaction import (
    LedgerTransaction,
    MatchResult,
    MatchType,
    StatementTransaction,
)
from .keywords import KeywordExtractor
from .similarity import SimilarityScorer
from .strategies import (
    ExactMatchStrategy,
    FuzzyMatchStrategy,
    IndexedStatement,
    MatchingStrategy,
)

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """
    Matching engine that orchestrates the reconciliation passes.

    Every ledger and statement transaction ends up in exactly one
    MatchResult: matched in one pass, or reported unmatched. Inputs are
    never mutated; consumed transactions are tracked by index.
    """

    def __init__(
        self,
        config: ReconConfig,
        amount_tolerance: Optional[Decimal] = None,
        date_window_days: Optional[int] = None,
    ):
        """
        Initialize the reconciliation engine.

        Args:
            config: Application configuration
            amount_tolerance: Override for matching.amount_tolerance
            date_window_days: Override for matching.date_window_days
        """
        self.config = config
        matching_config = config.matching

        if amount_tolerance is None:
            amount_tolerance = Decimal(str(matching_config.amount_tolerance))
        self.amount_tolerance = Decimal(str(amount_tolerance))
        self.date_window_days = (
            matching_config.date_window_days if date_window_days is None else date_window_days
        )

        self.extractor = KeywordExtractor(config.keywords)
        self.scorer = SimilarityScorer(config, self.extractor)
        self.strategies = self._build_strategies()

    def _build_strategies(self) -> list[MatchingStrategy]:
        """
        Build matching passes in priority order.

        Returns:
            Strategies, highest confidence first
        """
        matching_config = self.config.matching
        return [
            ExactMatchStrategy(self.scorer, self.amount_tolerance),
            FuzzyMatchStrategy(
                self.scorer,
                self.amount_tolerance,
                date_window_days=self.date_window_days,
                min_confidence=matching_config.min_confidence,
                weights=matching_config.weights,
            ),
        ]

    def match(
        self,
        ledger_transactions: list[LedgerTransaction],
        statement_transactions: list[StatementTransaction],
    ) -> list[MatchResult]:
        """
        Match ledger transactions against statement lines.

        Args:
            ledger_transactions: Ledger side (deleted entries are ignored)
            statement_transactions: Normalized statement lines

        Returns:
            Results ordered as exact matches, fuzzy matches, unmatched
            ledger transactions, unmatched statement lines
        """
        start_time = datetime.now()
        ledger = [txn for txn in ledger_transactions if not txn.deleted]
        logger.info(
            f"Starting matching: {len(ledger)} ledger txns, "
            f"{len(statement_transactions)} statement txns"
        )

        indexed = [
            IndexedStatement(index, txn, self.extractor.extract(txn.description))
            for index, txn in enumerate(statement_transactions)
        ]
        ledger_keywords = [
            [self.extractor.extract(txn.payee_name), self.extractor.extract(txn.memo)]
            for txn in ledger
        ]

        remaining_ledger = list(range(len(ledger)))
        remaining_statement = list(range(len(indexed)))
        results: list[MatchResult] = []

        for strategy in self.strategies:
            pass_results = 0
            for ledger_index in list(remaining_ledger):
                ledger_txn = ledger[ledger_index]
                candidates = [indexed[i] for i in remaining_statement]
                chosen = strategy.select(ledger_txn, ledger_keywords[ledger_index], candidates)
                if chosen is None:
                    continue

                remaining_ledger.remove(ledger_index)
                remaining_statement.remove(chosen.statement.index)
                results.append(
                    MatchResult(
                        match_type=strategy.match_type,
                        ledger_transaction=ledger_txn,
                        statement_transaction=chosen.statement.transaction,
                        confidence=chosen.confidence,
                        date_delta_days=chosen.date_delta_days,
                        amount_delta=chosen.amount_delta,
                        description_similarity=chosen.similarity,
                    )
                )
                pass_results += 1

            logger.debug(
                f"Pass {strategy.match_type.value}: {pass_results} matches, "
                f"{len(remaining_ledger)} ledger and {len(remaining_statement)} "
                f"statement txns remaining"
            )

        for ledger_index in remaining_ledger:
            results.append(
                MatchResult(match_type=MatchType.UNMATCHED, ledger_transaction=ledger[ledger_index])
            )
        for statement_index in remaining_statement:
            results.append(
                MatchResult(
                    match_type=MatchType.UNMATCHED,
                    statement_transaction=indexed[statement_index].transaction,
                )
            )

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Matching complete: {len(results) - len(remaining_ledger) - len(remaining_statement)} "
            f"matched, {len(remaining_ledger)} ledger and {len(remaining_statement)} statement "
            f"unmatched in {elapsed:.2f}s"
        )

        return results
