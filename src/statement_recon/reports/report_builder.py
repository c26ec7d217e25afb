"""
Reconciliation report builder.
Summarizes match results into balances, discrepancies and a verdict.
"""

from datetime import date
from decimal import Decimal
from typing import Optional
import logging

from ..config import ReconConfig
from ..models.report import (
    Discrepancy,
    DiscrepancyKind,
    MatchTypeTotals,
    ReconciliationReport,
    ReconciliationStatus,
    RowParseWarning,
)
from ..models.transaction import LedgerAccount, MatchResult, MatchType

logger = logging.getLogger(__name__)


def format_currency(amount: Decimal) -> str:
    """Format an amount as a signed dollar string, e.g. -$99.80."""
    quantized = Decimal(amount).quantize(Decimal("0.01"))
    sign = "-" if quantized < 0 else ""
    return f"{sign}${abs(quantized):,.2f}"


class ReportBuilder:
    """Builds an advisory ReconciliationReport from match results."""

    def __init__(self, config: ReconConfig):
        """
        Initialize the report builder.

        Args:
            config: Application configuration
        """
        self.config = config
        self.report_config = config.report

    def build(
        self,
        account: LedgerAccount,
        statement_balance: Decimal,
        statement_date: date,
        match_results: list[MatchResult],
        amount_tolerance: Optional[Decimal] = None,
        warnings: Optional[list[RowParseWarning]] = None,
    ) -> ReconciliationReport:
        """
        Build the reconciliation report.

        Args:
            account: Ledger account being reconciled
            statement_balance: Ending balance printed on the statement
            statement_date: Statement closing date
            match_results: Output of the matching engine
            amount_tolerance: Tolerance used for the balanced verdict
            warnings: Statement rows that were skipped during normalization

        Returns:
            Populated ReconciliationReport
        """
        if amount_tolerance is None:
            amount_tolerance = Decimal(str(self.config.matching.amount_tolerance))
        statement_balance = Decimal(str(statement_balance))

        totals = self._totals(match_results)
        discrepancies = self._discrepancies(match_results, statement_date)

        ledger_balance = account.balance_decimal
        unmatched_ledger_total = sum(
            (m.ledger_transaction.amount_decimal
             for m in match_results
             if m.match_type == MatchType.UNMATCHED and m.ledger_transaction is not None),
            Decimal("0"),
        )
        missing_total = sum(
            (d.amount for d in discrepancies if d.kind == DiscrepancyKind.MISSING_FROM_LEDGER),
            Decimal("0"),
        )

        computed_ledger_balance = ledger_balance - unmatched_ledger_total + missing_total
        discrepancy = statement_balance - computed_ledger_balance
        balance_difference = ledger_balance - statement_balance

        matched = sum(1 for m in match_results if m.is_matched)
        confidence_score = matched / len(match_results) if match_results else 0.0

        status = self._status(balance_difference, discrepancies, amount_tolerance)
        largest = max(
            [abs(d.amount) for d in discrepancies] + [abs(balance_difference)],
        )
        recommendations = self._recommendations(
            status, balance_difference, discrepancies, confidence_score, amount_tolerance
        )

        report = ReconciliationReport(
            account_id=account.id,
            account_name=account.name,
            statement_balance=statement_balance,
            statement_date=statement_date,
            ledger_balance=ledger_balance,
            computed_ledger_balance=computed_ledger_balance,
            discrepancy=discrepancy,
            balance_difference=balance_difference,
            match_results=list(match_results),
            totals=totals,
            discrepancies=discrepancies,
            status=status,
            confidence_score=confidence_score,
            largest_discrepancy=largest,
            recommendations=recommendations,
            warnings=list(warnings or []),
        )

        logger.info(
            f"Report for {account.name}: status={status.value}, "
            f"{len(discrepancies)} discrepancies, unexplained {format_currency(discrepancy)}"
        )

        return report

    def _totals(self, match_results: list[MatchResult]) -> dict[MatchType, MatchTypeTotals]:
        """Count and summed amount per match type."""
        totals = {match_type: MatchTypeTotals() for match_type in MatchType}
        for result in match_results:
            bucket = totals[result.match_type]
            bucket.count += 1
            bucket.total += result.amount
        return totals

    def _discrepancies(
        self, match_results: list[MatchResult], statement_date: date
    ) -> list[Discrepancy]:
        """
        Classify every result that needs attention.

        Args:
            match_results: Output of the matching engine
            statement_date: Ledger entries after this date are in flight

        Returns:
            Discrepancies in match result order
        """
        discrepancies: list[Discrepancy] = []

        for result in match_results:
            ledger = result.ledger_transaction
            statement = result.statement_transaction

            if result.match_type == MatchType.UNMATCHED and statement is not None:
                discrepancies.append(
                    Discrepancy(
                        kind=DiscrepancyKind.MISSING_FROM_LEDGER,
                        description=(
                            f"{statement.date.isoformat()} {statement.description} "
                            f"{format_currency(statement.amount)}"
                        ),
                        amount=statement.amount,
                    )
                )
            elif result.match_type == MatchType.UNMATCHED and ledger is not None:
                kind = (
                    DiscrepancyKind.AFTER_STATEMENT_DATE
                    if ledger.date > statement_date
                    else DiscrepancyKind.NOT_ON_STATEMENT
                )
                discrepancies.append(
                    Discrepancy(
                        kind=kind,
                        description=(
                            f"{ledger.date.isoformat()} {ledger.payee_name or ledger.memo} "
                            f"{format_currency(ledger.amount_decimal)}"
                        ),
                        amount=ledger.amount_decimal,
                        ledger_transaction_id=ledger.id,
                    )
                )
            elif (
                result.match_type == MatchType.FUZZY
                and result.amount_delta is not None
                and result.amount_delta != 0
            ):
                discrepancies.append(
                    Discrepancy(
                        kind=DiscrepancyKind.AMOUNT_MISMATCH,
                        description=(
                            f"{ledger.payee_name}: ledger {format_currency(ledger.amount_decimal)} "
                            f"vs statement {format_currency(statement.amount)}"
                        ),
                        amount=result.amount_delta,
                        ledger_transaction_id=ledger.id,
                    )
                )

        return discrepancies

    def _status(
        self,
        balance_difference: Decimal,
        discrepancies: list[Discrepancy],
        amount_tolerance: Decimal,
    ) -> ReconciliationStatus:
        difference = abs(balance_difference)
        if difference <= amount_tolerance and not discrepancies:
            return ReconciliationStatus.BALANCED
        if (
            len(discrepancies) <= self.report_config.review_max_discrepancies
            and difference <= Decimal(str(self.report_config.review_max_difference))
        ):
            return ReconciliationStatus.NEEDS_REVIEW
        return ReconciliationStatus.UNBALANCED

    def _recommendations(
        self,
        status: ReconciliationStatus,
        balance_difference: Decimal,
        discrepancies: list[Discrepancy],
        confidence_score: float,
        amount_tolerance: Decimal,
    ) -> list[str]:
        """Plain-language next steps for the user."""
        if status == ReconciliationStatus.BALANCED:
            return ["Account is fully reconciled - no action needed"]

        recommendations: list[str] = []
        if abs(balance_difference) > amount_tolerance:
            recommendations.append(
                f"Balance difference of {format_currency(balance_difference)} needs investigation"
            )

        counts = {kind: 0 for kind in DiscrepancyKind}
        for discrepancy in discrepancies:
            counts[discrepancy.kind] += 1

        if counts[DiscrepancyKind.MISSING_FROM_LEDGER]:
            recommendations.append(
                f"{counts[DiscrepancyKind.MISSING_FROM_LEDGER]} statement transactions "
                f"need to be added to the ledger"
            )
        if counts[DiscrepancyKind.NOT_ON_STATEMENT]:
            recommendations.append(
                f"{counts[DiscrepancyKind.NOT_ON_STATEMENT]} ledger transactions may need "
                f"to be removed or marked as pending"
            )
        if counts[DiscrepancyKind.AFTER_STATEMENT_DATE]:
            recommendations.append(
                f"{counts[DiscrepancyKind.AFTER_STATEMENT_DATE]} ledger transactions are dated "
                f"after the statement and should appear on the next one"
            )
        if counts[DiscrepancyKind.AMOUNT_MISMATCH]:
            recommendations.append(
                f"{counts[DiscrepancyKind.AMOUNT_MISMATCH]} matched transactions differ in amount"
            )
        if confidence_score < self.report_config.low_confidence_threshold:
            recommendations.append("Low confidence in transaction matching - manual review recommended")

        return recommendations
