"""Data models for the reconciliation report."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from .transaction import MatchResult, MatchType


class DiscrepancyKind(Enum):
    """Category of a reconciliation discrepancy."""

    MISSING_FROM_LEDGER = "missing_from_ledger"  # On statement, not in ledger
    NOT_ON_STATEMENT = "not_on_statement"  # In ledger on/before statement date
    AFTER_STATEMENT_DATE = "after_statement_date"  # In ledger after statement date
    AMOUNT_MISMATCH = "amount_mismatch"


class ReconciliationStatus(Enum):
    """Overall reconciliation verdict."""

    BALANCED = "balanced"
    NEEDS_REVIEW = "needs_review"
    UNBALANCED = "unbalanced"


@dataclass(frozen=True)
class Discrepancy:
    """A single item the user should look at."""

    kind: DiscrepancyKind
    description: str
    amount: Decimal
    ledger_transaction_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "description": self.description,
            "amount": str(self.amount),
            "ledger_transaction_id": self.ledger_transaction_id,
        }


@dataclass(frozen=True)
class RowParseWarning:
    """A statement row skipped because its date or amount could not be parsed."""

    row_number: int
    raw_data: str
    reason: str

    def __str__(self) -> str:
        return f"Row {self.row_number}: {self.reason}"


@dataclass
class MatchTypeTotals:
    """Count and summed amount for one match type."""

    count: int = 0
    total: Decimal = Decimal("0")


@dataclass
class ReconciliationReport:
    """
    Advisory comparison of a bank statement against the ledger.

    Balances are in currency units. `computed_ledger_balance` is the ledger
    balance adjusted for in-flight items, so `discrepancy` is what remains
    unexplained after accounting for unmatched transactions.
    """

    account_id: str
    account_name: str
    statement_balance: Decimal
    statement_date: date
    ledger_balance: Decimal
    computed_ledger_balance: Decimal
    discrepancy: Decimal
    balance_difference: Decimal
    match_results: list[MatchResult]
    totals: dict[MatchType, MatchTypeTotals]
    discrepancies: list[Discrepancy]
    status: ReconciliationStatus
    confidence_score: float
    largest_discrepancy: Decimal
    recommendations: list[str] = field(default_factory=list)
    warnings: list[RowParseWarning] = field(default_factory=list)
    reconciliation_date: date = field(default_factory=lambda: datetime.now().date())

    @property
    def exact_matches(self) -> list[MatchResult]:
        return [m for m in self.match_results if m.match_type == MatchType.EXACT]

    @property
    def fuzzy_matches(self) -> list[MatchResult]:
        return [m for m in self.match_results if m.match_type == MatchType.FUZZY]

    @property
    def unmatched_ledger(self) -> list[MatchResult]:
        return [
            m
            for m in self.match_results
            if m.match_type == MatchType.UNMATCHED and m.ledger_transaction is not None
        ]

    @property
    def unmatched_statement(self) -> list[MatchResult]:
        return [
            m
            for m in self.match_results
            if m.match_type == MatchType.UNMATCHED and m.statement_transaction is not None
        ]

    @property
    def total_ledger_transactions(self) -> int:
        return sum(1 for m in self.match_results if m.ledger_transaction is not None)

    @property
    def total_statement_transactions(self) -> int:
        return sum(1 for m in self.match_results if m.statement_transaction is not None)

    def discrepancies_of(self, kind: DiscrepancyKind) -> list[Discrepancy]:
        return [d for d in self.discrepancies if d.kind == kind]

    def to_dict(self) -> dict[str, Any]:
        """Structured rendering suitable for JSON output."""
        return {
            "account_id": self.account_id,
            "account_name": self.account_name,
            "statement_balance": str(self.statement_balance),
            "statement_date": self.statement_date.isoformat(),
            "reconciliation_date": self.reconciliation_date.isoformat(),
            "ledger_balance": str(self.ledger_balance),
            "computed_ledger_balance": str(self.computed_ledger_balance),
            "discrepancy": str(self.discrepancy),
            "balance_difference": str(self.balance_difference),
            "total_ledger_transactions": self.total_ledger_transactions,
            "total_statement_transactions": self.total_statement_transactions,
            "totals": {
                match_type.value: {"count": t.count, "total": str(t.total)}
                for match_type, t in self.totals.items()
            },
            "unmatched_ledger": len(self.unmatched_ledger),
            "unmatched_statement": len(self.unmatched_statement),
            "match_results": [m.to_dict() for m in self.match_results],
            "discrepancies": [d.to_dict() for d in self.discrepancies],
            "summary": {
                "status": self.status.value,
                "confidence_score": round(self.confidence_score, 4),
                "total_discrepancies": len(self.discrepancies),
                "largest_discrepancy": str(self.largest_discrepancy),
                "recommendations": list(self.recommendations),
            },
            "warnings": [str(w) for w in self.warnings],
        }
