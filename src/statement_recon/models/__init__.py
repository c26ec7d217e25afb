"""Data models for reconciliation."""

from .transaction import (
    StatementTransaction,
    LedgerAccount,
    LedgerTransaction,
    MatchType,
    MatchResult,
    milliunits_to_amount,
)
from .report import (
    Discrepancy,
    DiscrepancyKind,
    MatchTypeTotals,
    ReconciliationReport,
    ReconciliationStatus,
    RowParseWarning,
)

__all__ = [
    "StatementTransaction",
    "LedgerAccount",
    "LedgerTransaction",
    "MatchType",
    "MatchResult",
    "milliunits_to_amount",
    "Discrepancy",
    "DiscrepancyKind",
    "MatchTypeTotals",
    "ReconciliationReport",
    "ReconciliationStatus",
    "RowParseWarning",
]
