"""Data models for statement lines, ledger entries and match outcomes."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

MILLIUNITS_PER_UNIT = Decimal("1000")


def milliunits_to_amount(milliunits: int) -> Decimal:
    """Convert integer ledger minor units (1/1000) to a currency amount."""
    return Decimal(milliunits) / MILLIUNITS_PER_UNIT


class MatchType(Enum):
    """Outcome of pairing a transaction."""

    EXACT = "exact"
    FUZZY = "fuzzy"
    UNMATCHED = "unmatched"


@dataclass(frozen=True)
class StatementTransaction:
    """
    A bank statement line normalized into canonical form.

    Amounts are signed from the account holder's perspective: money out
    is negative, money in is positive.
    """

    date: date
    description: str
    amount: Decimal
    # Original CSV line for traceability
    raw_data: str = ""
    row_number: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "description": self.description,
            "amount": str(self.amount),
            "raw_data": self.raw_data,
            "row_number": self.row_number,
        }


@dataclass(frozen=True)
class LedgerAccount:
    """Account as listed by the ledger collaborator."""

    id: str
    name: str
    # Balance in minor units
    balance: int
    closed: bool = False
    deleted: bool = False

    @property
    def balance_decimal(self) -> Decimal:
        return milliunits_to_amount(self.balance)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LedgerAccount":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            balance=int(data.get("balance") or 0),
            closed=bool(data.get("closed", False)),
            deleted=bool(data.get("deleted", False)),
        )


@dataclass(frozen=True)
class LedgerTransaction:
    """
    Transaction owned by the budgeting ledger.

    Read-only from the point of view of reconciliation: matching never
    mutates these records.
    """

    id: str
    date: date
    # Amount in minor units (1/1000 of the currency unit)
    amount: int
    payee_name: str = ""
    memo: str = ""
    deleted: bool = False

    @property
    def amount_decimal(self) -> Decimal:
        return milliunits_to_amount(self.amount)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LedgerTransaction":
        raw_date = data["date"]
        if isinstance(raw_date, datetime):
            txn_date = raw_date.date()
        elif isinstance(raw_date, date):
            txn_date = raw_date
        else:
            txn_date = date.fromisoformat(str(raw_date)[:10])

        return cls(
            id=str(data["id"]),
            date=txn_date,
            amount=int(data["amount"]),
            payee_name=data.get("payee_name") or "",
            memo=data.get("memo") or "",
            deleted=bool(data.get("deleted", False)),
        )


@dataclass(frozen=True)
class MatchResult:
    """
    Result of pairing one ledger transaction with one statement line.

    Unmatched results carry exactly one side.
    """

    match_type: MatchType
    ledger_transaction: Optional[LedgerTransaction] = None
    statement_transaction: Optional[StatementTransaction] = None
    confidence: float = 0.0
    date_delta_days: Optional[int] = None
    # Statement amount minus ledger amount
    amount_delta: Optional[Decimal] = None
    description_similarity: Optional[float] = None

    @property
    def ledger_transaction_id(self) -> Optional[str]:
        return self.ledger_transaction.id if self.ledger_transaction else None

    @property
    def is_matched(self) -> bool:
        return self.match_type != MatchType.UNMATCHED

    @property
    def amount(self) -> Decimal:
        """Amount of the transaction this result is about, ledger side first."""
        if self.ledger_transaction is not None:
            return self.ledger_transaction.amount_decimal
        if self.statement_transaction is not None:
            return self.statement_transaction.amount
        return Decimal("0")

    def to_dict(self) -> dict[str, Any]:
        ledger = self.ledger_transaction
        statement = self.statement_transaction
        return {
            "match_type": self.match_type.value,
            "confidence": round(self.confidence, 4),
            "ledger_transaction_id": self.ledger_transaction_id,
            "ledger_date": ledger.date.isoformat() if ledger else None,
            "ledger_amount": str(ledger.amount_decimal) if ledger else None,
            "ledger_payee": ledger.payee_name if ledger else None,
            "ledger_memo": ledger.memo if ledger else None,
            "statement_date": statement.date.isoformat() if statement else None,
            "statement_amount": str(statement.amount) if statement else None,
            "statement_description": statement.description if statement else None,
            "date_delta_days": self.date_delta_days,
            "amount_delta": str(self.amount_delta) if self.amount_delta is not None else None,
            "description_similarity": (
                round(self.description_similarity, 4)
                if self.description_similarity is not None
                else None
            ),
        }
