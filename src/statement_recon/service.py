"""
Account reconciliation service.

Ties together the ledger collaborator, statement normalization, matching
and report building. The only awaited work is the ledger calls; everything
else is synchronous computation.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Optional
import logging

from .config import ReconConfig
from .ledger.client import LedgerClient
from .matching.engine import ReconciliationEngine
from .models.report import ReconciliationReport
from .models.transaction import LedgerAccount
from .parsers.csv_normalizer import CSVNormalizer
from .parsers.format_detector import ColumnHints
from .reports.report_builder import ReportBuilder
from .utils.exceptions import (
    AccountNotFoundError,
    InputFormatError,
    ReconciliationError,
    UpstreamError,
)

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationRequest:
    """Inputs of one reconciliation run."""

    csv_data: str
    statement_balance: Decimal
    statement_date: date
    account_id: Optional[str] = None
    account_name: Optional[str] = None
    tolerance: Optional[Decimal] = None
    hints: Optional[ColumnHints] = None


@dataclass
class ReconciliationOutcome:
    """Tagged result: a report on success, an error description otherwise."""

    success: bool
    report: Optional[ReconciliationReport] = None
    error_type: Optional[str] = None
    error_message: Optional[str] = None
    column_analysis: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_error(cls, error: ReconciliationError) -> "ReconciliationOutcome":
        return cls(
            success=False,
            error_type=error.error_type,
            error_message=str(error),
            column_analysis=list(getattr(error, "column_analysis", []) or []),
        )


def find_account(
    accounts: list[LedgerAccount],
    account_id: Optional[str] = None,
    account_name: Optional[str] = None,
) -> LedgerAccount:
    """
    Locate the account to reconcile.

    Deleted and closed accounts are never selected. An id wins over a
    name; names match exactly (case-insensitive) before substring.

    Raises:
        AccountNotFoundError: If no open account matches
    """
    open_accounts = [a for a in accounts if not a.deleted and not a.closed]

    account: Optional[LedgerAccount] = None
    if account_id:
        account = next((a for a in open_accounts if a.id == account_id), None)
    elif account_name:
        wanted = account_name.lower()
        account = next((a for a in open_accounts if a.name.lower() == wanted), None)
        if account is None:
            account = next((a for a in open_accounts if wanted in a.name.lower()), None)

    if account is None:
        raise AccountNotFoundError(
            "Account not found. Please provide a valid account id or account name "
            f"(open accounts: {', '.join(a.name for a in open_accounts) or 'none'})"
        )
    return account


async def _call_ledger(operation: str, call):
    """Await a ledger call, wrapping any failure as UpstreamError."""
    try:
        return await call
    except UpstreamError:
        raise
    except Exception as e:
        raise UpstreamError(f"Ledger {operation} failed: {e}", operation) from e


async def reconcile_account(
    client: LedgerClient,
    request: ReconciliationRequest,
    config: Optional[ReconConfig] = None,
) -> ReconciliationOutcome:
    """
    Reconcile one account against a bank statement CSV.

    Args:
        client: Ledger collaborator
        request: Statement data and account selection
        config: Application configuration (defaults if omitted)

    Returns:
        ReconciliationOutcome; taxonomy errors are reported, not raised
    """
    config = config or ReconConfig()
    tolerance = (
        Decimal(str(request.tolerance))
        if request.tolerance is not None
        else Decimal(str(config.matching.amount_tolerance))
    )

    try:
        accounts = await _call_ledger("list_accounts", client.list_accounts())
        account = find_account(accounts, request.account_id, request.account_name)
        logger.info(f"Reconciling account {account.name} ({account.id})")

        normalization = CSVNormalizer(config).normalize(request.csv_data, request.hints)
        if not normalization.success:
            raise normalization.to_error()

        earliest = min(txn.date for txn in normalization.transactions)
        since_date = earliest - timedelta(days=config.report.lookback_margin_days)
        ledger_transactions = await _call_ledger(
            "list_transactions", client.list_transactions(account.id, since_date)
        )
        ledger_transactions = [txn for txn in ledger_transactions if not txn.deleted]

        engine = ReconciliationEngine(config, amount_tolerance=tolerance)
        match_results = engine.match(ledger_transactions, normalization.transactions)

        report = ReportBuilder(config).build(
            account=account,
            statement_balance=request.statement_balance,
            statement_date=request.statement_date,
            match_results=match_results,
            amount_tolerance=tolerance,
            warnings=normalization.warnings,
        )
    except (AccountNotFoundError, InputFormatError, UpstreamError) as e:
        logger.error(f"Reconciliation failed ({e.error_type}): {e}")
        return ReconciliationOutcome.from_error(e)

    return ReconciliationOutcome(success=True, report=report)
