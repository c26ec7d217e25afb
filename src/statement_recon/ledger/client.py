"""Interface of the budgeting ledger collaborator."""

from datetime import date
from typing import Optional, Protocol

from ..models.transaction import LedgerAccount, LedgerTransaction


class LedgerClient(Protocol):
    """
    Read-only access to the budgeting ledger.

    Implementations may raise any exception on failure; the reconciliation
    service wraps those as UpstreamError.
    """

    async def list_accounts(self) -> list[LedgerAccount]:
        """List all accounts, including closed and deleted ones."""
        ...

    async def list_transactions(
        self, account_id: str, since_date: Optional[date] = None
    ) -> list[LedgerTransaction]:
        """List an account's transactions dated on or after since_date."""
        ...
