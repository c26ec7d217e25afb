"""
Ledger client backed by an exported JSON or YAML file.

Expected layout::

    accounts:
      - {id: acc-1, name: Checking, balance: 1234560, closed: false}
    transactions:
      - {id: t-1, account_id: acc-1, date: 2025-10-20, amount: -99800,
         payee_name: Privacy, memo: "", deleted: false}

Balances and amounts are integer minor units (1/1000 of a currency unit).
"""

from datetime import date
from pathlib import Path
from typing import Any, Optional
import logging

import yaml

from ..models.transaction import LedgerAccount, LedgerTransaction
from ..utils.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class JsonLedgerClient:
    """LedgerClient reading accounts and transactions from an export file."""

    def __init__(self, file_path: Path):
        """
        Initialize the client.

        Args:
            file_path: Path to a JSON or YAML ledger export
        """
        self.file_path = Path(file_path)
        self._data: Optional[dict[str, Any]] = None

    def _load(self) -> dict[str, Any]:
        """Read and cache the export file."""
        if self._data is not None:
            return self._data

        logger.debug(f"Loading ledger export: {self.file_path}")
        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise UpstreamError(f"Failed to read ledger export {self.file_path}: {e}") from e

        if not isinstance(data, dict):
            raise UpstreamError(f"Ledger export root must be a mapping: {self.file_path}")

        self._data = data
        return data

    async def list_accounts(self) -> list[LedgerAccount]:
        data = self._load()
        try:
            return [LedgerAccount.from_dict(item) for item in data.get("accounts") or []]
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamError(f"Malformed account in ledger export: {e}", "list_accounts") from e

    async def list_transactions(
        self, account_id: str, since_date: Optional[date] = None
    ) -> list[LedgerTransaction]:
        data = self._load()
        transactions: list[LedgerTransaction] = []
        try:
            for item in data.get("transactions") or []:
                if str(item.get("account_id")) != account_id:
                    continue
                txn = LedgerTransaction.from_dict(item)
                if since_date is not None and txn.date < since_date:
                    continue
                transactions.append(txn)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise UpstreamError(
                f"Malformed transaction in ledger export: {e}", "list_transactions"
            ) from e

        logger.debug(f"Loaded {len(transactions)} ledger transactions for account {account_id}")
        return transactions
