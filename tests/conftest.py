import json
import logging
from datetime import date
from decimal import Decimal

import pytest

from statement_recon.config import ReconConfig
from statement_recon.models.transaction import (
    LedgerAccount,
    LedgerTransaction,
    StatementTransaction,
)
from statement_recon.utils.logging_config import ROOT_LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by CLI runs so later tests never log to closed streams."""
    yield
    logging.getLogger(ROOT_LOGGER_NAME).handlers = []


@pytest.fixture
def config():
    return ReconConfig()


@pytest.fixture
def checking_account():
    return LedgerAccount(id="acc-1", name="Checking", balance=1_000_000)


@pytest.fixture
def make_ledger_txn():
    """Factory for ledger transactions with amounts given in currency units."""
    def _make(txn_id, txn_date, amount, payee="", memo="", deleted=False):
        return LedgerTransaction(
            id=txn_id,
            date=txn_date,
            amount=int(Decimal(str(amount)) * 1000),
            payee_name=payee,
            memo=memo,
            deleted=deleted,
        )
    return _make


@pytest.fixture
def make_statement_txn():
    def _make(txn_date, description, amount):
        return StatementTransaction(date=txn_date, description=description, amount=Decimal(str(amount)))
    return _make


@pytest.fixture
def ledger_export(tmp_path):
    """Ledger export file matching the sample statements."""
    data = {
        "accounts": [
            {"id": "acc-0", "name": "Old Checking", "balance": 0, "closed": True},
            {"id": "acc-1", "name": "Checking", "balance": 7_139_410},
            {"id": "acc-2", "name": "Savings", "balance": 25_000_000},
        ],
        "transactions": [
            {"id": "t-1", "account_id": "acc-1", "date": "2025-10-20", "amount": -99_800,
             "payee_name": "Privacy", "memo": "Lena Telegram"},
            {"id": "t-2", "account_id": "acc-1", "date": "2025-10-17", "amount": 4_000_000,
             "payee_name": "Transfer : Savings", "memo": ""},
            {"id": "t-3", "account_id": "acc-1", "date": "2025-09-01", "amount": -10_000,
             "payee_name": "Too Old", "memo": ""},
            {"id": "t-4", "account_id": "acc-2", "date": "2025-10-20", "amount": -99_800,
             "payee_name": "Other Account", "memo": ""},
        ],
    }
    path = tmp_path / "ledger.json"
    path.write_text(json.dumps(data))
    return path


class FakeLedgerClient:
    """In-memory ledger client recording the calls it receives."""

    def __init__(self, accounts, transactions, fail_on=None):
        self.accounts = accounts
        self.transactions = transactions
        self.fail_on = fail_on
        self.calls = []

    async def list_accounts(self):
        self.calls.append(("list_accounts",))
        if self.fail_on == "list_accounts":
            raise RuntimeError("connection reset")
        return list(self.accounts)

    async def list_transactions(self, account_id, since_date=None):
        self.calls.append(("list_transactions", account_id, since_date))
        if self.fail_on == "list_transactions":
            raise RuntimeError("rate limited")
        return [t for t in self.transactions if since_date is None or t.date >= since_date]


@pytest.fixture
def fake_client_factory():
    return FakeLedgerClient


@pytest.fixture
def statement_date():
    return date(2025, 10, 21)
