"""Bank statement CSV to budgeting ledger reconciliation."""

__version__ = "0.1.0"
