"""Budgeting ledger collaborators."""

from .client import LedgerClient
from .file_client import JsonLedgerClient

__all__ = ["LedgerClient", "JsonLedgerClient"]
