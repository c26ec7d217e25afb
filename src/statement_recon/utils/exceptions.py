"""Custom exceptions for the reconciliation application."""

from typing import Any, Optional


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    error_type = "reconciliation_error"


class InputFormatError(ReconciliationError):
    """Statement CSV could not be mapped onto date, description and amount."""

    error_type = "input_format_error"

    def __init__(
        self,
        message: str,
        column_analysis: Optional[list[Any]] = None,
        errors: Optional[list[str]] = None,
    ):
        super().__init__(message)
        self.column_analysis = column_analysis or []
        self.errors = errors or []


class AccountNotFoundError(ReconciliationError):
    """Requested account is absent from the ledger's account list."""

    error_type = "account_not_found"


class UpstreamError(ReconciliationError):
    """A call to the ledger collaborator failed."""

    error_type = "upstream_error"

    def __init__(self, message: str, operation: str = ""):
        super().__init__(message)
        self.operation = operation


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    error_type = "configuration_error"


class ReportGenerationError(ReconciliationError):
    """Error generating a rendered report."""

    error_type = "report_generation_error"
