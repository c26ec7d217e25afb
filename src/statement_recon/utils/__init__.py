"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    InputFormatError,
    AccountNotFoundError,
    UpstreamError,
    ConfigurationError,
    ReportGenerationError,
)
from .logging_config import setup_logging, level_from_name

__all__ = [
    "ReconciliationError",
    "InputFormatError",
    "AccountNotFoundError",
    "UpstreamError",
    "ConfigurationError",
    "ReportGenerationError",
    "setup_logging",
    "level_from_name",
]
