"""Parsers for bank statement CSV exports."""

from .csv_frame import StatementFrame, read_statement_frame
from .csv_normalizer import CSVNormalizer, NormalizationResult, format_error_message
from .format_detector import (
    AmountColumn,
    ColumnClassification,
    ColumnHints,
    ColumnRole,
    FormatDetectionResult,
    FormatDetector,
    score_column,
)
from .values import is_amount_shaped, parse_amount, parse_date

__all__ = [
    "StatementFrame",
    "read_statement_frame",
    "CSVNormalizer",
    "NormalizationResult",
    "format_error_message",
    "AmountColumn",
    "ColumnClassification",
    "ColumnHints",
    "ColumnRole",
    "FormatDetectionResult",
    "FormatDetector",
    "score_column",
    "is_amount_shaped",
    "parse_amount",
    "parse_date",
]
