"""
Bank statement CSV normalizer.

Turns a CSV export of arbitrary layout into canonical statement
transactions using the columns chosen by the format detector.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Optional
import logging

from ..config import ReconConfig
from ..models.report import RowParseWarning
from ..models.transaction import StatementTransaction
from ..utils.exceptions import InputFormatError
from .csv_frame import StatementFrame, read_statement_frame
from .format_detector import (
    AmountColumn,
    ColumnClassification,
    ColumnHints,
    FormatDetectionResult,
    FormatDetector,
)
from .values import parse_amount, parse_date

logger = logging.getLogger(__name__)

HINT_TEMPLATE = """{
  "date_column": "<header of the transaction date column>",
  "description_column": "<header of the payee/description column>",
  "amount_column": "<header of the signed amount column>"
}"""


@dataclass
class NormalizationResult:
    """Outcome of normalizing a statement CSV."""

    success: bool
    transactions: list[StatementTransaction] = field(default_factory=list)
    warnings: list[RowParseWarning] = field(default_factory=list)
    column_analysis: list[ColumnClassification] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    detection: Optional[FormatDetectionResult] = None

    def to_error(self) -> InputFormatError:
        """Convert a failed result into the exception raised by callers that want one."""
        return InputFormatError(
            format_error_message(self),
            column_analysis=[c.to_dict() for c in self.column_analysis],
            errors=list(self.errors),
        )


class CSVNormalizer:
    """
    Normalizer for bank statement CSV exports.

    Unparseable rows are skipped and reported as warnings; only a file
    from which no transaction can be read at all is a failure.
    """

    def __init__(self, config: ReconConfig):
        """
        Initialize the normalizer with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config
        self.csv_config = config.input.csv
        self.detector = FormatDetector(config)

    def normalize_file(self, file_path: Path, hints: Optional[ColumnHints] = None) -> NormalizationResult:
        """
        Read and normalize a statement CSV file.

        Args:
            file_path: Path to the CSV file
            hints: Optional column name overrides

        Returns:
            Normalization result

        Raises:
            InputFormatError: If the file cannot be read or decoded
        """
        logger.info(f"Parsing statement CSV file: {file_path}")

        try:
            csv_text = Path(file_path).read_text(encoding=self.csv_config.encoding)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read CSV file: {e}")
            raise InputFormatError(f"Failed to read CSV file: {e}") from e

        return self.normalize(csv_text, hints)

    def normalize(self, csv_text: str, hints: Optional[ColumnHints] = None) -> NormalizationResult:
        """
        Normalize CSV text into statement transactions.

        Args:
            csv_text: Raw CSV content including the header row
            hints: Optional column name overrides

        Returns:
            NormalizationResult; unsuccessful results carry the column analysis

        Raises:
            InputFormatError: If the text cannot be read as CSV at all
        """
        frame = read_statement_frame(csv_text, self.csv_config.delimiter)
        detection = self.detector.detect_frame(frame, hints)

        if not detection.success:
            return NormalizationResult(
                success=False,
                column_analysis=detection.column_analysis,
                errors=list(detection.errors),
                detection=detection,
            )

        transactions, warnings = self._process_frame(frame, detection)

        for warning in warnings:
            logger.warning(f"Skipping statement {warning}")

        if not transactions:
            return NormalizationResult(
                success=False,
                warnings=warnings,
                column_analysis=detection.column_analysis,
                errors=[f"No parseable transactions found ({len(warnings)} rows skipped)"],
                detection=detection,
            )

        logger.info(f"Extracted {len(transactions)} transactions from statement CSV")

        return NormalizationResult(
            success=True,
            transactions=transactions,
            warnings=warnings,
            column_analysis=detection.column_analysis,
            detection=detection,
        )

    def _process_frame(
        self, frame: StatementFrame, detection: FormatDetectionResult
    ) -> tuple[list[StatementTransaction], list[RowParseWarning]]:
        """Convert each data row, collecting a warning for rows that cannot be read."""
        transactions: list[StatementTransaction] = []
        warnings: list[RowParseWarning] = []

        for position, cells in enumerate(frame.data.itertuples(index=False, name=None)):
            raw_line = frame.raw_lines[position]
            row_number = frame.row_numbers[position]

            txn_date = parse_date(cells[detection.date_column], self.csv_config.date_formats)
            if txn_date is None:
                warnings.append(
                    RowParseWarning(
                        row_number, raw_line, f"Invalid date {cells[detection.date_column]!r}"
                    )
                )
                continue

            amount = self._row_amount(cells, detection.amount_columns)
            if amount is None:
                warnings.append(RowParseWarning(row_number, raw_line, "No valid amount found"))
                continue

            description = str(cells[detection.description_column]).strip()
            if not description:
                warnings.append(RowParseWarning(row_number, raw_line, "Empty description"))
                continue

            transactions.append(
                StatementTransaction(
                    date=txn_date,
                    description=description,
                    amount=amount,
                    raw_data=raw_line,
                    row_number=row_number,
                )
            )

        return transactions, warnings

    def _row_amount(self, cells: tuple, amount_columns: list[AmountColumn]) -> Optional[Decimal]:
        """
        Signed amount for a row.

        Split debit/credit layouts fill one of the two cells per row; the
        first non-empty one wins.
        """
        for amount_column in amount_columns:
            value = parse_amount(cells[amount_column.index])
            if value is None:
                continue
            if amount_column.kind == "credit":
                return abs(value)
            if amount_column.kind == "debit":
                return -abs(value)
            return value
        return None


def format_error_message(result: NormalizationResult) -> str:
    """
    Render a failed normalization as a diagnostic the user can act on.

    Includes every column's detected role and samples, plus a hint
    template for retrying with explicit column names.
    """
    lines = ["Unable to parse bank statement CSV."]
    for error in result.errors:
        lines.append(f"  - {error}")

    if result.column_analysis:
        lines.append("")
        lines.append("Column analysis:")
        for column in result.column_analysis:
            samples = ", ".join(repr(v) for v in column.sample_values) or "(empty)"
            lines.append(
                f"  [{column.index}] {column.column_name!r}: {column.role.value} "
                f"({column.confidence:.0%}) samples: {samples}"
            )

    lines.append("")
    lines.append("Provide column hints to override detection, for example:")
    lines.append(HINT_TEMPLATE)
    return "\n".join(lines)

