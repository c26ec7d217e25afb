"""
Excel rendering of a reconciliation report.
Creates a multi-sheet workbook on request; nothing is persisted otherwise.
"""

from pathlib import Path
from typing import Optional
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Border, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..config import ReconConfig, SheetConfig
from ..models.report import DiscrepancyKind, ReconciliationReport, ReconciliationStatus
from ..models.transaction import MatchResult, MatchType
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
MATCH_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
VARIANCE_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
UNMATCHED_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

STATUS_FILLS = {
    ReconciliationStatus.BALANCED: MATCH_FILL,
    ReconciliationStatus.NEEDS_REVIEW: VARIANCE_FILL,
    ReconciliationStatus.UNBALANCED: UNMATCHED_FILL,
}


class ExcelReportGenerator:
    """Generates Excel reconciliation reports with multiple sheets."""

    def __init__(self, config: ReconConfig):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config
        self.output_config = config.output.excel
        self.sheet_config = config.output.sheets

    def default_filename(self, report: ReconciliationReport) -> str:
        """Workbook file name built from the configured template."""
        account = "".join(ch if ch.isalnum() else "_" for ch in report.account_name).strip("_")
        return self.output_config.filename_template.format(
            account=account or report.account_id,
            date=report.statement_date.strftime("%Y%m%d"),
        )

    def generate_report(self, report: ReconciliationReport, output_path: Path) -> Path:
        """
        Write the reconciliation report as a workbook.

        Args:
            report: Reconciliation report
            output_path: Workbook path, or a directory to place a default-named file in

        Returns:
            Path to generated workbook

        Raises:
            ReportGenerationError: If the workbook cannot be written
        """
        output_path = Path(output_path)
        if output_path.is_dir():
            output_path = output_path / self.default_filename(report)

        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()

        # Remove default sheet
        if wb.active:
            wb.remove(wb.active)

        sheets = self.sheet_config
        if sheets.summary.enabled:
            self._create_summary_sheet(wb, sheets.summary, report)
        if sheets.matched.enabled:
            self._create_matched_sheet(wb, sheets.matched, report)
        if sheets.missing_from_ledger.enabled:
            self._create_missing_sheet(wb, sheets.missing_from_ledger, report)
        if sheets.not_on_statement.enabled:
            self._create_not_on_statement_sheet(wb, sheets.not_on_statement, report)
        if sheets.warnings.enabled and report.warnings:
            self._create_warnings_sheet(wb, sheets.warnings, report)

        if not wb.worksheets:
            raise ReportGenerationError("All report sheets are disabled in configuration")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to write report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _create_summary_sheet(
        self, wb: Workbook, sheet: SheetConfig, report: ReconciliationReport
    ) -> None:
        """Create the summary sheet with balances and the verdict."""
        ws = wb.create_sheet(sheet.name)

        ws["A1"] = "Account Reconciliation Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        sections = [
            (
                "Account Information",
                [
                    ("Account:", report.account_name),
                    ("Account ID:", report.account_id),
                    ("Statement Date:", report.statement_date.isoformat()),
                    ("Reconciliation Date:", report.reconciliation_date.isoformat()),
                ],
            ),
            (
                "Balances",
                [
                    ("Statement Balance:", float(report.statement_balance)),
                    ("Ledger Balance:", float(report.ledger_balance)),
                    ("Computed Ledger Balance:", float(report.computed_ledger_balance)),
                    ("Unexplained Discrepancy:", float(report.discrepancy)),
                    ("Balance Difference:", float(report.balance_difference)),
                ],
            ),
            (
                "Transaction Counts",
                [
                    ("Ledger Transactions:", report.total_ledger_transactions),
                    ("Statement Transactions:", report.total_statement_transactions),
                    ("Exact Matches:", report.totals[MatchType.EXACT].count),
                    ("Fuzzy Matches:", report.totals[MatchType.FUZZY].count),
                    ("Unmatched Ledger:", len(report.unmatched_ledger)),
                    ("Unmatched Statement:", len(report.unmatched_statement)),
                    ("Skipped Statement Rows:", len(report.warnings)),
                ],
            ),
            (
                "Status",
                [
                    ("Status:", report.status.value.upper()),
                    ("Confidence Score:", f"{report.confidence_score * 100:.1f}%"),
                    ("Total Discrepancies:", len(report.discrepancies)),
                    ("Largest Discrepancy:", float(report.largest_discrepancy)),
                ],
            ),
        ]

        row = 3
        for title, items in sections:
            ws[f"A{row}"] = title
            ws[f"A{row}"].font = Font(bold=True)
            row += 1
            for label, value in items:
                ws[f"A{row}"] = label
                ws[f"B{row}"] = value
                if label == "Status:":
                    ws[f"B{row}"].fill = STATUS_FILLS[report.status]
                row += 1
            row += 1

        if report.recommendations:
            ws[f"A{row}"] = "Recommendations"
            ws[f"A{row}"].font = Font(bold=True)
            row += 1
            for recommendation in report.recommendations:
                ws[f"A{row}"] = recommendation
                row += 1

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 40

    def _create_matched_sheet(
        self, wb: Workbook, sheet: SheetConfig, report: ReconciliationReport
    ) -> None:
        """Create the matched transactions sheet."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(
            ws,
            [
                "Ledger Date",
                "Ledger Payee",
                "Ledger Amount",
                "Statement Date",
                "Statement Description",
                "Statement Amount",
                "Match Type",
                "Confidence",
                "Amount Delta",
                "Date Delta (Days)",
                "Similarity",
            ],
        )

        matched: list[MatchResult] = report.exact_matches + report.fuzzy_matches
        for row_num, match in enumerate(matched, start=2):
            ledger = match.ledger_transaction
            statement = match.statement_transaction
            row_data = [
                ledger.date,
                ledger.payee_name,
                float(ledger.amount_decimal),
                statement.date,
                statement.description,
                float(statement.amount),
                match.match_type.value,
                round(match.confidence, 2),
                float(match.amount_delta) if match.amount_delta else "",
                match.date_delta_days if match.date_delta_days else "",
                round(match.description_similarity or 0.0, 2),
            ]
            has_variance = bool(match.amount_delta) or bool(match.date_delta_days)
            fill = VARIANCE_FILL if has_variance else MATCH_FILL
            self._write_row(ws, row_num, row_data, fill)

        self._auto_fit_columns(ws)

    def _create_missing_sheet(
        self, wb: Workbook, sheet: SheetConfig, report: ReconciliationReport
    ) -> None:
        """Create the sheet of statement lines absent from the ledger."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(ws, ["Date", "Description", "Amount", "CSV Row", "Raw Line"])

        for row_num, match in enumerate(report.unmatched_statement, start=2):
            statement = match.statement_transaction
            row_data = [
                statement.date,
                statement.description,
                float(statement.amount),
                statement.row_number,
                statement.raw_data,
            ]
            self._write_row(ws, row_num, row_data, UNMATCHED_FILL)

        self._auto_fit_columns(ws)

    def _create_not_on_statement_sheet(
        self, wb: Workbook, sheet: SheetConfig, report: ReconciliationReport
    ) -> None:
        """Create the sheet of ledger transactions absent from the statement."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(ws, ["Date", "Payee", "Memo", "Amount", "Transaction ID", "Kind"])

        after_ids = {
            d.ledger_transaction_id
            for d in report.discrepancies_of(DiscrepancyKind.AFTER_STATEMENT_DATE)
        }
        for row_num, match in enumerate(report.unmatched_ledger, start=2):
            ledger = match.ledger_transaction
            after = ledger.id in after_ids
            row_data = [
                ledger.date,
                ledger.payee_name,
                ledger.memo,
                float(ledger.amount_decimal),
                ledger.id,
                (DiscrepancyKind.AFTER_STATEMENT_DATE if after else DiscrepancyKind.NOT_ON_STATEMENT).value,
            ]
            self._write_row(ws, row_num, row_data, VARIANCE_FILL if after else UNMATCHED_FILL)

        self._auto_fit_columns(ws)

    def _create_warnings_sheet(
        self, wb: Workbook, sheet: SheetConfig, report: ReconciliationReport
    ) -> None:
        """Create the sheet of skipped statement rows."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(ws, ["CSV Row", "Reason", "Raw Line"])

        for row_num, warning in enumerate(report.warnings, start=2):
            self._write_row(ws, row_num, [warning.row_number, warning.reason, warning.raw_data])

        self._auto_fit_columns(ws)

    def _write_headers(self, ws: Worksheet, headers: list[str]) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    def _write_row(self, ws: Worksheet, row_num: int, values: list, fill: Optional[PatternFill] = None) -> None:
        for col, value in enumerate(values, start=1):
            cell = ws.cell(row=row_num, column=col, value=value)
            cell.border = THIN_BORDER
            if fill is not None:
                cell.fill = fill

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            column = column_cells[0].column_letter
            max_length = max(
                (len(str(cell.value)) for cell in column_cells if cell.value is not None),
                default=0,
            )
            ws.column_dimensions[column].width = min(max_length + 2, 50)
