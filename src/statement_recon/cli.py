"""
Command-line interface for the bank statement reconciliation tool.
"""

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional
import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .config import load_config, generate_default_config, ReconConfig
from .ledger.file_client import JsonLedgerClient
from .models.report import ReconciliationReport
from .parsers.csv_normalizer import CSVNormalizer, format_error_message
from .parsers.format_detector import ColumnClassification, ColumnHints
from .reports.excel_generator import ExcelReportGenerator
from .reports.report_builder import format_currency
from .reports.text_renderer import render_json, render_markdown
from .service import ReconciliationRequest, reconcile_account
from .utils.exceptions import ReconciliationError
from .utils.logging_config import level_from_name, setup_logging

console = Console()


def _parse_decimal(ctx, param, value: Optional[str]) -> Optional[Decimal]:
    """Click callback turning a currency option into a Decimal."""
    if value is None:
        return None
    try:
        return Decimal(value.replace("$", "").replace(",", "").strip())
    except InvalidOperation:
        raise click.BadParameter(f"not a valid amount: {value!r}")


def hint_options(func):
    """Attach the column hint options shared by several commands."""
    func = click.option("--amount-column", help="Header of the amount column")(func)
    func = click.option("--description-column", help="Header of the description column")(func)
    func = click.option("--date-column", help="Header of the transaction date column")(func)
    return func


def _hints(date_column: Optional[str], description_column: Optional[str], amount_column: Optional[str]) -> Optional[ColumnHints]:
    hints = ColumnHints(date_column, description_column, amount_column)
    return None if hints.is_empty else hints


def _load(config: Optional[Path], verbose: bool) -> ReconConfig:
    """Load configuration and set up logging from it."""
    recon_config = load_config(config)
    log_level = logging.DEBUG if verbose else level_from_name(recon_config.logging.level)
    log_file = Path(recon_config.logging.file) if recon_config.logging.file else None
    setup_logging(log_level, log_file=log_file, log_format=recon_config.logging.format)
    return recon_config


@click.group()
@click.version_option(version="0.1.0")
def main():
    """Bank Statement to Budget Ledger Reconciliation Tool."""
    pass


@main.command()
@click.argument("ledger_file", type=click.Path(exists=True, path_type=Path))
@click.argument("csv_file", type=click.Path(exists=True, path_type=Path))
@click.option("--account", "account_name", help="Account name (exact, then partial match)")
@click.option("--account-id", help="Account id")
@click.option(
    "--statement-balance",
    required=True,
    callback=_parse_decimal,
    help="Ending balance printed on the statement",
)
@click.option(
    "--statement-date",
    required=True,
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Statement closing date (YYYY-MM-DD)",
)
@click.option(
    "--tolerance",
    callback=_parse_decimal,
    default=None,
    help="Override amount tolerance in dollars",
)
@hint_options
@click.option(
    "-f",
    "--format",
    "output_format",
    type=click.Choice(["markdown", "json", "table"]),
    default=None,
    help="Report format (defaults to output.format from configuration)",
)
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Write the report to a file")
@click.option("--excel", type=click.Path(path_type=Path), help="Also write an Excel workbook")
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def reconcile(
    ledger_file: Path,
    csv_file: Path,
    account_name: Optional[str],
    account_id: Optional[str],
    statement_balance: Decimal,
    statement_date,
    tolerance: Optional[Decimal],
    date_column: Optional[str],
    description_column: Optional[str],
    amount_column: Optional[str],
    output_format: Optional[str],
    output: Optional[Path],
    excel: Optional[Path],
    config: Optional[Path],
    verbose: bool,
):
    """
    Reconcile a bank statement CSV with ledger transactions.

    LEDGER_FILE: Path to the ledger export (JSON or YAML)
    CSV_FILE: Path to the bank statement CSV
    """
    if not account_name and not account_id:
        raise click.UsageError("Provide --account or --account-id")

    try:
        recon_config = _load(config, verbose)
        csv_data = csv_file.read_text(encoding=recon_config.input.csv.encoding)

        request = ReconciliationRequest(
            csv_data=csv_data,
            statement_balance=statement_balance,
            statement_date=statement_date.date(),
            account_id=account_id,
            account_name=account_name,
            tolerance=tolerance,
            hints=_hints(date_column, description_column, amount_column),
        )

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Running reconciliation...", total=None)
            outcome = asyncio.run(
                reconcile_account(JsonLedgerClient(ledger_file), request, recon_config)
            )
            progress.update(task, completed=True)

        if not outcome.success:
            console.print(f"[red]Error ({outcome.error_type}):[/red]")
            console.print(outcome.error_message, markup=False, highlight=False)
            sys.exit(1)

        report = outcome.report
        output_format = output_format or recon_config.output.format

        if output_format == "table":
            _display_summary(report)
            _display_discrepancies(report)
        else:
            if output_format == "json":
                text = render_json(report)
            else:
                text = render_markdown(report, recon_config.report.sample_matches)
            if output:
                output.parent.mkdir(parents=True, exist_ok=True)
                output.write_text(text, encoding="utf-8")
                console.print(f"[green]Report written: {output}[/green]")
            else:
                click.echo(text)

        if excel:
            report_path = ExcelReportGenerator(recon_config).generate_report(report, excel)
            console.print(f"[green]Excel report generated: {report_path}[/green]")

    except (ReconciliationError, OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command()
@click.argument("csv_file", type=click.Path(exists=True, path_type=Path))
@hint_options
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def detect(
    csv_file: Path,
    date_column: Optional[str],
    description_column: Optional[str],
    amount_column: Optional[str],
    config: Optional[Path],
    verbose: bool,
):
    """
    Show how each column of a statement CSV is classified.

    CSV_FILE: Path to the bank statement CSV
    """
    try:
        recon_config = _load(config, verbose)
        normalizer = CSVNormalizer(recon_config)
        csv_data = csv_file.read_text(encoding=recon_config.input.csv.encoding)
        detection = normalizer.detector.detect(
            csv_data, _hints(date_column, description_column, amount_column)
        )
    except (ReconciliationError, OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    _display_columns(detection.column_analysis, title=f"Column Analysis: {csv_file.name}")

    if not detection.success:
        for error in detection.errors:
            console.print(f"[red]{error}[/red]", highlight=False)
        sys.exit(1)

    console.print(f"\nOverall confidence: {detection.confidence:.0%}")


@main.command()
@click.argument("csv_file", type=click.Path(exists=True, path_type=Path))
@hint_options
@click.option("--limit", type=int, default=20, show_default=True, help="Rows to display")
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def normalize(
    csv_file: Path,
    date_column: Optional[str],
    description_column: Optional[str],
    amount_column: Optional[str],
    limit: int,
    config: Optional[Path],
    verbose: bool,
):
    """
    Parse a statement CSV and display the normalized transactions.

    CSV_FILE: Path to the bank statement CSV
    """
    try:
        recon_config = _load(config, verbose)
        result = CSVNormalizer(recon_config).normalize_file(
            csv_file, _hints(date_column, description_column, amount_column)
        )
    except ReconciliationError as e:
        console.print(f"[red]Error parsing file: {e}[/red]")
        sys.exit(1)

    if not result.success:
        console.print(format_error_message(result), markup=False, highlight=False)
        sys.exit(1)

    transactions = result.transactions
    table = Table(title=f"Statement Transactions: {csv_file.name}")
    table.add_column("Row", justify="right")
    table.add_column("Date")
    table.add_column("Amount", justify="right")
    table.add_column("Description")

    for txn in transactions[:limit]:
        table.add_row(
            str(txn.row_number),
            txn.date.isoformat(),
            format_currency(txn.amount),
            txn.description[:40] + "..." if len(txn.description) > 40 else txn.description,
        )

    console.print(table)

    if len(transactions) > limit:
        console.print(f"\n... and {len(transactions) - limit} more transactions")

    console.print(f"\nTotal transactions: {len(transactions)}")

    for warning in result.warnings:
        console.print(f"[yellow]Skipped {warning}[/yellow]", highlight=False)


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _display_summary(report: ReconciliationReport) -> None:
    """Display reconciliation summary in console."""
    table = Table(title=f"Reconciliation Summary: {report.account_name}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Statement Balance", format_currency(report.statement_balance))
    table.add_row("Ledger Balance", format_currency(report.ledger_balance))
    table.add_row("Computed Ledger Balance", format_currency(report.computed_ledger_balance))
    table.add_row("Unexplained Discrepancy", format_currency(report.discrepancy))
    table.add_row("Balance Difference", format_currency(report.balance_difference))
    table.add_row("Exact Matches", str(len(report.exact_matches)))
    table.add_row("Fuzzy Matches", str(len(report.fuzzy_matches)))
    table.add_row("Unmatched Ledger", str(len(report.unmatched_ledger)))
    table.add_row("Unmatched Statement", str(len(report.unmatched_statement)))
    table.add_row("Confidence Score", f"{report.confidence_score * 100:.1f}%")
    table.add_row("Status", report.status.value.upper())

    console.print(table)

    for recommendation in report.recommendations:
        console.print(f"- {recommendation}", highlight=False)


def _display_discrepancies(report: ReconciliationReport) -> None:
    """Display discrepancies in console."""
    if not report.discrepancies:
        return

    table = Table(title="Discrepancies")
    table.add_column("Kind")
    table.add_column("Amount", justify="right")
    table.add_column("Description")

    for discrepancy in report.discrepancies:
        table.add_row(
            discrepancy.kind.value,
            format_currency(discrepancy.amount),
            discrepancy.description,
        )

    console.print(table)


def _display_columns(analysis: list[ColumnClassification], title: str) -> None:
    """Display per-column classification in console."""
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Column")
    table.add_column("Role")
    table.add_column("Confidence", justify="right")
    table.add_column("Samples")

    for column in analysis:
        role = column.role.value + (" *" if column.assigned else "")
        table.add_row(
            str(column.index),
            column.column_name,
            role,
            f"{column.confidence:.0%}",
            ", ".join(column.sample_values),
        )

    console.print(table)


if __name__ == "__main__":
    main()
