"""Markdown and JSON renderings of a reconciliation report."""

import json

from ..models.report import DiscrepancyKind, ReconciliationReport, ReconciliationStatus
from .report_builder import format_currency

STATUS_MARKERS = {
    ReconciliationStatus.BALANCED: "✅",
    ReconciliationStatus.NEEDS_REVIEW: "⚠️",
    ReconciliationStatus.UNBALANCED: "❌",
}

DISCREPANCY_HEADINGS = [
    (DiscrepancyKind.MISSING_FROM_LEDGER, "Missing From Ledger (found on statement)"),
    (DiscrepancyKind.NOT_ON_STATEMENT, "Not On Statement (found in ledger)"),
    (DiscrepancyKind.AFTER_STATEMENT_DATE, "Dated After Statement"),
    (DiscrepancyKind.AMOUNT_MISMATCH, "Amount Mismatches"),
]

REPORT_NOTE = (
    "All amounts are in currency units. This report is advisory: it compares "
    "ledger transactions with bank statement data and never modifies the ledger."
)


def render_json(report: ReconciliationReport) -> str:
    """Render the report as indented JSON."""
    return json.dumps(report.to_dict(), indent=2)


def render_markdown(report: ReconciliationReport, sample_matches: int = 10) -> str:
    """
    Render the report as a Markdown document.

    Args:
        report: Reconciliation report
        sample_matches: Number of exact matches listed in the sample section

    Returns:
        Markdown text
    """
    lines: list[str] = ["# Account Reconciliation Report", ""]

    lines += [
        "## Account Information",
        f"- **Account**: {report.account_name}",
        f"- **Statement Date**: {report.statement_date.isoformat()}",
        f"- **Reconciliation Date**: {report.reconciliation_date.isoformat()}",
        "",
    ]

    balance_marker = "✅" if report.balance_difference == 0 else "⚠️"
    lines += [
        "## Balance Summary",
        f"- **Statement Balance**: {format_currency(report.statement_balance)}",
        f"- **Ledger Balance**: {format_currency(report.ledger_balance)}",
        f"- **Computed Ledger Balance**: {format_currency(report.computed_ledger_balance)}",
        f"- **Unexplained Discrepancy**: {format_currency(report.discrepancy)}",
        f"- **Balance Difference**: {format_currency(report.balance_difference)} {balance_marker}",
        "",
    ]

    lines += [
        "## Transaction Matching",
        f"- **Total Ledger Transactions**: {report.total_ledger_transactions}",
        f"- **Total Statement Transactions**: {report.total_statement_transactions}",
        f"- **Exact Matches**: {len(report.exact_matches)} ✓",
        f"- **Fuzzy Matches**: {len(report.fuzzy_matches)} ~",
        f"- **Unmatched Ledger**: {len(report.unmatched_ledger)} ⚠️",
        f"- **Unmatched Statement**: {len(report.unmatched_statement)} ⚠️",
        "",
    ]

    lines += [
        "## Reconciliation Status",
        f"- **Status**: {report.status.value.upper()} {STATUS_MARKERS[report.status]}",
        f"- **Confidence Score**: {report.confidence_score * 100:.1f}%",
        f"- **Total Discrepancies**: {len(report.discrepancies)}",
        f"- **Largest Discrepancy**: {format_currency(report.largest_discrepancy)}",
        "",
    ]

    if report.recommendations:
        lines += ["## Recommendations", ""]
        lines += [f"- {recommendation}" for recommendation in report.recommendations]
        lines.append("")

    if report.discrepancies:
        lines += ["## Discrepancies", ""]
        for kind, heading in DISCREPANCY_HEADINGS:
            items = report.discrepancies_of(kind)
            if not items:
                continue
            lines += [f"### {heading}", ""]
            lines += [f"- {item.description}" for item in items]
            lines.append("")

    exact = report.exact_matches[:sample_matches]
    if exact:
        lines += ["## Matched Transactions (Sample)", ""]
        lines += [f"### Exact Matches (showing first {sample_matches})", ""]
        for match in exact:
            ledger = match.ledger_transaction
            lines.append(
                f"- **{ledger.payee_name}** - {format_currency(ledger.amount_decimal)} "
                f"on {ledger.date.isoformat()}"
            )
        lines.append("")

    if report.warnings:
        lines += ["## Skipped Statement Rows", ""]
        lines += [f"- {warning}" for warning in report.warnings]
        lines.append("")

    lines += ["## Note", REPORT_NOTE, ""]
    return "\n".join(lines)
