"""Report building and rendering."""

from .excel_generator import ExcelReportGenerator
from .report_builder import ReportBuilder, format_currency
from .text_renderer import render_json, render_markdown

__all__ = [
    "ExcelReportGenerator",
    "ReportBuilder",
    "format_currency",
    "render_json",
    "render_markdown",
]
