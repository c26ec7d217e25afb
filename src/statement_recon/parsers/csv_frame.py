"""Read raw statement CSV text into a positional DataFrame of strings."""

from dataclasses import dataclass, field
from typing import Optional
import csv
import io

import pandas as pd

from ..utils.exceptions import InputFormatError


@dataclass
class StatementFrame:
    """
    Parsed CSV content.

    `data` columns are positional (0..n-1) so duplicate or blank header
    names ("*", "") never collide. `raw_lines` and `row_numbers` line up
    with the DataFrame rows.
    """

    headers: list[str]
    data: pd.DataFrame
    raw_lines: list[str] = field(default_factory=list)
    row_numbers: list[int] = field(default_factory=list)

    @property
    def column_count(self) -> int:
        return len(self.headers)

    @property
    def row_count(self) -> int:
        return len(self.data)

    def column_values(self, index: int, limit: Optional[int] = None) -> list[str]:
        """Non-empty values of a column, optionally from the first `limit` rows only."""
        series = self.data[index]
        if limit is not None:
            series = series.head(limit)
        return [v for v in series.tolist() if v]


def read_statement_frame(csv_text: str, delimiter: str = ",") -> StatementFrame:
    """
    Split CSV text into a header and padded data rows.

    Quoted fields may contain the delimiter. Blank lines and rows with
    only empty cells are skipped. Rows longer than the header (trailing
    delimiters) are truncated, shorter rows are padded with "". CRLF and
    bare CR line endings are read as LF.

    Raises:
        InputFormatError: If the text is not readable as CSV
    """
    csv_text = csv_text.replace("\r\n", "\n").replace("\r", "\n")
    lines = csv_text.split("\n")
    reader = csv.reader(io.StringIO(csv_text), delimiter=delimiter, skipinitialspace=True)

    headers: Optional[list[str]] = None
    rows: list[list[str]] = []
    raw_lines: list[str] = []
    row_numbers: list[int] = []

    previous_line = 0
    try:
        for record in reader:
            start_line = previous_line
            previous_line = reader.line_num

            cells = [cell.strip() for cell in record]
            if not any(cells):
                continue

            if headers is None:
                cells[0] = cells[0].lstrip("\ufeff")
                headers = cells
                continue

            width = len(headers)
            if len(cells) < width:
                cells = cells + [""] * (width - len(cells))
            rows.append(cells[:width])
            raw_lines.append("\n".join(lines[start_line:previous_line]))
            row_numbers.append(start_line + 1)
    except csv.Error as e:
        raise InputFormatError(
            f"Unable to read CSV near line {reader.line_num}: {e}",
            errors=[str(e)],
        ) from e

    headers = headers or []
    data = pd.DataFrame(rows, columns=list(range(len(headers))), dtype=object)

    return StatementFrame(
        headers=headers,
        data=data,
        raw_lines=raw_lines,
        row_numbers=row_numbers,
    )
