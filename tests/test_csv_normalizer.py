from datetime import date
from decimal import Decimal

import pytest

from statement_recon.parsers.csv_normalizer import CSVNormalizer, format_error_message
from statement_recon.parsers.format_detector import ColumnHints
from statement_recon.utils.exceptions import InputFormatError
from samples import CHASE_CSV, DEBIT_CREDIT_AMOUNT_CSV, DEBIT_CREDIT_CSV, LAYOUTS, TWO_COLUMN_CSV


@pytest.fixture
def normalizer(config):
    return CSVNormalizer(config)


class TestCSVNormalizer:
    """Test suite for statement normalization"""

    @pytest.mark.parametrize("layout", sorted(LAYOUTS))
    def test_first_row_of_every_layout(self, normalizer, layout):
        result = normalizer.normalize(LAYOUTS[layout])
        assert result.success, result.errors
        first = result.transactions[0]
        assert first.date == date(2025, 10, 20)
        assert first.amount == Decimal("-99.80")
        assert len(result.transactions) == 2

    def test_chase_row_details(self, normalizer):
        result = normalizer.normalize(CHASE_CSV)
        first, second = result.transactions
        assert first.description.startswith("PwP  Privacy.com Privacycom")
        assert first.raw_data.startswith("DEBIT,10/20/2025,")
        assert first.row_number == 2
        assert second.date == date(2025, 10, 17)
        assert second.amount == Decimal("4000.00")

    def test_row_order_preserved(self, normalizer):
        result = normalizer.normalize(LAYOUTS["simple"])
        assert [t.description for t in result.transactions] == [
            "Privacy.com Payment",
            "Online Transfer",
        ]

    def test_normalization_is_idempotent(self, normalizer):
        assert normalizer.normalize(CHASE_CSV) == normalizer.normalize(CHASE_CSV)

    def test_debit_credit_signs(self, normalizer):
        result = normalizer.normalize(DEBIT_CREDIT_CSV)
        assert [t.amount for t in result.transactions] == [Decimal("-4.50"), Decimal("20.00")]
        assert result.transactions[0].date == date(2025, 1, 2)

    def test_amount_headed_debit_credit_signs(self, normalizer):
        result = normalizer.normalize(DEBIT_CREDIT_AMOUNT_CSV)
        assert result.success
        assert [(t.date, t.amount) for t in result.transactions] == [
            (date(2025, 10, 20), Decimal("-99.80")),
            (date(2025, 10, 17), Decimal("4000.00")),
        ]
        assert not result.warnings

    def test_bad_rows_become_warnings(self, normalizer):
        csv_text = (
            "Date,Description,Amount\n"
            "10/20/2025,Privacy.com Payment,-99.80\n"
            "not a date,Broken Row,-1.00\n"
            "10/18/2025,Coffee,abc\n"
            "10/17/2025,Online Transfer,4000.00\n"
        )
        result = normalizer.normalize(csv_text)
        assert result.success
        assert len(result.transactions) == 2
        assert [w.row_number for w in result.warnings] == [3, 4]
        assert result.warnings[0].raw_data == "not a date,Broken Row,-1.00"
        assert str(result.warnings[1]) == "Row 4: No valid amount found"

    def test_blank_lines_skipped(self, normalizer):
        csv_text = "Date,Description,Amount\n\n10/20/2025,Privacy.com Payment,-99.80\n\n"
        result = normalizer.normalize(csv_text)
        assert result.success
        assert len(result.transactions) == 1
        assert not result.warnings

    @pytest.mark.parametrize("newline", ["\r\n", "\r"])
    def test_line_endings(self, normalizer, newline):
        csv_text = "Date,Description,Amount\n10/20/2025,Privacy.com Payment,-99.80\n".replace("\n", newline)
        result = normalizer.normalize(csv_text)
        assert result.success
        assert result.transactions[0].amount == Decimal("-99.80")
        assert result.transactions[0].raw_data == "10/20/2025,Privacy.com Payment,-99.80"
        assert result.transactions[0].row_number == 2

    def test_unreadable_csv_raises(self, normalizer):
        csv_text = "Date,Description,Amount\n10/20/2025," + "x" * 200_000 + ",-99.80\n"
        with pytest.raises(InputFormatError, match="Unable to read CSV"):
            normalizer.normalize(csv_text)

    def test_quoted_commas(self, normalizer):
        csv_text = 'Date,Description,Amount\n10/20/2025,"Smith, John & Co","-$1,234.50"\n'
        result = normalizer.normalize(csv_text)
        assert result.transactions[0].description == "Smith, John & Co"
        assert result.transactions[0].amount == Decimal("-1234.50")

    def test_hints_passed_through(self, normalizer):
        csv_text = "Custom Date,Custom Desc,Custom Amount\n10/20/2025,Test Payment,-99.80\n"
        hints = ColumnHints("Custom Date", "Custom Desc", "Custom Amount")
        result = normalizer.normalize(csv_text, hints)
        assert result.success
        assert result.transactions[0].description == "Test Payment"

    def test_detection_failure_keeps_analysis(self, normalizer):
        result = normalizer.normalize(TWO_COLUMN_CSV)
        assert not result.success
        assert len(result.column_analysis) == 2
        assert not result.transactions

    def test_no_parseable_rows(self, normalizer):
        csv_text = (
            "Date,Description,Amount\n"
            "10/20/2025,Privacy.com Payment,-99.80\n"
            "10/21/2025,Online Transfer,4000.00\n"
        )
        hints = ColumnHints(description_column="Amount", amount_column="Description")
        result = normalizer.normalize(csv_text, hints)
        assert not result.success
        assert "No parseable transactions" in result.errors[0]
        assert len(result.warnings) == 2

    def test_error_message(self, normalizer):
        result = normalizer.normalize(TWO_COLUMN_CSV)
        message = format_error_message(result)
        assert message.startswith("Unable to parse bank statement CSV.")
        assert "'Description'" in message
        assert '"amount_column"' in message

    def test_to_error(self, normalizer):
        error = normalizer.normalize("Invalid CSV data").to_error()
        assert isinstance(error, InputFormatError)
        assert "Unable to parse" in str(error)
        assert error.column_analysis[0]["column_name"] == "Invalid CSV data"

    def test_normalize_file(self, normalizer, tmp_path):
        path = tmp_path / "statement.csv"
        path.write_text(CHASE_CSV, encoding="utf-8")
        result = normalizer.normalize_file(path)
        assert result.success
        assert len(result.transactions) == 2

    def test_missing_file(self, normalizer, tmp_path):
        with pytest.raises(InputFormatError):
            normalizer.normalize_file(tmp_path / "missing.csv")
