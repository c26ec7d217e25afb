from datetime import date
from decimal import Decimal

import pytest

from statement_recon.config import CsvInputConfig
from statement_recon.parsers.values import is_amount_shaped, parse_amount, parse_date

DATE_FORMATS = CsvInputConfig().date_formats


class TestParseAmount:
    """Test suite for currency parsing"""

    @pytest.mark.parametrize("raw, expected", [
        ("$99.80", Decimal("99.80")),
        ("($99.80)", Decimal("-99.80")),
        ("-$4000.00", Decimal("-4000.00")),
        ("$-12.00", Decimal("-12.00")),
        ("1,234.56", Decimal("1234.56")),
        ("-99.80", Decimal("-99.80")),
        ("+20", Decimal("20")),
        (" 4000.00 ", Decimal("4000.00")),
    ])
    def test_currency_formats(self, raw, expected):
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", ["", None, "abc", "10/20/2025", "12.3.4", "$"])
    def test_not_an_amount(self, raw):
        assert parse_amount(raw) is None

    def test_bare_integers_are_not_amount_shaped(self):
        assert parse_amount("5199481") == Decimal("5199481")
        assert not is_amount_shaped("5199481")
        assert is_amount_shaped("-99.80")
        assert is_amount_shaped("($99.80)")


class TestParseDate:
    """Test suite for date parsing"""

    @pytest.mark.parametrize("raw", [
        "10/20/2025",
        "10/20/25",
        "2025-10-20",
        "2025/10/20",
        "20 Oct 2025",
        "Oct 20, 2025",
        "October 20, 2025",
    ])
    def test_supported_formats(self, raw):
        assert parse_date(raw, DATE_FORMATS) == date(2025, 10, 20)

    def test_month_first_when_ambiguous(self):
        assert parse_date("03/04/2025", DATE_FORMATS) == date(2025, 3, 4)

    @pytest.mark.parametrize("raw", ["", None, "not a date", "13/45/2025", "DEBIT"])
    def test_invalid_dates(self, raw):
        assert parse_date(raw, DATE_FORMATS) is None
