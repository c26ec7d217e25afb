"""Cell-level parsing of statement dates and currency amounts."""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional
import re

# Optional leading sign, optional "$", optional sign after "$", then digits
# with or without thousands separators.
AMOUNT_PATTERN = re.compile(
    r"(?P<sign>[-+]?)\s*\$?\s*(?P<inner_sign>[-+]?)\s*"
    r"(?P<number>\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?|\.\d+)"
)

MIN_YEAR = 1900
MAX_YEAR = 2100


def parse_amount(value: Optional[str]) -> Optional[Decimal]:
    """
    Parse a currency string into a signed Decimal.

    Handles "$99.80", "($99.80)", "-$4000.00", "$-12.00", "1,234.56" and
    plain numbers. Returns None if the text is not an amount.
    """
    if value is None:
        return None

    cleaned = str(value).strip().strip("\"'")
    if not cleaned:
        return None

    negative = False
    if cleaned.startswith("(") and cleaned.endswith(")"):
        negative = True
        cleaned = cleaned[1:-1].strip()

    match = AMOUNT_PATTERN.fullmatch(cleaned)
    if not match:
        return None

    try:
        amount = Decimal(match.group("number").replace(",", ""))
    except InvalidOperation:
        return None

    if match.group("sign") == "-" or match.group("inner_sign") == "-":
        negative = True

    return -amount if negative else amount


def is_amount_shaped(value: str) -> bool:
    """
    True when the text looks like a monetary amount rather than an id.

    Bare integers ("5199481", "1234") are reference numbers far more often
    than amounts, so a decimal point, sign, "$" or parentheses is required.
    """
    if parse_amount(value) is None:
        return False
    return any(marker in value for marker in (".", "-", "+", "$", "("))


def parse_date(value: Optional[str], formats: Iterable[str]) -> Optional[date]:
    """
    Parse a date string using the first matching format.

    Args:
        value: Raw cell text
        formats: strptime formats tried in order

    Returns:
        Parsed date, or None if no format matches
    """
    if value is None:
        return None

    cleaned = str(value).strip().strip("\"'")
    if not cleaned or not any(ch.isdigit() for ch in cleaned):
        return None

    for fmt in formats:
        try:
            parsed = datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
        if MIN_YEAR <= parsed.year <= MAX_YEAR:
            return parsed.date()

    return None
