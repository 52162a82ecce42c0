"""Amount and currency parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

from sarrafi.domain.entities import Currency

_SYMBOLS = re.compile(r"[$€£¥؋﷼]")
_TRAILING_CODE = re.compile(r"\s+[A-Za-z_]+$")


def parse_amount(amount_str: str) -> Decimal:
    """Parse a typed amount into a Decimal.

    Accepts grouped digits ("1,234.56"), a leading sign, currency symbols,
    accounting negatives ("(123.45)") and a trailing currency code
    ("1,000 USD"). NaN and infinities are refused.

    Raises:
        ValueError: If amount string cannot be parsed
    """
    text = (amount_str or "").strip()
    if not text:
        raise ValueError("Empty amount string")

    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1]

    text = _SYMBOLS.sub("", text)
    text = _TRAILING_CODE.sub("", text.strip())
    text = text.replace(",", "").strip()

    try:
        amount = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{text}': {e!r}")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{text}': not a finite number")
    return -amount if negative else amount


def parse_currency(code: str) -> Currency:
    """Parse a currency code such as ``usd`` or ``IRT-BANK``.

    Raises:
        ValueError: If the code is not a supported currency
    """
    normalized = (code or "").strip().upper().replace("-", "_")
    try:
        return Currency(normalized)
    except ValueError:
        supported = ", ".join(c.value for c in Currency)
        raise ValueError(f"Unknown currency '{code}'. Supported currencies: {supported}")
