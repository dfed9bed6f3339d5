"""Amount parsing and formatting helpers.

Upstream amount fields arrive as numbers, numeric strings (sometimes with
currency symbols and thousands separators), ``None`` or junk. Everything in
this module degrades to ``0`` instead of raising so a single bad field can
never abort a report.
"""

import logging
import math
import re
from typing import Any, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

_CURRENCY_CHARS = re.compile(r"[₹$,\s]")
_NON_NUMERIC_CHARS = re.compile(r"[^\d.\-]")
_NUMERIC_TEXT = re.compile(r"^\s*[-+]?\s*[₹$]?\s*(\d[\d,]*)?(\.\d+)?\s*$")


def parse_signed_amount(value: Any) -> float:
    """Parse a loosely typed amount keeping its sign.

    Strings lose every character other than digits, ``.`` and ``-`` before
    parsing, so exponent notation and text prefixes are not understood:
    ``"1e5"`` reads as 15 and ``"Rs. 1,500"`` as 0.15. Upstream amounts are
    plain decimals, optionally with ``₹``/``$`` and thousands separators.

    Args:
        value: Number, numeric string, ``None`` or anything else.

    Returns:
        The parsed value, or 0.0 when it cannot be parsed.
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        parsed = float(value)
    else:
        cleaned = _NON_NUMERIC_CHARS.sub("", _CURRENCY_CHARS.sub("", str(value)))
        if not cleaned:
            return 0.0
        try:
            parsed = float(cleaned)
        except ValueError:
            logger.debug(f"Unparseable amount {value!r}, using 0")
            return 0.0

    if not math.isfinite(parsed):
        return 0.0
    return parsed


def parse_amount(value: Any) -> float:
    """Parse a loosely typed amount into a non-negative magnitude."""
    return abs(parse_signed_amount(value))


def parse_count(value: Any) -> int:
    """Parse a loosely typed order count into a non-negative integer."""
    return int(round(parse_amount(value)))


def looks_numeric(value: Any) -> bool:
    """Return True if the value is a number or a numeric-looking string."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        return bool(value.strip()) and bool(_NUMERIC_TEXT.match(value))
    return False


def ensure_negative(value: Any) -> float:
    """Return the magnitude of ``value`` as a debit (negative or zero)."""
    magnitude = parse_amount(value)
    return -magnitude if magnitude else 0.0


def sum_amount(a: Any, b: Any) -> float:
    return parse_amount(a) + parse_amount(b)


def sum_count(a: Any, b: Any) -> int:
    return parse_count(a) + parse_count(b)


def percentage(part: Any, whole: Any) -> float:
    """Return ``part / whole * 100``, or 0 when ``whole`` is zero."""
    denominator = parse_amount(whole)
    if denominator == 0:
        return 0.0
    return parse_amount(part) / denominator * 100


class LocaleConfig(BaseModel):
    """How amounts are rendered for display."""
    symbol: str = Field(default="₹", description="Currency symbol prefix")
    grouping: str = Field(default="indian", description="'indian' (12,34,567) or 'western' (1,234,567)")
    decimals: int = Field(default=2, ge=0, le=6)


def _group_digits(digits: str, grouping: str) -> str:
    if grouping == "western":
        return f"{int(digits):,}"
    if len(digits) <= 3:
        return digits

    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_currency(amount: Any, locale: Optional[LocaleConfig] = None) -> str:
    """Format an amount with currency symbol and digit grouping.

    Args:
        amount: Anything ``parse_signed_amount`` accepts.
        locale: Rendering rules. Defaults to rupees with Indian grouping.

    Returns:
        Display string such as ``-₹1,23,456.50``.
    """
    locale = locale or LocaleConfig()
    value = parse_signed_amount(amount)

    text = f"{abs(value):.{locale.decimals}f}"
    whole, _, fraction = text.partition(".")
    grouped = _group_digits(whole, locale.grouping)
    if fraction:
        grouped = f"{grouped}.{fraction}"

    sign = "-" if value < 0 and float(text) != 0 else ""
    return f"{sign}{locale.symbol}{grouped}"


def format_percent(value: Any, decimals: int = 2) -> str:
    return f"{parse_signed_amount(value):.{decimals}f}%"
