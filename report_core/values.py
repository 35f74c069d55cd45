from __future__ import annotations

import math
import numbers
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd


PLAIN_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
LEADING_FLOAT_RE = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
LEADING_COUNT_RE = re.compile(r"^(\d+)")
CURRENCY_RE = re.compile(r"[$]?([\d,]+(\.\d+)?)")
COUNT_PERCENT_RE = re.compile(r"(\d+(?:,\d{3})*)(?:\.\d+)?\s*\((\d+(?:,\d{3})*(?:\.\d+)?)%\)")
NEGATIVE_TOKENS = {"no", "n", "false", "0", "none", "null", "nan", "na", "n/a"}


def is_present(value: Any) -> bool:
    """Spreadsheet truthiness: None, NaN, "", 0 and False count as missing."""
    if value is None or isinstance(value, str):
        return bool(value)
    try:
        if pd.isna(value):
            return False
    except (TypeError, ValueError):
        return True
    return bool(value)


def is_affirmative(value: Any) -> bool:
    """Like is_present, but answer-style blanks ("No", "FALSE", "n/a") count as missing too."""
    if not is_present(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() not in NEGATIVE_TOKENS
    return True


def is_numeric(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, str):
        return bool(PLAIN_NUMBER_RE.match(value.strip()))
    if isinstance(value, numbers.Real):
        try:
            return not math.isnan(float(value))
        except (TypeError, ValueError):
            return False
    return False


def parse_float(value: Any) -> float:
    """Parse the leading number of a cell; NaN when there is none."""
    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, numbers.Real):
        return float(value)
    match = LEADING_FLOAT_RE.match(str(value))
    if not match:
        return math.nan
    return float(match.group(0))


def to_fixed(value: float, digits: int = 2) -> str:
    """Fixed-point rendering of the exact binary value, ties away from zero."""
    q = Decimal(10) ** -digits
    out = Decimal(float(value)).quantize(q, rounding=ROUND_HALF_UP)
    if out == 0:
        out = abs(out)
    return f"{out:f}"


def js_round(value: float) -> int:
    return int(math.floor(value + 0.5))


def plain_number(value: float) -> str:
    """Render 80.0 as "80" and 12.50 as "12.5"."""
    text = f"{float(value):.2f}".rstrip("0").rstrip(".")
    return text if text not in ("", "-0") else "0"


def extract_numeric_value(value: Any) -> float:
    """Pull a chartable number out of a cell.

    Handles plain numbers, "X (Y%)" count strings (the count wins) and
    "$1,234.56" currency strings. Anything else is missing data and maps to 0.
    """
    if is_numeric(value):
        return round(float(value), 2)
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        count = LEADING_COUNT_RE.match(value)
        if count:
            return float(count.group(1))
        currency = CURRENCY_RE.search(value)
        if currency:
            digits = currency.group(1).replace(",", "")
            parsed = parse_float(digits)
            if not math.isnan(parsed):
                return parsed
        parsed = parse_float(value)
        if not math.isnan(parsed):
            return round(parsed, 2)
    return 0.0


def extract_custom_format_value(value: Any) -> Optional[Dict[str, float]]:
    if not isinstance(value, str):
        return None
    match = COUNT_PERCENT_RE.search(value)
    if not match:
        return None
    return {
        "x": int(match.group(1).replace(",", "")),
        "y": float(match.group(2).replace(",", "")),
    }


def format_currency(value: object) -> str:
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, str):
        if not value:
            return ""
        number = parse_float(value)
    else:
        try:
            number = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return ""
    if math.isnan(number) or math.isinf(number):
        return ""
    amount = Decimal(to_fixed(number, 2))
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_currency_columns(rows: Iterable[Sequence[Any]], columns: Iterable[int]) -> List[List[Any]]:
    """Return copies of ``rows`` with numeric cells in ``columns`` shown as whole-dollar currency."""
    columns = sorted(set(columns))
    formatted: List[List[Any]] = []
    for row in rows:
        out = list(row)
        for c in columns:
            if c < len(out) and is_numeric(out[c]):
                out[c] = format_currency(int(float(out[c])))
        formatted.append(out)
    return formatted
