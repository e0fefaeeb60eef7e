"""
Date parsing for heterogeneous date-like values.

Timestamps are epoch milliseconds. Naive dates are interpreted in local time.
"""
from datetime import datetime, timedelta
from typing import Any, Optional
import re
import warnings

import pandas as pd

from analysis.classifier import is_null, is_numeric_like, is_number


YEAR_MONTH_PATTERN = re.compile(r'^(\d{4})[-/](\d{1,2})$')
YEAR_MONTH_DAY_PATTERN = re.compile(r'^(\d{4})[-/](\d{1,2})[-/](\d{1,2})$')
HAS_DIGIT_PATTERN = re.compile(r'\d')


def _local_timestamp(year: int, month: int, day: int = 1) -> Optional[float]:
    """Local-midnight timestamp, or None outside the representable range (e.g. year 0)."""
    # Day overflow rolls into the following month (e.g. 2021-02-31 -> 2021-03-03)
    try:
        moment = datetime(year, month, 1) + timedelta(days=day - 1)
        return moment.timestamp() * 1000
    except (ValueError, OverflowError, OSError):
        return None


def _parse_pattern(text: str) -> Optional[float]:
    """Parse YYYY-MM / YYYY-MM-DD forms. None if the text does not match."""
    match = YEAR_MONTH_PATTERN.match(text)
    if match:
        year, month = int(match.group(1)), int(match.group(2))
        if 1 <= month <= 12:
            return _local_timestamp(year, month)
        return None

    match = YEAR_MONTH_DAY_PATTERN.match(text)
    if match:
        year, month, day = (int(g) for g in match.groups())
        if 1 <= month <= 12 and 1 <= day <= 31:
            return _local_timestamp(year, month, day)
        return None

    return None


def _matches_pattern(text: str) -> bool:
    return bool(YEAR_MONTH_PATTERN.match(text) or YEAR_MONTH_DAY_PATTERN.match(text))


def _parse_generic(text: str) -> Optional[float]:
    """Free-form date text through pandas. Text without digits is rejected."""
    if not HAS_DIGIT_PATTERN.search(text):
        return None

    try:
        with warnings.catch_warnings():
            warnings.simplefilter('ignore')
            parsed = pd.to_datetime(text)
    except (ValueError, TypeError, OverflowError):
        return None

    if pd.isna(parsed):
        return None

    try:
        return parsed.to_pydatetime().timestamp() * 1000
    except (ValueError, OverflowError, OSError):
        return None


def parse_date(value: Any) -> Optional[float]:
    """
    Convert a date-like value to an epoch-millisecond timestamp.

    Args:
        value: Number, numeric text, `YYYY-MM`, `YYYY/MM`, `YYYY-MM-DD`,
            `YYYY/MM/DD` or free-form date text

    Returns:
        Timestamp in milliseconds, or None if the value is not a date.
        Numbers and numeric text are taken as timestamps already.
    """
    if is_null(value) or isinstance(value, bool):
        return None

    if is_number(value):
        return value

    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime().timestamp() * 1000
    if isinstance(value, datetime):
        return value.timestamp() * 1000

    text = str(value).strip()
    if not text:
        return None

    if is_numeric_like(text):
        return float(text)

    if _matches_pattern(text):
        return _parse_pattern(text)

    return _parse_generic(text)


def is_date_string(value: Any) -> bool:
    """Quick check whether a value is date text (numbers and numeric text are not)."""
    if not isinstance(value, str):
        return False

    text = value.strip()
    if not text or is_numeric_like(text):
        return False

    if _matches_pattern(text):
        return _parse_pattern(text) is not None

    return _parse_generic(text) is not None


def is_date_like(value: Any) -> bool:
    """Date text or a datetime object."""
    return isinstance(value, datetime) and not is_null(value) or is_date_string(value)
