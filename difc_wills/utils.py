"""
Utility functions for formatting, rounding, and hashing.
"""

import hashlib
import math
from datetime import datetime
from typing import Any, Optional


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with halves rounded up.

    Python's built-in round() uses banker's rounding (round(62.5) == 62);
    scores and percentages here always round .5 upwards.
    """
    return int(math.floor(value + 0.5))


def coerce_to_float(value: Any) -> Optional[float]:
    """Coerce various inputs to float."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            value = float(value)
        except OverflowError:
            # JSON integers have no size limit
            return None
        if math.isnan(value) or math.isinf(value):
            return None
        return value
    if isinstance(value, str):
        try:
            return coerce_to_float(float(value.strip()))
        except ValueError:
            return None
    return None


def is_filled(value: Any) -> bool:
    """True for a string with at least one non-whitespace character."""
    return isinstance(value, str) and value.strip() != ''


def format_currency(amount: Any, currency: str = 'AED') -> str:
    """
    Format a numeric amount as currency.

    Args:
        amount: Numeric amount
        currency: ISO currency code

    Returns:
        Formatted currency string, e.g. 'AED 1,250,000'
    """
    if amount is None:
        return ''

    num = coerce_to_float(amount)
    if num is None:
        return str(amount)
    if num == int(num):
        return f'{currency} {int(num):,}'
    return f'{currency} {num:,.2f}'


def format_percentage(value: Any) -> str:
    """
    Format a numeric value as percentage.

    Args:
        value: Numeric percentage (e.g., 50 for 50%)

    Returns:
        Formatted percentage string
    """
    if value is None:
        return ''

    num = coerce_to_float(value)
    if num is None:
        return str(value)
    if num == int(num):
        return f'{int(num)}%'
    return f'{num:.2f}%'


def join_names(names) -> str:
    """Join names as 'A', 'A and B' or 'A, B, and C'."""
    names = [n for n in names if n]
    if not names:
        return ''
    if len(names) == 1:
        return names[0]
    if len(names) == 2:
        return f'{names[0]} and {names[1]}'
    return ', '.join(names[:-1]) + f', and {names[-1]}'


def calculate_sha256(data: bytes) -> str:
    """Calculate SHA256 hash of data as a hex string."""
    return hashlib.sha256(data).hexdigest()


def short_hash(full_hash: str, length: int = 16) -> str:
    """Get a shortened version of a hash for display."""
    if not full_hash:
        return ''
    return full_hash[:length]


def format_dubai_datetime(dt: Optional[datetime] = None) -> str:
    """
    Format a datetime in the Asia/Dubai timezone.

    Naive datetimes are treated as UTC.
    """
    from zoneinfo import ZoneInfo

    if dt is None:
        dt = datetime.now(ZoneInfo('Asia/Dubai'))
    else:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=ZoneInfo('UTC'))
        dt = dt.astimezone(ZoneInfo('Asia/Dubai'))

    return dt.strftime('%d %B %Y at %I:%M %p %Z')
