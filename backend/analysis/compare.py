"""
Total ordering over heterogeneous values (numbers, dates, text, nulls).
"""
from typing import Any, Callable, Iterable, List, Tuple
import locale

from analysis.classifier import is_null, is_numeric_like
from analysis.dates import parse_date


NULL_RANK = 0
TIMELINE_RANK = 1
TEXT_RANK = 2


def sort_key(value: Any) -> Tuple:
    """
    Sort key placing every value in one of three bands.

    Nulls come first. Numbers, numeric text and parseable dates share a
    single numeric timeline. Everything else follows, ordered by locale
    collation.
    """
    if is_null(value):
        return (NULL_RANK, 0)

    if is_numeric_like(value):
        return (TIMELINE_RANK, float(value))

    timestamp = parse_date(value)
    if timestamp is not None:
        return (TIMELINE_RANK, float(timestamp))

    text = str(value)
    return (TEXT_RANK, locale.strxfrm(text), text)


def compare_values(a: Any, b: Any) -> int:
    """Compare two values. Returns -1, 0 or 1."""
    key_a, key_b = sort_key(a), sort_key(b)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0


def sort_by(items: Iterable[Any], key: Callable[[Any], Any]) -> List[Any]:
    """Stable sort of items by the comparator order of `key(item)`."""
    return sorted(items, key=lambda item: sort_key(key(item)))
