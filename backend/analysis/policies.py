"""
Chart-type and aggregation decisions for a chosen X/Y pair.
"""
from typing import Any, Dict, List, Mapping, Optional, Sequence

from analysis.classifier import hashable_value, is_null, is_numeric_like, is_time_field, to_number
from analysis.weights import DEFAULT_WEIGHTS, ScoreWeights
from core.dataset import coerce_fields


TIME_TYPE_HINTS = ("date", "datetime", "timestamp", "time")


def _is_time_axis(x_key: str, fields: Optional[Sequence[Any]], weights: ScoreWeights) -> bool:
    if is_time_field(x_key, weights):
        return True
    for field in coerce_fields(fields or []):
        if field.id == x_key:
            return field.type.lower() in TIME_TYPE_HINTS
    return False


def should_use_bar_chart(records: Sequence[Mapping[str, Any]], x_key: str,
                         fields: Optional[Sequence[Any]] = None,
                         weights: ScoreWeights = DEFAULT_WEIGHTS) -> bool:
    """
    Decide whether a bar chart fits the X field better than a line chart.

    Bar is preferred for non-time X fields that are categorical, or numeric
    with few distinct values.
    """
    if _is_time_axis(x_key, fields, weights):
        return False

    values = [record.get(x_key) for record in records]
    values = [value for value in values if not is_null(value)]
    if not values:
        return False

    numeric_ratio = sum(1 for value in values if is_numeric_like(value)) / len(values)
    unique_count = len({hashable_value(value) for value in values})
    unique_ratio = unique_count / len(values)

    if numeric_ratio < weights.numeric_ratio_threshold:
        return True

    return unique_count < weights.bar_max_unique and unique_ratio < weights.bar_max_unique_ratio


def should_sum_data(records: Sequence[Mapping[str, Any]], x_key: str, y_key: str) -> bool:
    """True if some X value repeats with more than one numeric Y value."""
    groups: Dict[Any, List[Any]] = {}
    for record in records:
        groups.setdefault(hashable_value(record.get(x_key)), []).append(record.get(y_key))

    for y_values in groups.values():
        if len(y_values) < 2:
            continue
        numeric_count = sum(1 for value in y_values if to_number(value) is not None)
        if numeric_count > 1:
            return True

    return False
