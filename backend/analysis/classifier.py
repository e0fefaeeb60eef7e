"""
Field value classification.
Decides whether a field behaves as numeric and whether its name suggests
time or measured-value semantics.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence
import math
import re

import numpy as np
import pandas as pd

from analysis.weights import DEFAULT_WEIGHTS, ScoreWeights


NUMERIC_PATTERN = re.compile(r'^-?(?:\d+(?:\.\d+)?|\.\d+)$')


def is_null(value: Any) -> bool:
    """True for None and float NaN (including numpy/pandas missing markers)."""
    if value is None:
        return True
    if isinstance(value, (str, bool)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # Containers are never null markers
        return False


def is_numeric_like(value: Any) -> bool:
    """
    Check whether a value behaves as a number.

    Python numbers (except bool and non-finite floats) are numeric. Anything
    else is stringified and matched against an optional minus sign, digits
    and an optional decimal part. Blank text is not numeric.
    """
    if isinstance(value, (bool, np.bool_)):
        return False
    if isinstance(value, (int, np.integer)):
        return True
    if isinstance(value, (float, np.floating)):
        return math.isfinite(value)
    if value is None:
        return False
    return bool(NUMERIC_PATTERN.match(str(value)))


def _name_contains(name: str, keywords: Sequence[str]) -> bool:
    lowered = str(name).lower()
    return any(keyword in lowered for keyword in keywords)


def is_time_field(name: str, weights: ScoreWeights = DEFAULT_WEIGHTS) -> bool:
    """True if the field name suggests a time dimension."""
    return _name_contains(name, weights.time_keywords)


def is_value_field(name: str, weights: ScoreWeights = DEFAULT_WEIGHTS) -> bool:
    """True if the field name suggests a measured value."""
    return _name_contains(name, weights.value_keywords)


def to_number(value: Any) -> Optional[float]:
    """
    Best-effort numeric conversion.

    Handles currency symbols, thousands separators, trailing percent signs
    and accounting-style negatives like "(1,200)".

    Returns:
        The number, or None when the value is not numeric
    """
    if isinstance(value, (bool, np.bool_)) or is_null(value):
        return None

    if isinstance(value, (int, np.integer)):
        return value
    if isinstance(value, (float, np.floating)):
        return value if math.isfinite(value) else None

    cleaned = re.sub(r'[\$,€£¥\s]', '', str(value))

    if cleaned.startswith('(') and cleaned.endswith(')'):
        cleaned = '-' + cleaned[1:-1]

    if cleaned.endswith('%'):
        cleaned = cleaned[:-1]

    if not cleaned:
        return None

    try:
        result = float(cleaned)
    except (ValueError, TypeError):
        return None

    return result if math.isfinite(result) else None


def parse_float_or_text(value: Any) -> Any:
    """Return the numeric value if it parses, else the original value."""
    number = to_number(value)
    return value if number is None else number


def is_number(value: Any) -> bool:
    """True for real numbers (not bool, not NaN)."""
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating)) and not is_null(value)


def hashable_value(value: Any) -> Any:
    """Map a raw value to a dictionary key. Null markers collapse to None."""
    if is_null(value):
        return None
    try:
        hash(value)
    except TypeError:
        return repr(value)
    return value


@dataclass
class FieldAnalysis:
    """Per-field classification derived from a bounded sample of records."""
    name: str
    is_numeric: bool
    is_time: bool
    is_value: bool
    unique_count: int
    numeric_ratio: float
    sample: Any
    sample_size: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "is_numeric": self.is_numeric,
            "is_time": self.is_time,
            "is_value": self.is_value,
            "unique_count": self.unique_count,
            "numeric_ratio": round(self.numeric_ratio, 4),
            "sample_size": self.sample_size,
        }


def sample_records(records: Sequence[Mapping[str, Any]],
                   weights: ScoreWeights = DEFAULT_WEIGHTS) -> List[Mapping[str, Any]]:
    """First `sample_size` records."""
    return list(records[:weights.sample_size])


def analyze_field(field_name: str, records: Sequence[Mapping[str, Any]],
                  weights: ScoreWeights = DEFAULT_WEIGHTS) -> FieldAnalysis:
    """
    Classify one field from the first records of a dataset.

    Args:
        field_name: Field id
        records: Dataset records (only the first `sample_size` are read)
        weights: Thresholds to apply

    Returns:
        FieldAnalysis for the field
    """
    sample = sample_records(records, weights)
    values = pd.Series([record.get(field_name) for record in sample], dtype=object)

    sample_size = len(values)
    numeric_count = int(values.map(is_numeric_like).sum()) if sample_size else 0
    numeric_ratio = numeric_count / sample_size if sample_size else 0.0

    unique_count = int(values.map(hashable_value).nunique(dropna=False)) if sample_size else 0

    return FieldAnalysis(
        name=field_name,
        is_numeric=numeric_ratio > weights.numeric_ratio_threshold,
        is_time=is_time_field(field_name, weights),
        is_value=is_value_field(field_name, weights),
        unique_count=unique_count,
        numeric_ratio=numeric_ratio,
        sample=values.iloc[0] if sample_size else None,
        sample_size=sample_size,
    )
