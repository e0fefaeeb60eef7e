"""
Axis domain calculation for a reshaped dataset.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

import numpy as np

from analysis.classifier import is_null, is_numeric_like, to_number
from analysis.dates import is_date_like, parse_date
from analysis.weights import AUTO, DEFAULT_WEIGHTS, ScoreWeights


Bound = Union[str, float]


@dataclass
class Domain:
    """Axis bounds. Each bound is a number or "auto"."""
    x_min: Bound = AUTO
    x_max: Bound = AUTO
    y_min: Bound = AUTO
    y_max: Bound = AUTO

    def to_dict(self) -> Dict[str, Bound]:
        return {
            "xMin": self.x_min,
            "xMax": self.x_max,
            "yMin": self.y_min,
            "yMax": self.y_max,
        }


def _collect(dataset: Mapping[str, Sequence[Mapping[str, Any]]], key: str) -> List[Any]:
    return [
        point.get(key)
        for points in dataset.values()
        for point in points
        if not is_null(point.get(key))
    ]


def _x_numbers(values: List[Any]) -> Union[np.ndarray, None]:
    """Finite X values on a single numeric timeline, or None if they are not uniform."""
    if all(is_numeric_like(value) for value in values):
        numbers = np.array([float(value) for value in values])
    elif all(is_date_like(value) for value in values):
        numbers = np.array([float(parse_date(value)) for value in values])
    else:
        return None
    numbers = numbers[np.isfinite(numbers)]
    return numbers if numbers.size else None


def calculate_x_range(values: List[Any], weights: ScoreWeights = DEFAULT_WEIGHTS) -> Tuple[Bound, Bound]:
    """Numeric or time X range padded by 5%. "auto" for categorical X or a zero range."""
    if not values:
        return AUTO, AUTO

    numbers = _x_numbers(values)
    if numbers is None:
        return AUTO, AUTO

    low, high = float(np.min(numbers)), float(np.max(numbers))
    span = high - low
    if span == 0:
        return AUTO, AUTO

    padding = span * weights.x_padding_ratio
    return low - padding, high + padding


def _y_padding(span: float, weights: ScoreWeights) -> float:
    if span < weights.y_small_range:
        return max(span * weights.y_small_range_padding_ratio, weights.y_small_range_min_padding)
    if span > weights.y_large_range:
        return span * weights.y_large_range_padding_ratio
    return span * weights.y_padding_ratio


def calculate_y_range(values: List[Any], weights: ScoreWeights = DEFAULT_WEIGHTS) -> Tuple[Bound, Bound]:
    """
    Padded Y range.

    Constant 0 gives [0, 1], any other constant is padded by 20% of its
    magnitude. Ranges crossing zero are symmetric around zero. One-signed
    ranges snap to zero when the data comes close to it.
    """
    numbers = [to_number(value) for value in values]
    numbers = np.array([float(n) for n in numbers if n is not None])
    if numbers.size == 0:
        return AUTO, AUTO

    low, high = float(np.min(numbers)), float(np.max(numbers))
    span = high - low

    if span == 0:
        if low == 0:
            return 0.0, 1.0
        padding = abs(low) * weights.y_constant_padding_ratio
        return low - padding, high + padding

    padding = _y_padding(span, weights)

    if low < 0 < high:
        bound = max(abs(low), abs(high)) * weights.y_zero_crossing_factor
        return -bound, bound

    snap_distance = span * weights.y_zero_clamp_ratio

    if low >= 0:
        y_min = 0.0 if low <= snap_distance else max(0.0, low - padding)
        return y_min, high + padding

    y_max = 0.0 if abs(high) <= snap_distance else min(0.0, high + padding)
    return low - padding, y_max


def calculate_domain(dataset: Mapping[str, Sequence[Mapping[str, Any]]], x_key: str, y_key: str,
                     weights: ScoreWeights = DEFAULT_WEIGHTS) -> Domain:
    """
    Compute X and Y axis bounds over every series of a reshaped dataset.

    Args:
        dataset: Series id -> ordered points
        x_key: X field
        y_key: Y field

    Returns:
        Domain with "auto" wherever a range cannot be derived
    """
    x_min, x_max = calculate_x_range(_collect(dataset, x_key), weights)
    y_min, y_max = calculate_y_range(_collect(dataset, y_key), weights)
    return Domain(x_min=x_min, x_max=x_max, y_min=y_min, y_max=y_max)
