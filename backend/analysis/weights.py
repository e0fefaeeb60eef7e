"""
Heuristic weights and thresholds for automatic chart configuration.

Every score contribution used by the axis selector lives in `ScoreWeights`
so the ranking logic can be audited (and varied in tests) independently of
the values. Keyword sets are matched against lower-cased field names.
"""
from dataclasses import dataclass, field, replace
from typing import Tuple


TIME_KEYWORDS: Tuple[str, ...] = (
    "year", "month", "date", "time", "timestamp", "day", "week", "quarter",
    "period", "datetime", "created", "updated", "when",
)

VALUE_KEYWORDS: Tuple[str, ...] = (
    "value", "amount", "count", "total", "sum", "number", "quantity",
    "population", "energy", "power", "consumption", "production", "revenue",
    "cost", "price", "rate", "percentage", "percent", "score", "rating",
    "index", "level", "volume", "capacity",
)

AUTO = "auto"


@dataclass(frozen=True)
class ScoreWeights:
    """Score contributions and cardinality thresholds for axis selection."""

    # Sampling
    sample_size: int = 100
    numeric_ratio_threshold: float = 0.8

    # X-axis contributions
    x_time_field: float = 150
    x_unique_ratio_max: float = 60
    x_year_date_name: float = 40
    x_time_period_name: float = 30
    x_month_day_name: float = 25
    x_numeric_high_cardinality: float = 15
    x_numeric_unique_ratio: float = 0.5
    x_value_field_penalty: float = -80
    x_categorical_bonus: float = 20

    # Y-axis contributions
    y_value_field: float = 150
    y_numeric: float = 80
    y_numeric_ratio_max: float = 40
    y_time_field_penalty: float = -100
    y_moderate_cardinality: float = 15
    y_moderate_unique_ratio: float = 0.7
    y_high_cardinality_penalty: float = -30
    y_high_unique_ratio: float = 0.9
    y_value_name: float = 30

    # Name keyword groups
    x_year_date_keywords: Tuple[str, ...] = ("year", "date")
    x_time_period_keywords: Tuple[str, ...] = ("time", "period")
    x_month_day_keywords: Tuple[str, ...] = ("month", "day")
    y_value_name_keywords: Tuple[str, ...] = (
        "value", "amount", "count", "total", "number", "quantity",
    )

    # Series selection
    series_max_unique: int = 50
    series_unique_ratio: float = 0.5
    series_max_unique_ratio: float = 0.9
    series_preferred_min: int = 2
    series_preferred_max: int = 20
    series_ideal_unique: float = 7.5

    # Fields never used as axes while enough other fields remain
    identifier_fields: Tuple[str, ...] = ("_id",)

    # Chart type
    bar_max_unique: int = 20
    bar_max_unique_ratio: float = 0.5

    # Domain padding
    x_padding_ratio: float = 0.05
    y_constant_padding_ratio: float = 0.2
    y_padding_ratio: float = 0.1
    y_small_range: float = 1.0
    y_small_range_padding_ratio: float = 0.2
    y_small_range_min_padding: float = 0.1
    y_large_range: float = 1000.0
    y_large_range_padding_ratio: float = 0.05
    y_zero_crossing_factor: float = 1.1
    y_zero_clamp_ratio: float = 0.1

    time_keywords: Tuple[str, ...] = field(default=TIME_KEYWORDS)
    value_keywords: Tuple[str, ...] = field(default=VALUE_KEYWORDS)

    def with_overrides(self, **overrides) -> "ScoreWeights":
        """Return a copy with some weights replaced."""
        return replace(self, **overrides)


DEFAULT_WEIGHTS = ScoreWeights()
