"""
Dataset reshaping for charting.
Groups raw records into one X-ordered sequence of points per series,
optionally summing Y values that share an X value.
"""
from typing import Any, Dict, List, Mapping, Optional, Sequence

from analysis.classifier import hashable_value, is_null, is_number, parse_float_or_text
from analysis.compare import sort_by
from analysis.dates import is_date_like, parse_date
from analysis.weights import DEFAULT_WEIGHTS, ScoreWeights


ALL_DATA_SERIES = "All Data"
DEFAULT_SERIES = "default"

ProcessedDataset = Dict[str, List[Dict[str, Any]]]


def _first_sample_value(records: Sequence[Mapping[str, Any]], key: str,
                        weights: ScoreWeights) -> Any:
    for record in records[:weights.sample_size]:
        value = record.get(key)
        if not is_null(value):
            return value
    return None


def _convert_dates(records: Sequence[Mapping[str, Any]], x_key: str,
                   weights: ScoreWeights) -> List[Dict[str, Any]]:
    """Copy records, rewriting date-like X values to timestamps."""
    converted = [dict(record) for record in records]

    if not is_date_like(_first_sample_value(records, x_key, weights)):
        return converted

    for record in converted:
        timestamp = parse_date(record.get(x_key))
        if timestamp is not None:
            record[x_key] = timestamp

    return converted


def _series_id(value: Any) -> str:
    if is_null(value) or value == "":
        return DEFAULT_SERIES
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _accumulate(existing: Any, incoming: Any) -> Any:
    """Combine two Y values for the same X. Numbers win over text placeholders."""
    if is_number(existing) and is_number(incoming):
        return existing + incoming
    if is_number(incoming):
        return incoming
    return existing


def _group_points(records: List[Dict[str, Any]], x_key: str, y_key: str,
                  series_key: Optional[str]) -> ProcessedDataset:
    if series_key:
        grouped: Dict[str, List[Dict[str, Any]]] = {}
        for record in records:
            grouped.setdefault(_series_id(record.get(series_key)), []).append(record)
    else:
        grouped = {ALL_DATA_SERIES: records}

    dataset = {}
    for series_id, members in grouped.items():
        ordered = sort_by(members, key=lambda record: record.get(x_key))
        dataset[series_id] = [
            {x_key: record.get(x_key), y_key: parse_float_or_text(record.get(y_key))}
            for record in ordered
        ]
    return dataset


def _sum_points(records: List[Dict[str, Any]], x_key: str, y_key: str,
                series_key: Optional[str]) -> ProcessedDataset:
    # series id -> {x lookup key -> [x value, accumulated y]}
    accumulators: Dict[str, Dict[Any, List[Any]]] = {}

    for record in records:
        series_id = _series_id(record.get(series_key)) if series_key else DEFAULT_SERIES
        x_value = record.get(x_key)
        y_value = parse_float_or_text(record.get(y_key))

        by_x = accumulators.setdefault(series_id, {})
        lookup = hashable_value(x_value)
        if lookup in by_x:
            by_x[lookup][1] = _accumulate(by_x[lookup][1], y_value)
        else:
            by_x[lookup] = [None if is_null(x_value) else x_value, y_value]

    dataset = {}
    for series_id, by_x in accumulators.items():
        ordered = sort_by(by_x.values(), key=lambda entry: entry[0])
        dataset[series_id] = [
            {x_key: x_value, y_key: parse_float_or_text(y_value)}
            for x_value, y_value in ordered
        ]
    return dataset


def reshape_dataset(records: Sequence[Mapping[str, Any]], x_key: str, y_key: str,
                    series_key: Optional[str] = None, sum_data: bool = False,
                    weights: ScoreWeights = DEFAULT_WEIGHTS) -> ProcessedDataset:
    """
    Build one X-ordered point sequence per series.

    Args:
        records: Raw dataset records
        x_key: Field used for the X axis
        y_key: Field used for the Y axis
        series_key: Optional field splitting the data into series
        sum_data: Sum numeric Y values sharing an X value within a series
        weights: Sampling parameters

    Returns:
        Mapping of series id to points `{x_key: x, y_key: y}`. Y is numeric
        where it parses, the original value otherwise. The input records are
        not modified.
    """
    series_key = series_key or None
    working = _convert_dates(records, x_key, weights)

    if sum_data:
        return _sum_points(working, x_key, y_key, series_key)
    return _group_points(working, x_key, y_key, series_key)
