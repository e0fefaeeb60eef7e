"""
Automatic axis selection.

Scores every field for X and Y suitability, picks two distinct fields and
optionally a low-cardinality field that splits the data into series.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from analysis.classifier import FieldAnalysis, analyze_field
from analysis.weights import DEFAULT_WEIGHTS, ScoreWeights
from core.dataset import Field, coerce_fields
from core.errors import InvalidInputError, UnresolvableAxisError


@dataclass(frozen=True)
class AxisSelection:
    """Chosen X, Y and series fields."""
    x_key: str
    y_key: str
    series_key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x_key": self.x_key,
            "y_key": self.y_key,
            "series_key": self.series_key,
        }


def _contains_any(name: str, keywords: Sequence[str]) -> bool:
    lowered = name.lower()
    return any(keyword in lowered for keyword in keywords)


def score_x(analysis: FieldAnalysis, weights: ScoreWeights = DEFAULT_WEIGHTS) -> float:
    """Score how well a field works as the horizontal axis."""
    record_count = max(analysis.sample_size, 1)
    unique_ratio = min(analysis.unique_count / record_count, 1.0)
    score = 0.0

    if analysis.is_time:
        score += weights.x_time_field

    score += weights.x_unique_ratio_max * unique_ratio

    if _contains_any(analysis.name, weights.x_year_date_keywords):
        score += weights.x_year_date_name
    if _contains_any(analysis.name, weights.x_time_period_keywords):
        score += weights.x_time_period_name
    if _contains_any(analysis.name, weights.x_month_day_keywords):
        score += weights.x_month_day_name

    if analysis.is_numeric and analysis.unique_count > record_count * weights.x_numeric_unique_ratio:
        score += weights.x_numeric_high_cardinality

    if analysis.is_value:
        score += weights.x_value_field_penalty

    if not analysis.is_numeric and analysis.unique_count > 1:
        score += weights.x_categorical_bonus

    return score


def score_y(analysis: FieldAnalysis, weights: ScoreWeights = DEFAULT_WEIGHTS) -> float:
    """Score how well a field works as the vertical axis."""
    record_count = max(analysis.sample_size, 1)
    score = 0.0

    if analysis.is_value:
        score += weights.y_value_field
    if analysis.is_numeric:
        score += weights.y_numeric

    score += analysis.numeric_ratio * weights.y_numeric_ratio_max

    if analysis.is_time:
        score += weights.y_time_field_penalty

    if 1 < analysis.unique_count < record_count * weights.y_moderate_unique_ratio:
        score += weights.y_moderate_cardinality
    if analysis.unique_count > record_count * weights.y_high_unique_ratio:
        score += weights.y_high_cardinality_penalty

    if _contains_any(analysis.name, weights.y_value_name_keywords):
        score += weights.y_value_name

    return score


def _best(candidates: List[FieldAnalysis], scorer, weights: ScoreWeights) -> FieldAnalysis:
    # max() keeps the first of equal scores, so earlier fields win ties
    return max(candidates, key=lambda analysis: scorer(analysis, weights))


def _validate_inputs(fields: Sequence[Any], records: Sequence[Mapping[str, Any]]) -> List[Field]:
    if not fields:
        raise InvalidInputError("fields must be a non-empty sequence")
    if not records:
        raise InvalidInputError("records must be a non-empty sequence")
    if not all(isinstance(record, Mapping) for record in records):
        raise InvalidInputError("every record must be a mapping of field id to value")
    return coerce_fields(fields)


def analyze_fields(fields: Sequence[Any], records: Sequence[Mapping[str, Any]],
                   weights: ScoreWeights = DEFAULT_WEIGHTS) -> List[FieldAnalysis]:
    """
    Analyze every field whose id is present in the first record.

    Raises:
        InvalidInputError: If fields or records are empty or malformed
    """
    field_list = _validate_inputs(fields, records)
    first_record = records[0]

    return [
        analyze_field(field.id, records, weights)
        for field in field_list
        if field.id in first_record
    ]


def _axis_candidates(analyses: List[FieldAnalysis], weights: ScoreWeights) -> List[FieldAnalysis]:
    """Drop record-identifier fields while at least two other fields remain."""
    usable = [a for a in analyses if a.name not in weights.identifier_fields]
    return usable if len(usable) >= 2 else analyses


def _select_y(candidates: List[FieldAnalysis], x: FieldAnalysis,
              weights: ScoreWeights) -> FieldAnalysis:
    others = [a for a in candidates if a.name != x.name]
    if not others:
        return x

    pool = others
    if x.is_time:
        pool = [a for a in others if not a.is_time]

    if pool:
        return _best(pool, score_y, weights)

    fallbacks = (
        [a for a in others if a.is_numeric and not a.is_time],
        [a for a in others if a.is_numeric],
        others,
    )
    for fallback in fallbacks:
        if fallback:
            return fallback[0]

    return x


def _select_series(analyses: List[FieldAnalysis], x_key: str, y_key: str,
                   weights: ScoreWeights) -> Optional[str]:
    if len(analyses) <= 2:
        return None

    excluded = {x_key, y_key, *weights.identifier_fields}
    candidates = []
    for analysis in analyses:
        if analysis.name in excluded:
            continue
        record_count = analysis.sample_size
        upper = min(weights.series_max_unique, record_count * weights.series_unique_ratio)
        unique_count = analysis.unique_count
        if 1 < unique_count < upper and unique_count < record_count * weights.series_max_unique_ratio:
            candidates.append(analysis)

    if not candidates:
        return None

    preferred = [
        a for a in candidates
        if weights.series_preferred_min <= a.unique_count <= weights.series_preferred_max
    ]
    if preferred:
        best = min(preferred, key=lambda a: abs(a.unique_count - weights.series_ideal_unique))
        return best.name

    return candidates[0].name


def compute_labels(fields: Sequence[Any], records: Sequence[Mapping[str, Any]],
                   weights: ScoreWeights = DEFAULT_WEIGHTS, x_key: Optional[str] = None,
                   y_key: Optional[str] = None) -> AxisSelection:
    """
    Choose X, Y and series fields for a dataset.

    Args:
        fields: Ordered field descriptions ({"id", "type"} dicts or Field)
        records: Dataset records keyed by field id
        weights: Score table
        x_key: X field fixed by the caller (chosen automatically if None)
        y_key: Y field fixed by the caller (chosen automatically if None)

    Returns:
        AxisSelection with distinct X and Y whenever two fields are usable

    Raises:
        InvalidInputError: If fields or records are empty or malformed, or
            no field appears in the first record, or both axes are fixed to
            the same field
    """
    analyses = analyze_fields(fields, records, weights)
    if not analyses:
        raise InvalidInputError("none of the fields appear in the first record")

    candidates = _axis_candidates(analyses, weights)

    by_name = {analysis.name: analysis for analysis in analyses}

    def fixed(key: str) -> FieldAnalysis:
        return by_name.get(key) or analyze_field(key, records, weights)

    if x_key is not None:
        x = fixed(x_key)
    else:
        pool = [a for a in candidates if a.name != y_key] or candidates
        x = _best(pool, score_x, weights)

    if y_key is not None:
        y = fixed(y_key)
    else:
        y = _select_y(candidates, x, weights)

    if len(candidates) >= 2 and x.name == y.name:
        if x_key is not None and y_key is not None:
            raise InvalidInputError(f"X and Y cannot both be '{x.name}'")
        raise UnresolvableAxisError(f"X and Y both resolved to '{x.name}'")

    series_key = _select_series(analyses, x.name, y.name, weights)

    return AxisSelection(x_key=x.name, y_key=y.name, series_key=series_key)
