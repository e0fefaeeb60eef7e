"""
Chart configuration engine.
Runs axis selection, chart-type and aggregation policies, reshaping and
domain calculation for one dataset snapshot.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from analysis.axis_selector import AxisSelection, analyze_fields, compute_labels, score_x, score_y
from analysis.domain import Domain, calculate_domain
from analysis.policies import should_sum_data, should_use_bar_chart
from analysis.weights import DEFAULT_WEIGHTS, ScoreWeights
from core.dataset import DatasetSnapshot
from core.errors import InvalidInputError
from execution.reshaper import ProcessedDataset, reshape_dataset


@dataclass
class ChartConfiguration:
    """Everything the renderer needs to draw one chart."""
    x_key: str
    y_key: str
    series_key: Optional[str]
    use_bar_chart: bool
    sum_data: bool
    dataset: ProcessedDataset = field(default_factory=dict)
    domain: Domain = field(default_factory=Domain)

    @property
    def chart_type(self) -> str:
        return "bar" if self.use_bar_chart else "line"

    @property
    def series_names(self) -> List[str]:
        return list(self.dataset.keys())


class ChartEngine:
    """
    Builds chart configurations. Stateless between calls: every call works
    only on the snapshot it is given.
    """

    def __init__(self, weights: ScoreWeights = DEFAULT_WEIGHTS):
        self.weights = weights

    def select_axes(self, snapshot: DatasetSnapshot) -> AxisSelection:
        """Automatic X/Y/series choice for a snapshot."""
        snapshot.validate_for_chart()
        return compute_labels(snapshot.fields, snapshot.records, self.weights)

    def configure(self, snapshot: DatasetSnapshot, x_key: Optional[str] = None,
                  y_key: Optional[str] = None, series_key: Optional[str] = None,
                  sum_data: Optional[bool] = None,
                  use_bar_chart: Optional[bool] = None) -> ChartConfiguration:
        """
        Build a chart configuration, honouring any user overrides.

        Args:
            snapshot: Dataset fields and records
            x_key: X field chosen by the user (auto if None)
            y_key: Y field chosen by the user (auto if None)
            series_key: Series field chosen by the user. Auto if None, no
                series if an empty string
            sum_data: Force aggregation on or off (auto if None)
            use_bar_chart: Force bar or line (auto if None)

        Returns:
            ChartConfiguration

        Raises:
            InvalidInputError: For empty snapshots, unknown field overrides or
                X and Y fixed to the same field
        """
        snapshot.validate_for_chart()
        self._check_overrides(snapshot, x_key, y_key, series_key)
        x_key = x_key or None
        y_key = y_key or None
        if x_key is not None and x_key == y_key and len(snapshot.fields) >= 2:
            raise InvalidInputError(f"X and Y cannot both be '{x_key}'")

        if x_key is None or y_key is None or series_key is None:
            selection = compute_labels(snapshot.fields, snapshot.records, self.weights,
                                       x_key=x_key, y_key=y_key)
            x_key = selection.x_key if x_key is None else x_key
            y_key = selection.y_key if y_key is None else y_key
            series_key = selection.series_key if series_key is None else series_key

        series_key = series_key or None
        if series_key in (x_key, y_key):
            series_key = None

        if sum_data is None:
            sum_data = should_sum_data(snapshot.records, x_key, y_key)
        if use_bar_chart is None:
            use_bar_chart = should_use_bar_chart(snapshot.records, x_key, snapshot.fields, self.weights)

        dataset = reshape_dataset(snapshot.records, x_key, y_key, series_key, sum_data, self.weights)
        domain = calculate_domain(dataset, x_key, y_key, self.weights)

        return ChartConfiguration(
            x_key=x_key,
            y_key=y_key,
            series_key=series_key,
            use_bar_chart=bool(use_bar_chart),
            sum_data=bool(sum_data),
            dataset=dataset,
            domain=domain,
        )

    @staticmethod
    def _check_overrides(snapshot: DatasetSnapshot, *keys: Optional[str]):
        known = set(snapshot.field_ids)
        unknown = [key for key in keys if key and key not in known]
        if unknown:
            raise InvalidInputError(f"Unknown field(s): {', '.join(unknown)}")

    def describe_fields(self, snapshot: DatasetSnapshot) -> Dict[str, Any]:
        """Per-field classification, for display next to the axis menus."""
        snapshot.validate_for_chart()
        analyses = analyze_fields(snapshot.fields, snapshot.records, self.weights)
        return {
            analysis.name: {
                **analysis.to_dict(),
                "x_score": round(score_x(analysis, self.weights), 2),
                "y_score": round(score_y(analysis, self.weights), 2),
            }
            for analysis in analyses
        }
