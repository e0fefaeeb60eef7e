"""
Chart configuration formatter.
Formats engine results into the payload consumed by the chart renderer.
"""
from typing import Any, Dict, List, Optional

from core.dataset import convert_to_json_serializable
from execution.engine import ChartConfiguration


class ChartFormatter:
    """Formats chart configurations for UI charting libraries."""

    def __init__(self, max_points_per_series: Optional[int] = None):
        """
        Args:
            max_points_per_series: Truncate each series to this many points
                (no limit if None)
        """
        self.max_points_per_series = max_points_per_series

    def format(self, configuration: ChartConfiguration) -> Dict[str, Any]:
        """
        Format a chart configuration.

        Returns:
            Renderer payload: keys, chart type flags, per-series points and
            axis domain, all JSON-safe
        """
        dataset = {
            series_id: self._format_points(points)
            for series_id, points in configuration.dataset.items()
        }

        return {
            "type": configuration.chart_type,
            "title": f"{configuration.y_key} by {configuration.x_key}",
            "xKey": configuration.x_key,
            "yKey": configuration.y_key,
            "seriesKey": configuration.series_key,
            "useBarChart": configuration.use_bar_chart,
            "sumData": configuration.sum_data,
            "dataset": dataset,
            "domain": convert_to_json_serializable(configuration.domain.to_dict()),
            "series_count": len(dataset),
        }

    def _format_points(self, points: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if self.max_points_per_series is not None:
            points = points[:self.max_points_per_series]
        return [convert_to_json_serializable(point) for point in points]
