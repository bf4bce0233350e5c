from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, MutableMapping, Optional

from ..core.constants import (
    _MAX_BAR_ENTRIES,
    _MAX_LINE_POINTS,
    _MAX_PIE_SLICES,
    _MAX_SCATTER_POINTS,
    _ROW_LABEL_PREFIX,
)
from ..core.state import _with_phase, _emit_callback
from ..core.types import (
    BarEntry,
    BarSeries,
    ChartViews,
    Classification,
    ColumnKind,
    CumulativePoint,
    CumulativeSeries,
    LinePoint,
    LineSeries,
    PieSlice,
    PieSlices,
    RowSet,
    ScatterPoint,
    ScatterSeries,
)
from .classify import columns_of_kind

logger = logging.getLogger(__name__)


@dataclass
class _GroupTotals:
    total: float = 0.0
    count: int = 0


def _first_of_kind(classification: Classification, kind: ColumnKind) -> Optional[str]:
    names = columns_of_kind(classification, kind)
    return names[0] if names else None


def build_bar(row_set: RowSet, classification: Classification) -> BarSeries:
    value_column = _first_of_kind(classification, ColumnKind.NUMERIC)
    if value_column is None:
        return ()

    group_column = _first_of_kind(classification, ColumnKind.CATEGORICAL)
    if group_column is None:
        return tuple(
            BarEntry(
                label=f"{_ROW_LABEL_PREFIX}{index + 1}",
                value=row_set.value(row, value_column).numeric_or_zero(),
            )
            for index, row in enumerate(row_set.head(_MAX_BAR_ENTRIES))
        )

    # dicts keep insertion order, which is the first-seen group order
    groups: Dict[str, _GroupTotals] = {}
    for row in row_set.rows:
        label = row_set.value(row, group_column).group_label()
        totals = groups.get(label)
        if totals is None:
            totals = groups[label] = _GroupTotals()
        totals.total += row_set.value(row, value_column).numeric_or_zero()
        totals.count += 1

    entries: List[BarEntry] = []
    for label, totals in groups.items():
        if len(entries) >= _MAX_BAR_ENTRIES:
            break
        entries.append(BarEntry(label=label, value=totals.total / totals.count))
    return tuple(entries)


def build_pie(row_set: RowSet, classification: Classification) -> PieSlices:
    category_column = _first_of_kind(classification, ColumnKind.CATEGORICAL)
    if category_column is None:
        return ()

    counts: Dict[str, int] = {}
    for value in row_set.column_values(category_column):
        label = value.group_label()
        counts[label] = counts.get(label, 0) + 1

    # sorted() is stable, so equal counts keep first-seen order
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return tuple(PieSlice(label=label, count=count) for label, count in ranked[:_MAX_PIE_SLICES])


def build_line(row_set: RowSet, classification: Classification) -> LineSeries:
    numeric_columns = columns_of_kind(classification, ColumnKind.NUMERIC)
    if len(numeric_columns) < 2:
        return ()

    series_a, series_b = numeric_columns[0], numeric_columns[1]
    return tuple(
        LinePoint(
            index=index + 1,
            series_a_value=row_set.value(row, series_a).numeric_or_zero(),
            series_b_value=row_set.value(row, series_b).numeric_or_zero(),
        )
        for index, row in enumerate(row_set.head(_MAX_LINE_POINTS))
    )


def build_scatter(row_set: RowSet, classification: Classification) -> ScatterSeries:
    """x/y pairs of the first two numeric columns, skipping rows where either side is not a number."""
    numeric_columns = columns_of_kind(classification, ColumnKind.NUMERIC)
    if len(numeric_columns) < 2:
        return ()

    x_column, y_column = numeric_columns[0], numeric_columns[1]
    points: List[ScatterPoint] = []
    for row in row_set.rows:
        if len(points) >= _MAX_SCATTER_POINTS:
            break
        x = row_set.value(row, x_column).number
        y = row_set.value(row, y_column).number
        if x is None or y is None:
            continue
        points.append(ScatterPoint(x=x, y=y))
    return tuple(points)


def build_cumulative(line: LineSeries) -> CumulativeSeries:
    """Running total of the first line series."""
    running = 0.0
    points: List[CumulativePoint] = []
    for point in line:
        running += point.series_a_value
        points.append(CumulativePoint(index=point.index, value=point.series_a_value, cumulative=running))
    return tuple(points)


def build_chart_views(row_set: RowSet, classification: Classification) -> ChartViews:
    numeric_columns = columns_of_kind(classification, ColumnKind.NUMERIC)
    categorical_columns = columns_of_kind(classification, ColumnKind.CATEGORICAL)
    bar = build_bar(row_set, classification)
    pie = build_pie(row_set, classification)
    line = build_line(row_set, classification)
    scatter = build_scatter(row_set, classification)
    cumulative = build_cumulative(line)
    return ChartViews(
        bar=bar,
        pie=pie,
        line=line,
        scatter=scatter,
        cumulative=cumulative,
        bar_value_column=numeric_columns[0] if bar else None,
        bar_group_column=categorical_columns[0] if bar and categorical_columns else None,
        pie_column=categorical_columns[0] if pie else None,
        line_columns=tuple(numeric_columns[:2]) if line else (),
        scatter_columns=tuple(numeric_columns[:2]) if scatter else (),
        cumulative_column=numeric_columns[0] if cumulative else None,
    )


def charts_node(state: MutableMapping[str, Any]) -> Dict[str, Any]:
    row_set: RowSet = state["row_set"]
    classification: Classification = state["classification"]
    chart_views = build_chart_views(row_set, classification)

    logger.debug(
        "built chart views",
        extra={
            "bar": len(chart_views.bar),
            "pie": len(chart_views.pie),
            "line": len(chart_views.line),
            "scatter": len(chart_views.scatter),
        },
    )

    payload = chart_views.to_dict()
    artifact_contents = dict(state.get("artifact_contents", {}) or {})
    artifact_contents["results/charts.json"] = {
        "kind": "json",
        "data": payload,
        "description": "Aggregated bar, pie, line, scatter and cumulative chart series.",
        "contentType": "application/json",
    }

    update = _with_phase(
        state,
        "charts",
        payload,
        chart_views=chart_views,
        artifact_contents=artifact_contents,
    )
    _emit_callback(state, "charts", payload)
    return update
