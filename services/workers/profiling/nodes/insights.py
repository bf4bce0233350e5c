from __future__ import annotations
import html
import logging
import math
from typing import Any, Dict, List, MutableMapping, Optional, Sequence, Tuple

from ..core.constants import (
    _HIGH_VARIABILITY_CV,
    _MIN_CORRELATION_PAIRS,
    _REPORT_HTML_TEMPLATE_NAME,
)
from ..core.state import _with_phase, _emit_callback
from ..core.types import (
    CategoricalSummary,
    ChartViews,
    DatasetProfile,
    NumericSummary,
    RowSet,
)
from ..core.utils import _format_number, _render_template, _round

logger = logging.getLogger(__name__)


def pearson_correlation(row_set: RowSet, left: str, right: str) -> Optional[Tuple[float, int]]:
    """Pearson r over rows where both columns hold numbers, with the pair count."""
    pairs: List[Tuple[float, float]] = []
    for row in row_set.rows:
        x = row_set.value(row, left).number
        y = row_set.value(row, right).number
        if x is None or y is None:
            continue
        pairs.append((x, y))

    count = len(pairs)
    if count < _MIN_CORRELATION_PAIRS:
        return None
    # centre on the means first; raw sums of squares cancel out on large offsets
    mean_x = math.fsum(x for x, _ in pairs) / count
    mean_y = math.fsum(y for _, y in pairs) / count
    covariance = math.fsum((x - mean_x) * (y - mean_y) for x, y in pairs)
    spread_x = math.fsum((x - mean_x) ** 2 for x, _ in pairs)
    spread_y = math.fsum((y - mean_y) ** 2 for _, y in pairs)
    if spread_x <= 0 or spread_y <= 0:
        return None
    correlation = covariance / math.sqrt(spread_x * spread_y)
    return max(-1.0, min(1.0, correlation)), count


def _strength(correlation: float) -> str:
    magnitude = abs(correlation)
    if magnitude >= 0.7:
        return "strong"
    if magnitude >= 0.4:
        return "moderate"
    return "weak"


def _overview_insight(profile: DatasetProfile) -> Dict[str, Any]:
    time_text = (
        f"Time-series data detected ({profile.time_column})."
        if profile.time_column
        else "No time column detected."
    )
    return {
        "title": "Dataset Overview",
        "type": "summary",
        "description": (
            f"Loaded {profile.row_count:,} records with {len(profile.numeric_column_names)} numeric "
            f"and {len(profile.categorical_column_names)} categorical columns. {time_text}"
        ),
    }


def _numeric_insight(profile: DatasetProfile) -> Optional[Dict[str, Any]]:
    for name in profile.numeric_column_names:
        summary = profile.summary(name)
        if not isinstance(summary, NumericSummary) or summary.valid_count == 0:
            continue
        parts = [
            f"Mean: {_format_number(summary.mean)}, "
            f"Range: {_format_number(summary.minimum)} - {_format_number(summary.maximum)}."
        ]
        cv: Optional[float] = None
        if summary.mean and summary.std_dev is not None:
            cv = summary.std_dev / abs(summary.mean) * 100
            label = "High variability detected" if cv > _HIGH_VARIABILITY_CV else "Low variability"
            parts.append(f"{label} (CV: {cv:.1f}%).")
        parts.append(f"Standard deviation: {_format_number(summary.std_dev)}.")
        return {
            "title": f"{name} Analysis",
            "type": "trend",
            "column": name,
            "description": " ".join(parts),
            "coefficientOfVariation": _round(cv),
        }
    return None


def _distribution_insight(profile: DatasetProfile, charts: ChartViews) -> Optional[Dict[str, Any]]:
    if not charts.pie or charts.pie_column is None or not profile.row_count:
        return None
    summary = profile.summary(charts.pie_column)
    unique = summary.unique_count if isinstance(summary, CategoricalSummary) else len(charts.pie)
    dominant = charts.pie[0]
    share = dominant.count / profile.row_count * 100
    return {
        "title": "Distribution Pattern",
        "type": "distribution",
        "column": charts.pie_column,
        "description": (
            f"{charts.pie_column} has {unique} unique categories. "
            f'"{dominant.label}" is most frequent ({share:.1f}% of records).'
        ),
    }


def _correlation_insight(profile: DatasetProfile, row_set: RowSet) -> Optional[Dict[str, Any]]:
    numeric_columns = profile.numeric_column_names
    if len(numeric_columns) < 2:
        return None
    left, right = numeric_columns[0], numeric_columns[1]
    description = (
        f"{len(numeric_columns)} numeric variables available for correlation analysis."
    )
    insight: Dict[str, Any] = {
        "title": "Correlation Analysis",
        "type": "correlation",
        "columns": [left, right],
    }
    measured = pearson_correlation(row_set, left, right)
    if measured is not None:
        correlation, pairs = measured
        direction = "positive" if correlation >= 0 else "negative"
        description += (
            f" {left} and {right} show a {_strength(correlation)} {direction} "
            f"correlation (r={correlation:.2f}) across {pairs:,} paired records."
        )
        insight["correlation"] = _round(correlation, 4)
    insight["description"] = description
    return insight


def generate_insights(profile: DatasetProfile, charts: ChartViews, row_set: RowSet) -> List[Dict[str, Any]]:
    insights = [_overview_insight(profile)]
    for candidate in (
        _numeric_insight(profile),
        _distribution_insight(profile, charts),
        _correlation_insight(profile, row_set),
    ):
        if candidate is not None:
            insights.append(candidate)
    return insights


def _statistics_table(profile: DatasetProfile) -> Sequence[Dict[str, Any]]:
    table = []
    for name in profile.column_names:
        summary = profile.summary(name)
        if isinstance(summary, NumericSummary):
            table.append(
                {
                    "column": name,
                    "kind": summary.kind.value,
                    "count": summary.valid_count,
                    "minimum": _format_number(summary.minimum),
                    "maximum": _format_number(summary.maximum),
                    "mean": _format_number(summary.mean),
                    "median": _format_number(summary.median),
                    "stdDev": _format_number(summary.std_dev),
                }
            )
        else:
            table.append(
                {
                    "column": name,
                    "kind": summary.kind.value,
                    "count": summary.total_count,
                    "unique": summary.unique_count,
                }
            )
    return table


def insights_node(state: MutableMapping[str, Any]) -> Dict[str, Any]:
    """
    Derive narrative insights from the assembled profile and chart views and
    render them as plain text and an HTML report.
    """
    profile: DatasetProfile = state["dataset_profile"]
    charts: ChartViews = state["chart_views"]
    row_set: RowSet = state["row_set"]

    insights = generate_insights(profile, charts, row_set)
    summary_text = " ".join(item["description"] for item in insights)

    html_context = {
        "dataset_name": state.get("dataset_name") or "Uploaded dataset",
        "summary_text": summary_text,
        "insights": insights,
        "profile": profile.to_dict(),
        "statistics": _statistics_table(profile),
        "charts": charts.to_dict(),
    }

    escaped_summary = html.escape(summary_text)
    html_report = f"<html><body><p>{escaped_summary}</p></body></html>"
    try:
        html_report = _render_template(_REPORT_HTML_TEMPLATE_NAME, html_context)
    except Exception as exc:
        logger.exception("failed to render HTML insights report: %s", exc)

    payload = {
        "summary": summary_text,
        "insights": insights,
        "reportArtifacts": {
            "text": "results/report.txt",
            "html": "results/report.html",
        },
    }

    artifact_contents = dict(state.get("artifact_contents", {}) or {})
    artifact_contents["results/report.txt"] = {
        "kind": "text",
        "text": summary_text,
        "description": "Natural language narrative summarizing the dataset.",
        "contentType": "text/plain",
    }
    artifact_contents["results/report.html"] = {
        "kind": "html",
        "html": html_report,
        "description": "Formatted HTML report with statistics and insights.",
        "contentType": "text/html",
    }

    update = _with_phase(
        state,
        "insights",
        payload,
        insight_items=insights,
        report_text=summary_text,
        report_html=html_report,
        artifact_contents=artifact_contents,
    )
    _emit_callback(state, "insights", payload)
    return update
