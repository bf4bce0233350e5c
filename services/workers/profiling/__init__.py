"""Dataset profiling and chart-aggregation engine."""
from .core.errors import MalformedInputError
from .core.types import (
    BarEntry,
    CategoricalSummary,
    ChartViews,
    ColumnKind,
    CumulativePoint,
    DatasetProfile,
    LinePoint,
    NumericSummary,
    PieSlice,
    ProfilingResult,
    RowSet,
    ScatterPoint,
)
from .core.values import FieldValue, parse_numeric
from .graph import build_graph, profile, run_pipeline
from .nodes.charts import (
    build_bar,
    build_chart_views,
    build_cumulative,
    build_line,
    build_pie,
    build_scatter,
)
from .nodes.classify import classify
from .nodes.insights import generate_insights
from .nodes.profile import assemble_profile
from .nodes.statistics import naive_median, summarize

__all__ = [
    "BarEntry",
    "CategoricalSummary",
    "ChartViews",
    "ColumnKind",
    "CumulativePoint",
    "DatasetProfile",
    "FieldValue",
    "LinePoint",
    "MalformedInputError",
    "NumericSummary",
    "PieSlice",
    "ProfilingResult",
    "RowSet",
    "ScatterPoint",
    "assemble_profile",
    "build_bar",
    "build_chart_views",
    "build_cumulative",
    "build_graph",
    "build_line",
    "build_pie",
    "build_scatter",
    "classify",
    "generate_insights",
    "naive_median",
    "parse_numeric",
    "profile",
    "run_pipeline",
    "summarize",
]
