from __future__ import annotations
import logging
import math
from typing import Any, Dict, List, MutableMapping, Sequence

from ..core.state import _with_phase, _emit_callback
from ..core.types import (
    CategoricalSummary,
    Classification,
    ColumnKind,
    ColumnSummary,
    NumericSummary,
    RowSet,
)
from ..core.utils import _statistics_rows

logger = logging.getLogger(__name__)

_STATISTICS_HEADERS = [
    "column",
    "kind",
    "validCount",
    "minimum",
    "maximum",
    "mean",
    "median",
    "stdDev",
    "range",
    "totalCount",
    "uniqueCount",
]


def naive_median(values: Sequence[float]) -> float:
    """Upper-middle element of the sorted values.

    Even-length inputs are not averaged: ``[1, 2, 3, 4]`` yields ``3``.
    """
    ordered = sorted(values)
    return ordered[len(ordered) // 2]


def _population_stddev(values: Sequence[float], mean: float) -> float:
    variance = sum((value - mean) ** 2 for value in values) / len(values)
    return math.sqrt(variance)


def summarize_numeric(row_set: RowSet, name: str) -> NumericSummary:
    numbers: List[float] = [
        value.number for value in row_set.present_values(name) if value.number is not None
    ]
    if not numbers:
        return NumericSummary(minimum=None, maximum=None, mean=None, median=None, valid_count=0)

    minimum = min(numbers)
    maximum = max(numbers)
    mean = sum(numbers) / len(numbers)
    return NumericSummary(
        minimum=minimum,
        maximum=maximum,
        mean=mean,
        median=naive_median(numbers),
        valid_count=len(numbers),
        std_dev=_population_stddev(numbers, mean),
        value_range=maximum - minimum,
    )


def summarize_categorical(row_set: RowSet, name: str) -> CategoricalSummary:
    present = row_set.present_values(name)
    distinct = {value.text for value in present}
    return CategoricalSummary(total_count=len(present), unique_count=len(distinct))


def summarize(row_set: RowSet, classification: Classification) -> Dict[str, ColumnSummary]:
    summaries: Dict[str, ColumnSummary] = {}
    for name, kind in classification.items():
        if kind is ColumnKind.NUMERIC:
            summaries[name] = summarize_numeric(row_set, name)
        else:
            summaries[name] = summarize_categorical(row_set, name)
    return summaries


def statistics_node(state: MutableMapping[str, Any]) -> Dict[str, Any]:
    row_set: RowSet = state["row_set"]
    classification: Classification = state["classification"]
    summaries = summarize(row_set, classification)

    numeric_count = sum(1 for summary in summaries.values() if summary.kind is ColumnKind.NUMERIC)
    logger.debug("summarized columns", extra={"columns": len(summaries), "numeric": numeric_count})
    payload = {
        "numericColumns": numeric_count,
        "categoricalColumns": len(summaries) - numeric_count,
        "summaries": {name: summary.to_dict() for name, summary in summaries.items()},
    }

    artifact_contents = dict(state.get("artifact_contents", {}) or {})
    if summaries:
        artifact_contents["results/statistics.csv"] = {
            "kind": "csv",
            "headers": list(_STATISTICS_HEADERS),
            "rows": _statistics_rows(summaries, list(row_set.column_names)),
            "description": "Per-column descriptive statistics.",
            "contentType": "text/csv",
        }

    update = _with_phase(
        state,
        "statistics",
        payload,
        summaries=summaries,
        artifact_contents=artifact_contents,
    )
    _emit_callback(state, "statistics", payload)
    return update
