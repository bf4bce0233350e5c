"""LangGraph profiling pipeline for DatasetLens."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from langgraph.graph import END, StateGraph

from .core.constants import PHASE_ORDER
from .core.state import PhaseCallback, ProfilingState
from .core.types import ChartViews, DatasetProfile, ProfilingResult
from .nodes import (
    ingest_node, classify_node, statistics_node, profile_node,
    charts_node, insights_node, finalize_node,
)

logger = logging.getLogger(__name__)

_NODES = {
    "ingest": ingest_node,
    "classify": classify_node,
    "statistics": statistics_node,
    "profile": profile_node,
    "charts": charts_node,
    "insights": insights_node,
    "finalize": finalize_node,
}


def build_graph():
    g = StateGraph(ProfilingState)
    for phase in PHASE_ORDER:
        g.add_node(phase, _NODES[phase])

    g.set_entry_point(PHASE_ORDER[0])
    for current, following in zip(PHASE_ORDER, PHASE_ORDER[1:]):
        g.add_edge(current, following)
    g.add_edge(PHASE_ORDER[-1], END)
    return g.compile()


def run_pipeline(
    records: Iterable[Mapping[str, Any]],
    *,
    dataset_name: Optional[str] = None,
    on_phase: Optional[PhaseCallback] = None,
) -> ProfilingResult:
    """Profile decoded rows and derive chart views and insights.

    Raises ``MalformedInputError`` when a row's keys differ from the first
    row's; every other condition produces a defined, possibly empty, result.
    """
    initial_state: Dict[str, Any] = {
        "records": list(records),
        "dataset_name": dataset_name,
        "on_phase": on_phase,
        "phase_outputs": {},
        "artifact_contents": {},
    }

    # compiled per call: nothing is shared between profiling runs
    app = build_graph()
    final_state = app.invoke(initial_state)

    phases = final_state.get("phase_outputs", {}) or {}
    logger.info(
        "profiling completed",
        extra={"dataset_name": dataset_name, "phases": list(phases)},
    )

    return ProfilingResult(
        profile=final_state.get("dataset_profile") or DatasetProfile.empty(),
        charts=final_state.get("chart_views") or ChartViews(),
        insights=list(final_state.get("insight_items", []) or []),
        report_text=final_state.get("report_text", "") or "",
        report_html=final_state.get("report_html", "") or "",
        phases=phases,
        artifact_contents=final_state.get("artifact_contents", {}) or {},
    )


def profile(records: Iterable[Mapping[str, Any]]) -> ProfilingResult:
    return run_pipeline(records)
