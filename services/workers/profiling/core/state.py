from __future__ import annotations
from typing import Any, Callable, Dict, List, Mapping, MutableMapping, Optional, TypedDict

from .constants import PHASE_ORDER
from .types import ChartViews, Classification, ColumnSummary, DatasetProfile, RowSet

PhaseCallback = Callable[[str, Mapping[str, Any], int, int], None]


class ProfilingState(TypedDict, total=False):
    records: List[Mapping[str, Any]]
    dataset_name: Optional[str]
    on_phase: Optional[PhaseCallback]
    row_set: RowSet
    time_column: Optional[str]
    classification: Classification
    summaries: Dict[str, ColumnSummary]
    chart_views: ChartViews
    insight_items: List[Dict[str, Any]]
    report_text: str
    report_html: str
    dataset_profile: DatasetProfile
    phase_outputs: Dict[str, Dict[str, Any]]
    artifact_contents: Dict[str, Dict[str, Any]]


def _with_phase(state: MutableMapping[str, Any], phase: str, payload: Dict[str, Any], **extra: Any) -> Dict[str, Any]:
    phases = dict(state.get("phase_outputs", {}) or {})
    phases[phase] = payload
    update: Dict[str, Any] = {"phase_outputs": phases}
    update.update(extra)
    return update


def _emit_callback(state: Mapping[str, Any], phase: str, payload: Mapping[str, Any]) -> None:
    callback = state.get("on_phase")
    if not callable(callback):
        return
    index = PHASE_ORDER.index(phase)
    callback(phase, payload, index, len(PHASE_ORDER))
