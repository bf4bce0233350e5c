from __future__ import annotations
from types import MappingProxyType
from typing import Any, Dict, Mapping, MutableMapping, Optional

from ..core.state import _with_phase, _emit_callback
from ..core.types import Classification, ColumnKind, ColumnSummary, DatasetProfile, RowSet
from .classify import columns_of_kind


def assemble_profile(
    row_set: RowSet,
    classification: Classification,
    summaries: Mapping[str, ColumnSummary],
    time_column: Optional[str] = None,
) -> DatasetProfile:
    if row_set.row_count == 0:
        return DatasetProfile.empty()
    return DatasetProfile(
        row_count=row_set.row_count,
        column_count=row_set.column_count,
        column_names=row_set.column_names,
        numeric_column_names=tuple(columns_of_kind(classification, ColumnKind.NUMERIC)),
        categorical_column_names=tuple(columns_of_kind(classification, ColumnKind.CATEGORICAL)),
        summaries=MappingProxyType(dict(summaries)),
        time_column=time_column,
    )


def profile_node(state: MutableMapping[str, Any]) -> Dict[str, Any]:
    dataset_profile = assemble_profile(
        state["row_set"],
        state["classification"],
        state.get("summaries", {}) or {},
        state.get("time_column"),
    )
    payload = dataset_profile.to_dict()
    update = _with_phase(state, "profile", payload, dataset_profile=dataset_profile)
    _emit_callback(state, "profile", payload)
    return update
