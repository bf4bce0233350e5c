from __future__ import annotations
from typing import Any, Dict, List, Mapping, MutableMapping

from ..core.constants import PHASE_ORDER
from ..core.state import _with_phase, _emit_callback
from ..core.types import DatasetProfile


def _manifest_entries_for_artifacts(artifact_contents: Mapping[str, Mapping[str, Any]]) -> List[Dict[str, Any]]:
    entries: List[Dict[str, Any]] = []
    for relative_key in sorted(artifact_contents):
        spec = artifact_contents[relative_key]
        entries.append(
            {
                "name": relative_key.rsplit("/", 1)[-1].replace(".", "_"),
                "description": spec.get("description") or "Generated artifact.",
                "contentType": spec.get("contentType") or "application/octet-stream",
                "key": relative_key,
            }
        )
    return entries


def finalize_node(state: MutableMapping[str, Any]) -> Dict[str, Any]:
    profile: DatasetProfile = state["dataset_profile"]
    phases: Dict[str, Dict[str, Any]] = state.get("phase_outputs", {}) or {}

    artifact_contents = dict(state.get("artifact_contents", {}) or {})
    artifact_contents["results/profile.json"] = {
        "kind": "json",
        "data": profile.to_dict(),
        "description": "Dataset profile with per-column summaries.",
        "contentType": "application/json",
    }

    metrics = {
        "rows": profile.row_count,
        "columns": profile.column_count,
        "numericColumns": len(profile.numeric_column_names),
        "categoricalColumns": len(profile.categorical_column_names),
        "timeColumn": profile.time_column,
    }

    manifest = {
        "phases": [phase for phase in PHASE_ORDER if phase in phases or phase == "finalize"],
        "artifacts": _manifest_entries_for_artifacts(artifact_contents),
    }

    payload = {"metrics": metrics, "manifest": manifest}
    update = _with_phase(state, "finalize", payload, artifact_contents=artifact_contents)
    _emit_callback(state, "finalize", payload)
    return update
