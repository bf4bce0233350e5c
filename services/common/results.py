"""Helpers for turning DatasetLens profiling runs into transportable payloads."""
from __future__ import annotations

import csv
import io
import json
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any, Dict, Iterable, Mapping, Optional, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - import only for static typing
    from services.workers.profiling.core.types import ProfilingResult
else:  # pragma: no cover - at runtime we treat ProfilingResult as ``Any``
    ProfilingResult = Any  # type: ignore[misc,assignment]


ANALYSIS_VERSION = "2025.01"


_KIND_CONTENT_TYPES = {
    "json": "application/json",
    "text": "text/plain",
    "csv": "text/csv",
    "html": "text/html",
}
_SUFFIX_CONTENT_TYPES = {
    ".json": "application/json",
    ".csv": "text/csv",
    ".html": "text/html",
    ".txt": "text/plain",
}


def _csv_bytes(headers: Iterable[str], rows: Iterable[Mapping[str, Any]]) -> bytes:
    output = io.StringIO()
    fieldnames = list(headers)
    writer = csv.DictWriter(output, fieldnames=fieldnames, extrasaction="ignore", restval="")
    writer.writeheader()
    writer.writerows(rows)
    return output.getvalue().encode("utf-8")


def artifact_bytes(spec: Mapping[str, Any]) -> bytes:
    """Serialize an in-memory artifact built by one of the profiling nodes."""
    kind = spec.get("kind")
    if kind == "json":
        return json.dumps(spec.get("data"), indent=2, default=str).encode("utf-8")
    if kind == "csv":
        return _csv_bytes(spec.get("headers", []), spec.get("rows", []))
    if kind == "text":
        return spec.get("text", "").encode("utf-8")
    if kind == "html":
        return spec.get("html", "").encode("utf-8")
    raise ValueError(f"Unsupported artifact kind: {kind}")


def artifact_content_type(relative_key: str, spec: Mapping[str, Any]) -> str:
    declared = spec.get("contentType")
    if declared:
        return declared
    kind = spec.get("kind")
    if kind in _KIND_CONTENT_TYPES:
        return _KIND_CONTENT_TYPES[kind]
    suffix = PurePosixPath(relative_key).suffix
    return _SUFFIX_CONTENT_TYPES.get(suffix, "application/octet-stream")


def summarize_phase_payload(phase: str, payload: Mapping[str, Any]) -> Mapping[str, Any]:
    """Condense a phase payload for status displays."""
    if phase == "ingest":
        return {"rows": payload.get("rows"), "columns": len(payload.get("columns") or [])}
    if phase == "insights":
        return {"summary": payload.get("summary")}
    metrics = payload.get("metrics")
    if isinstance(metrics, Mapping):
        return {"metrics": dict(metrics)}
    keys = list(payload.keys())[:5]
    return {"fields": keys}


def build_results_payload(
    result: "ProfilingResult",
    *,
    dataset_name: Optional[str] = None,
    analysis_version: str = ANALYSIS_VERSION,
    include_phases: bool = False,
) -> Dict[str, Any]:
    profile = result.profile
    summary = {
        "rows": profile.row_count,
        "columns": profile.column_count,
        "numericColumns": len(profile.numeric_column_names),
        "categoricalColumns": len(profile.categorical_column_names),
        "timeColumn": profile.time_column,
    }
    summary = {key: value for key, value in summary.items() if value is not None}

    payload: Dict[str, Any] = {
        "analysisVersion": analysis_version,
        "generatedAt": datetime.now(timezone.utc).isoformat(),
        "datasetName": dataset_name,
        "summary": summary,
        "profile": profile.to_dict(),
        "charts": result.charts.to_dict(),
        "insights": [dict(item) for item in result.insights],
        "narrative": result.report_text,
    }
    if include_phases:
        payload["phases"] = {
            phase: summarize_phase_payload(phase, phase_payload)
            for phase, phase_payload in result.phases.items()
        }
    return payload


__all__ = [
    "ANALYSIS_VERSION",
    "artifact_bytes",
    "artifact_content_type",
    "build_results_payload",
    "summarize_phase_payload",
]
