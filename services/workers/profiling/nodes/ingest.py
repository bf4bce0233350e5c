from __future__ import annotations
import logging
from typing import Any, Dict, MutableMapping, Optional, Sequence

from ..core.constants import _TIME_COLUMN_CANDIDATES
from ..core.state import _with_phase, _emit_callback
from ..core.types import RowSet

logger = logging.getLogger(__name__)


def detect_time_column(column_names: Sequence[str]) -> Optional[str]:
    present = set(column_names)
    for candidate in _TIME_COLUMN_CANDIDATES:
        if candidate in present:
            return candidate
    return None


def ingest_node(state: MutableMapping[str, Any]) -> Dict[str, Any]:
    records = state.get("records") or []
    row_set = RowSet.from_records(records)
    time_column = detect_time_column(row_set.column_names)

    logger.debug(
        "ingested rows",
        extra={"rows": row_set.row_count, "columns": row_set.column_count},
    )

    payload = {
        "rows": row_set.row_count,
        "columns": list(row_set.column_names),
        "timeColumn": time_column,
    }
    update = _with_phase(state, "ingest", payload, row_set=row_set, time_column=time_column, records=[])
    _emit_callback(state, "ingest", payload)
    return update
