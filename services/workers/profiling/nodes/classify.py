from __future__ import annotations
import logging
from typing import Any, Dict, List, MutableMapping

from ..core.constants import _MAJORITY_RATIO
from ..core.state import _with_phase, _emit_callback
from ..core.types import Classification, ColumnKind, RowSet

logger = logging.getLogger(__name__)


def classify_column(row_set: RowSet, name: str) -> ColumnKind:
    present = row_set.present_values(name)
    if not present:
        return ColumnKind.CATEGORICAL
    numeric = sum(1 for value in present if value.is_numeric)
    # strict majority: an even split stays categorical
    if numeric > len(present) * _MAJORITY_RATIO:
        return ColumnKind.NUMERIC
    return ColumnKind.CATEGORICAL


def classify(row_set: RowSet) -> Dict[str, ColumnKind]:
    """Assign every column exactly one kind, in first-seen column order."""
    return {name: classify_column(row_set, name) for name in row_set.column_names}


def columns_of_kind(classification: Classification, kind: ColumnKind) -> List[str]:
    return [name for name, assigned in classification.items() if assigned is kind]


def classify_node(state: MutableMapping[str, Any]) -> Dict[str, Any]:
    row_set: RowSet = state["row_set"]
    classification = classify(row_set)

    numeric_columns = columns_of_kind(classification, ColumnKind.NUMERIC)
    categorical_columns = columns_of_kind(classification, ColumnKind.CATEGORICAL)
    logger.debug(
        "classified columns",
        extra={"numeric": len(numeric_columns), "categorical": len(categorical_columns)},
    )

    payload = {
        "columnKinds": {name: kind.value for name, kind in classification.items()},
        "numericColumns": numeric_columns,
        "categoricalColumns": categorical_columns,
    }
    update = _with_phase(state, "classify", payload, classification=classification)
    _emit_callback(state, "classify", payload)
    return update
