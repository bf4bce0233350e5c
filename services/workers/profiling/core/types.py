from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .errors import MalformedInputError
from .values import FieldValue


class ColumnKind(str, Enum):
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"


@dataclass(frozen=True)
class RowSet:
    column_names: Tuple[str, ...]
    rows: Tuple[Tuple[FieldValue, ...], ...]
    _positions: Mapping[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        positions = {name: index for index, name in enumerate(self.column_names)}
        object.__setattr__(self, "_positions", MappingProxyType(positions))

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "RowSet":
        """Resolve decoded records into typed fields.

        The column set comes from the first record; every later record must
        carry exactly the same keys.
        """
        materialized = list(records)
        if not materialized:
            return cls(column_names=(), rows=())

        first = materialized[0]
        if not isinstance(first, Mapping):
            raise MalformedInputError("row 0 is not a mapping", row_index=0)
        names = tuple(first.keys())
        expected = set(names)

        rows: List[Tuple[FieldValue, ...]] = []
        for index, record in enumerate(materialized):
            if not isinstance(record, Mapping):
                raise MalformedInputError(f"row {index} is not a mapping", row_index=index)
            if index and set(record.keys()) != expected:
                keys = set(record.keys())
                missing = sorted(str(name) for name in expected - keys)
                extra = sorted(str(name) for name in keys - expected)
                raise MalformedInputError(
                    f"row {index} does not match the column set of row 0 "
                    f"(missing={missing}, unexpected={extra})",
                    row_index=index,
                )
            rows.append(tuple(FieldValue.resolve(record[name]) for name in names))
        return cls(column_names=names, rows=tuple(rows))

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.column_names)

    def column_values(self, name: str) -> List[FieldValue]:
        position = self._positions[name]
        return [row[position] for row in self.rows]

    def present_values(self, name: str) -> List[FieldValue]:
        return [value for value in self.column_values(name) if not value.is_missing]

    def head(self, limit: int) -> Tuple[Tuple[FieldValue, ...], ...]:
        return self.rows[:limit]

    def value(self, row: Tuple[FieldValue, ...], name: str) -> FieldValue:
        return row[self._positions[name]]


Classification = Mapping[str, ColumnKind]


@dataclass(frozen=True)
class NumericSummary:
    minimum: Optional[float]
    maximum: Optional[float]
    mean: Optional[float]
    median: Optional[float]
    valid_count: int
    std_dev: Optional[float] = None
    value_range: Optional[float] = None

    kind = ColumnKind.NUMERIC

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "minimum": self.minimum,
            "maximum": self.maximum,
            "mean": self.mean,
            "median": self.median,
            "validCount": self.valid_count,
            "stdDev": self.std_dev,
            "range": self.value_range,
        }


@dataclass(frozen=True)
class CategoricalSummary:
    total_count: int
    unique_count: int

    kind = ColumnKind.CATEGORICAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "totalCount": self.total_count,
            "uniqueCount": self.unique_count,
        }


ColumnSummary = Union[NumericSummary, CategoricalSummary]


@dataclass(frozen=True)
class DatasetProfile:
    row_count: int
    column_count: int
    column_names: Tuple[str, ...]
    numeric_column_names: Tuple[str, ...]
    categorical_column_names: Tuple[str, ...]
    summaries: Mapping[str, ColumnSummary]
    time_column: Optional[str] = None

    @classmethod
    def empty(cls) -> "DatasetProfile":
        return cls(
            row_count=0,
            column_count=0,
            column_names=(),
            numeric_column_names=(),
            categorical_column_names=(),
            summaries=MappingProxyType({}),
        )

    def summary(self, name: str) -> ColumnSummary:
        return self.summaries[name]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rowCount": self.row_count,
            "columnCount": self.column_count,
            "columnNames": list(self.column_names),
            "numericColumnNames": list(self.numeric_column_names),
            "categoricalColumnNames": list(self.categorical_column_names),
            "timeColumn": self.time_column,
            "summaries": {name: self.summaries[name].to_dict() for name in self.column_names if name in self.summaries},
        }


@dataclass(frozen=True)
class BarEntry:
    label: str
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "value": self.value}


@dataclass(frozen=True)
class PieSlice:
    label: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "count": self.count}


@dataclass(frozen=True)
class LinePoint:
    index: int
    series_a_value: float
    series_b_value: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "seriesAValue": self.series_a_value,
            "seriesBValue": self.series_b_value,
        }


@dataclass(frozen=True)
class ScatterPoint:
    x: float
    y: float

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class CumulativePoint:
    index: int
    value: float
    cumulative: float

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "value": self.value, "cumulative": self.cumulative}


BarSeries = Tuple[BarEntry, ...]
PieSlices = Tuple[PieSlice, ...]
LineSeries = Tuple[LinePoint, ...]
ScatterSeries = Tuple[ScatterPoint, ...]
CumulativeSeries = Tuple[CumulativePoint, ...]


@dataclass(frozen=True)
class ChartViews:
    bar: BarSeries = ()
    pie: PieSlices = ()
    line: LineSeries = ()
    scatter: ScatterSeries = ()
    cumulative: CumulativeSeries = ()
    bar_value_column: Optional[str] = None
    bar_group_column: Optional[str] = None
    pie_column: Optional[str] = None
    line_columns: Tuple[str, ...] = ()
    scatter_columns: Tuple[str, ...] = ()
    cumulative_column: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bar": [entry.to_dict() for entry in self.bar],
            "pie": [slice_.to_dict() for slice_ in self.pie],
            "line": [point.to_dict() for point in self.line],
            "scatter": [point.to_dict() for point in self.scatter],
            "cumulative": [point.to_dict() for point in self.cumulative],
            "barValueColumn": self.bar_value_column,
            "barGroupColumn": self.bar_group_column,
            "pieColumn": self.pie_column,
            "lineColumns": list(self.line_columns),
            "scatterColumns": list(self.scatter_columns),
            "cumulativeColumn": self.cumulative_column,
        }


@dataclass
class ProfilingResult:
    profile: DatasetProfile
    charts: ChartViews
    insights: List[Dict[str, Any]]
    report_text: str
    report_html: str
    phases: Dict[str, Dict[str, Any]]
    artifact_contents: Dict[str, Dict[str, Any]]

    @property
    def bar(self) -> BarSeries:
        return self.charts.bar

    @property
    def pie(self) -> PieSlices:
        return self.charts.pie

    @property
    def line(self) -> LineSeries:
        return self.charts.line

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile": self.profile.to_dict(),
            "charts": self.charts.to_dict(),
            "insights": [dict(item) for item in self.insights],
            "summary": self.report_text,
        }
