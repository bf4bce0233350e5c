from __future__ import annotations
import math
from typing import Any, Dict, List, Mapping, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .constants import _INSIGHT_PRECISION, _TEMPLATE_DIR


_JINJA_ENV = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=select_autoescape(["html", "xml", "html.j2"]),
    keep_trailing_newline=True,
)


def _round(value: Optional[float], digits: int = _INSIGHT_PRECISION) -> Optional[float]:
    if value is None:
        return None
    return round(value, digits)


def _format_number(value: Optional[float], digits: int = _INSIGHT_PRECISION) -> str:
    """Render a statistic the way the dashboard shows it: fixed precision, no trailing zeros."""
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "n/a"
    text = f"{value:,.{digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def _render_template(name: str, context: Mapping[str, Any]) -> str:
    template = _JINJA_ENV.get_template(name)
    return template.render(dict(context))


def _csv_cell(value: Any) -> Any:
    if value is None:
        return ""
    return value


def _statistics_rows(summaries: Mapping[str, Any], column_names: List[str]) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for name in column_names:
        summary = summaries.get(name)
        if summary is None:
            continue
        row = {"column": name}
        row.update({key: _csv_cell(value) for key, value in summary.to_dict().items()})
        rows.append(row)
    return rows
