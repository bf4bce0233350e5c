from pathlib import Path

PHASE_ORDER = [
    "ingest",
    "classify",
    "statistics",
    "profile",
    "charts",
    "insights",
    "finalize",
]

_MAJORITY_RATIO = 0.5

_MAX_BAR_ENTRIES = 10
_MAX_PIE_SLICES = 5
_MAX_LINE_POINTS = 20
_MAX_SCATTER_POINTS = 200

_UNKNOWN_GROUP_LABEL = "Unknown"
_ROW_LABEL_PREFIX = "Row "

_TIME_COLUMN_CANDIDATES = [
    "year", "Year", "YEAR",
    "date", "Date", "DATE",
    "period", "Period",
    "time", "Time",
    "timestamp",
]

_HIGH_VARIABILITY_CV = 30.0
_MIN_CORRELATION_PAIRS = 2
_INSIGHT_PRECISION = 2

_TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates"
_REPORT_HTML_TEMPLATE_NAME = "report.html.j2"
