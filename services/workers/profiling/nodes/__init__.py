from .ingest import ingest_node
from .classify import classify_node
from .statistics import statistics_node
from .profile import profile_node
from .charts import charts_node
from .insights import insights_node
from .finalize import finalize_node

__all__ = [
    "ingest_node",
    "classify_node",
    "statistics_node",
    "profile_node",
    "charts_node",
    "insights_node",
    "finalize_node",
]
