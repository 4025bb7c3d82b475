"""
Org Chart Kernel v1.0
Deterministic, in-memory, point-in-time organizational chart
reconstruction and comparison.
"""

from .domain_types import (
    Assignment,
    ChangeStatus,
    Department,
    HierarchyForest,
    HierarchyNode,
    Position,
    coerce_date,
)
from .constants import ALL_DEPARTMENTS
from .records import (
    RecordError,
    RecordDecodeError,
    decode_assignments,
    decode_departments,
    decode_positions,
)
from .temporal import filter_active, is_active_at, is_active_during
from .indexing import group_by, index_by_id
from .tree_builder import build_hierarchy
from .sorting import sort_forest, sibling_sort_key
from .differ import RemovedPosition, SnapshotDiff, diff_snapshots
from .aggregator import ChartSummary, summarize
from .graph import (
    detect_reporting_cycles,
    find_supervisor,
    node_depths,
    reporting_chain,
    walk_depth_first,
)
from .diagnostics import compute_diagnostics
from .hashing import canonical_hash, canonical_serialize, chart_to_dict
from .timeline import (
    DepartmentCount,
    MonthDetails,
    MonthlyChange,
    TimelineSummary,
    YearOverYear,
    compute_timeline,
    department_breakdown,
    month_details,
    percent_growth,
    summarize_timeline,
    year_over_year,
)
from .scope import scope_to_department
from .engine import OrgChart, OrgChartEngine, build_org_chart

__all__ = [
    "Assignment",
    "ChangeStatus",
    "Department",
    "HierarchyForest",
    "HierarchyNode",
    "Position",
    "coerce_date",
    "ALL_DEPARTMENTS",
    "RecordError",
    "RecordDecodeError",
    "decode_assignments",
    "decode_departments",
    "decode_positions",
    "filter_active",
    "is_active_at",
    "is_active_during",
    "group_by",
    "index_by_id",
    "build_hierarchy",
    "sort_forest",
    "sibling_sort_key",
    "RemovedPosition",
    "SnapshotDiff",
    "diff_snapshots",
    "ChartSummary",
    "summarize",
    "detect_reporting_cycles",
    "find_supervisor",
    "node_depths",
    "reporting_chain",
    "walk_depth_first",
    "compute_diagnostics",
    "canonical_hash",
    "canonical_serialize",
    "chart_to_dict",
    "MonthlyChange",
    "TimelineSummary",
    "compute_timeline",
    "summarize_timeline",
    "DepartmentCount",
    "MonthDetails",
    "YearOverYear",
    "department_breakdown",
    "month_details",
    "percent_growth",
    "year_over_year",
    "scope_to_department",
    "OrgChart",
    "OrgChartEngine",
    "build_org_chart",
]
