"""
Org Chart Kernel — Engine v1.0

Top-level orchestrator. Delegates to the pure layers:

    scope filter -> temporal filter (x2) -> tree builder (x2)
                 -> sorter -> differ (comparison only) -> aggregator

No caching, no shared mutable state: every call rebuilds from the
loaded tables, and the two snapshots never share filtered lists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence, Tuple

from .aggregator import ChartSummary, summarize
from .constants import ALL_DEPARTMENTS
from .diagnostics import compute_diagnostics
from .differ import RemovedPosition, SnapshotDiff, diff_snapshots
from .domain_types import (
    Assignment,
    Department,
    HierarchyForest,
    HierarchyNode,
    Position,
    coerce_date,
)
from .scope import is_unscoped, scope_to_department
from .sorting import sort_forest
from .temporal import filter_active
from .timeline import (
    DEFAULT_BREAKDOWN_LIMIT,
    DepartmentCount,
    MonthDetails,
    MonthlyChange,
    TimelineSummary,
    YearOverYear,
    compute_timeline,
    department_breakdown,
    month_details,
    summarize_timeline,
    year_over_year,
)
from .tree_builder import build_hierarchy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotInputs:
    """The three tables filtered to one reference date."""

    reference_date: date
    departments: Tuple[Department, ...]
    positions: Tuple[Position, ...]
    assignments: Tuple[Assignment, ...]


@dataclass
class OrgChart:
    """Result of one chart query."""

    reference_date: date
    department_id: str
    forest: HierarchyForest
    summary: ChartSummary
    compare_date: Optional[date] = None
    diff: Optional[SnapshotDiff] = None
    removed: List[RemovedPosition] = field(default_factory=list)

    @property
    def roots(self) -> List[HierarchyNode]:
        return self.forest.roots

    @property
    def comparison_active(self) -> bool:
        return self.diff is not None


# ---------------------------------------------------------------------------
# Pure pipeline
# ---------------------------------------------------------------------------

def snapshot_at(
    departments: Sequence[Department],
    positions: Sequence[Position],
    assignments: Sequence[Assignment],
    reference_date: date,
) -> SnapshotInputs:
    """Filter each table independently to reference_date."""
    return SnapshotInputs(
        reference_date=reference_date,
        departments=tuple(filter_active(departments, reference_date)),
        positions=tuple(filter_active(positions, reference_date)),
        assignments=tuple(filter_active(assignments, reference_date)),
    )


def build_org_chart(
    departments: Sequence[Department],
    positions: Sequence[Position],
    assignments: Sequence[Assignment],
    reference_date: object,
    compare_date: object = None,
    department_id: str = ALL_DEPARTMENTS,
) -> OrgChart:
    """
    Reconstruct the chart at reference_date, optionally diffed against
    compare_date.

    An unparseable reference_date raises ValueError; an unparseable
    compare_date disables the comparison.
    """
    ref = coerce_date(reference_date)
    if ref is None:
        raise ValueError(f"Invalid reference date: {reference_date!r}")
    cmp_date = coerce_date(compare_date)
    scope = ALL_DEPARTMENTS if is_unscoped(department_id) else department_id

    depts, poss, asgs = scope_to_department(
        departments, positions, assignments, department_id,
    )
    current = snapshot_at(depts, poss, asgs, ref)

    comparison: Optional[SnapshotInputs] = None
    if cmp_date is not None:
        comparison = snapshot_at(depts, poss, asgs, cmp_date)

    forest = build_hierarchy(
        current.positions,
        current.assignments,
        current.departments,
        comparison_ids={p.id for p in comparison.positions} if comparison else None,
    )
    forest.roots = sort_forest(forest.roots)

    diff: Optional[SnapshotDiff] = None
    if comparison is not None:
        diff = diff_snapshots(
            current.positions,
            comparison.positions,
            comparison.assignments,
            comparison.departments,
        )

    summary = summarize(
        diff, current.positions, current.assignments, current.departments,
    )
    logger.debug(
        "org chart at %s (compare=%s, dept=%s): %d positions, %d roots",
        ref, cmp_date, scope,
        summary.total_positions, len(forest.roots),
    )
    return OrgChart(
        reference_date=ref,
        department_id=scope,
        forest=forest,
        summary=summary,
        compare_date=cmp_date if comparison is not None else None,
        diff=diff,
        removed=list(diff.removed) if diff else [],
    )


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class OrgChartEngine:
    """
    Holds the three loaded tables and answers chart queries.

    The tables are copied to tuples on construction and never mutated;
    every query is a pure function of them and its arguments.
    """

    def __init__(
        self,
        departments: Sequence[Department] = (),
        positions: Sequence[Position] = (),
        assignments: Sequence[Assignment] = (),
    ) -> None:
        self._departments: Tuple[Department, ...] = tuple(departments)
        self._positions: Tuple[Position, ...] = tuple(positions)
        self._assignments: Tuple[Assignment, ...] = tuple(assignments)

    # -- Table access -------------------------------------------------------

    @property
    def departments(self) -> Tuple[Department, ...]:
        return self._departments

    @property
    def positions(self) -> Tuple[Position, ...]:
        return self._positions

    @property
    def assignments(self) -> Tuple[Assignment, ...]:
        return self._assignments

    # -- Queries ------------------------------------------------------------

    def chart(
        self,
        reference_date: object,
        compare_date: object = None,
        department_id: str = ALL_DEPARTMENTS,
    ) -> OrgChart:
        return build_org_chart(
            self._departments,
            self._positions,
            self._assignments,
            reference_date,
            compare_date=compare_date,
            department_id=department_id,
        )

    def diagnostics(
        self,
        reference_date: object,
        department_id: str = ALL_DEPARTMENTS,
    ) -> dict:
        chart = self.chart(reference_date, department_id=department_id)
        depts, poss, asgs = scope_to_department(
            self._departments, self._positions, self._assignments, department_id,
        )
        current = snapshot_at(depts, poss, asgs, chart.reference_date)
        return compute_diagnostics(chart.forest, current.positions, current.assignments)

    def timeline(
        self,
        start_date: object,
        end_date: object,
        department_id: str = ALL_DEPARTMENTS,
    ) -> Tuple[List[MonthlyChange], Optional[TimelineSummary]]:
        months = compute_timeline(
            self._departments,
            self._positions,
            self._assignments,
            start_date,
            end_date,
            department_id=department_id,
        )
        return months, summarize_timeline(months)

    def year_over_year(
        self,
        start_date: object,
        end_date: object,
        department_id: str = ALL_DEPARTMENTS,
    ) -> Optional[YearOverYear]:
        return year_over_year(
            self._departments,
            self._positions,
            self._assignments,
            start_date,
            end_date,
            department_id=department_id,
        )

    def month_details(
        self,
        month: object,
        department_id: str = ALL_DEPARTMENTS,
    ) -> Optional[MonthDetails]:
        return month_details(
            self._departments,
            self._positions,
            self._assignments,
            month,
            department_id=department_id,
        )

    def department_breakdown(
        self,
        reference_date: object,
        department_id: str = ALL_DEPARTMENTS,
        limit: int = DEFAULT_BREAKDOWN_LIMIT,
    ) -> List[DepartmentCount]:
        return department_breakdown(
            self._departments,
            self._positions,
            reference_date,
            department_id=department_id,
            limit=limit,
        )
