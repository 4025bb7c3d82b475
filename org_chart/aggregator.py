"""
Aggregator — summary counts for display.

Pure arithmetic over the current filtered snapshot and the differ's
output. Empty input yields all zeros.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Set

from .differ import SnapshotDiff
from .domain_types import Assignment, Department, Position


@dataclass(frozen=True)
class ChartSummary:
    """Counts for one chart query. Diff counts are 0 without comparison."""

    added: int = 0
    removed: int = 0
    unchanged: int = 0
    total_positions: int = 0
    total_assignments: int = 0
    total_departments: int = 0
    vacant_positions: int = 0
    filled_headcount: int = 0
    authorized_headcount: int = 0

    def to_dict(self) -> dict:
        return {
            "added": self.added,
            "removed": self.removed,
            "unchanged": self.unchanged,
            "total_positions": self.total_positions,
            "total_assignments": self.total_assignments,
            "total_departments": self.total_departments,
            "vacant_positions": self.vacant_positions,
            "filled_headcount": self.filled_headcount,
            "authorized_headcount": self.authorized_headcount,
        }


def summarize(
    diff: Optional[SnapshotDiff],
    positions: Sequence[Position],
    assignments: Sequence[Assignment],
    departments: Sequence[Department],
) -> ChartSummary:
    """
    Roll up counts for the current snapshot.

    filled_headcount counts distinct employees holding any of the
    current positions; vacant_positions counts positions with none.
    """
    position_ids: Set[str] = {p.id for p in positions}
    held: Set[str] = {a.position_id for a in assignments if a.position_id in position_ids}
    employees: Set[str] = {
        a.employee_id for a in assignments
        if a.position_id in position_ids and a.employee_id
    }

    return ChartSummary(
        added=len(diff.added) if diff else 0,
        removed=len(diff.removed) if diff else 0,
        unchanged=len(diff.unchanged) if diff else 0,
        total_positions=len(position_ids),
        total_assignments=sum(1 for a in assignments if a.position_id in position_ids),
        total_departments=len(departments),
        vacant_positions=len(position_ids - held),
        filled_headcount=len(employees),
        authorized_headcount=_sum_headcount(positions),
    )


def _sum_headcount(positions: Iterable[Position]) -> int:
    seen: Set[str] = set()
    total = 0
    for p in positions:
        if p.id in seen:
            continue
        seen.add(p.id)
        total += max(p.authorized_headcount, 0)
    return total
