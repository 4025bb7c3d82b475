"""
Snapshot Differ — pure function, no side effects.

Classifies every position id appearing in either snapshot into exactly
one of three buckets:

    added      = current - comparison
    removed    = comparison - current
    unchanged  = current & comparison

Identity-based: a position present in both snapshots with a changed
title, department or reporting line is still "unchanged". Field-level
change detection ("modified") is not computed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from .domain_types import Assignment, Department, Position
from .indexing import group_by, index_by_id
from .sorting import position_sort_key


@dataclass(frozen=True)
class RemovedPosition:
    """
    A position only present in the comparison snapshot.

    department / assignments are resolved from the comparison snapshot.
    Rendered flat: removed entries never carry children.
    """

    position: Position
    department: Optional[Department] = None
    assignments: tuple = ()

    @property
    def id(self) -> str:
        return self.position.id


@dataclass(frozen=True)
class SnapshotDiff:
    """Three disjoint buckets covering current | comparison ids."""

    added: List[str] = field(default_factory=list)
    removed: List[RemovedPosition] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)

    @property
    def removed_ids(self) -> List[str]:
        return [r.id for r in self.removed]


def diff_snapshots(
    current_positions: Iterable[Position],
    comparison_positions: Iterable[Position],
    comparison_assignments: Iterable[Assignment] = (),
    comparison_departments: Iterable[Department] = (),
) -> SnapshotDiff:
    """
    Compare two filtered position sets by id.

    added / unchanged keep the current input order; removed is sorted
    by sibling order (title, then id). Duplicate ids count once.
    """
    current_ids: Set[str] = set()
    current_order: List[str] = []
    for pos in current_positions:
        if pos.id not in current_ids:
            current_ids.add(pos.id)
            current_order.append(pos.id)

    comparison_by_id: Dict[str, Position] = index_by_id(comparison_positions)

    added = [pid for pid in current_order if pid not in comparison_by_id]
    unchanged = [pid for pid in current_order if pid in comparison_by_id]

    removed_positions = sorted(
        (p for pid, p in comparison_by_id.items() if pid not in current_ids),
        key=position_sort_key,
    )
    removed: List[RemovedPosition] = []
    if removed_positions:
        dept_by_id = index_by_id(comparison_departments)
        assignments_by_position = group_by(
            comparison_assignments, lambda a: a.position_id,
        )
        for pos in removed_positions:
            removed.append(RemovedPosition(
                position=pos,
                department=dept_by_id.get(pos.department_id) if pos.department_id else None,
                assignments=tuple(assignments_by_position.get(pos.id, [])),
            ))

    return SnapshotDiff(added=added, removed=removed, unchanged=unchanged)
