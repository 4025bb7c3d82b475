"""
Org Chart Kernel — Department Scope

Restrict the three tables to a single department before any temporal
filtering. "all" (or empty) means no filter.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .constants import ALL_DEPARTMENTS
from .domain_types import Assignment, Department, Position


def is_unscoped(department_id: str | None) -> bool:
    return not department_id or department_id == ALL_DEPARTMENTS


def scope_to_department(
    departments: Sequence[Department],
    positions: Sequence[Position],
    assignments: Sequence[Assignment],
    department_id: str | None = ALL_DEPARTMENTS,
) -> Tuple[List[Department], List[Position], List[Assignment]]:
    """Keep one department, its positions, and assignments to those positions."""
    if is_unscoped(department_id):
        return list(departments), list(positions), list(assignments)
    scoped_positions = [p for p in positions if p.department_id == department_id]
    position_ids = {p.id for p in scoped_positions}
    return (
        [d for d in departments if d.id == department_id],
        scoped_positions,
        [a for a in assignments if a.position_id in position_ids],
    )
