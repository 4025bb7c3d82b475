"""
Org Chart Kernel — Diagnostics v1.0

Data-quality report for one built snapshot. Never raises; the
builder already tolerates every condition reported here.
"""

from __future__ import annotations

from typing import Dict, List, Sequence

from .domain_types import Assignment, HierarchyForest, Position
from .graph import detect_reporting_cycles, node_depths


def compute_diagnostics(
    forest: HierarchyForest,
    positions: Sequence[Position],
    assignments: Sequence[Assignment],
) -> dict:
    """
    Return a diagnostic dict summarising the snapshot's health.

    positions / assignments must be the same filtered sets the forest
    was built from.
    """
    depths = node_depths(forest.roots)
    cycles = detect_reporting_cycles(positions)

    vacant = sorted(nid for nid, node in forest.nodes.items() if node.is_vacant)
    missing_department = sorted(
        nid for nid, node in forest.nodes.items()
        if node.department is None
    )
    flagged_inactive = sorted(
        nid for nid, node in forest.nodes.items()
        if not node.position.is_active
    )

    primaries: Dict[str, int] = {}
    for a in assignments:
        if a.is_primary and a.employee_id and a.position_id in forest.nodes:
            primaries[a.employee_id] = primaries.get(a.employee_id, 0) + 1
    multi_primary = sorted(eid for eid, n in primaries.items() if n > 1)

    warnings: List[str] = []
    if cycles:
        warnings.append(
            f"{len(cycles)} reporting cycle(s): "
            + "; ".join(" -> ".join(c) for c in cycles)
        )
    if forest.promoted_orphans:
        warnings.append(
            f"{len(forest.promoted_orphans)} position(s) promoted to root; "
            f"declared manager not in snapshot: "
            f"{', '.join(sorted(forest.promoted_orphans))}"
        )
    if missing_department:
        warnings.append(
            f"{len(missing_department)} position(s) without an active department: "
            f"{', '.join(missing_department)}"
        )
    if flagged_inactive:
        warnings.append(
            f"{len(flagged_inactive)} position(s) flagged inactive but in date range: "
            f"{', '.join(flagged_inactive)}"
        )
    if multi_primary:
        warnings.append(
            f"{len(multi_primary)} employee(s) with more than one primary "
            f"assignment: {', '.join(multi_primary)}"
        )

    return {
        "position_count": len(forest.nodes),
        "root_count": len(forest.roots),
        "max_depth": max(depths.values()) if depths else 0,
        "promoted_orphans": sorted(forest.promoted_orphans),
        "cycle_breaks": sorted(forest.cycle_breaks),
        "reporting_cycles": cycles,
        "vacant_positions": vacant,
        "missing_department": missing_department,
        "multiple_primary_employees": multi_primary,
        "warnings": warnings,
    }
