"""
Org Chart Kernel — Canonical Serialization & Hashing v1.0

Deterministic canonical serialization + SHA-256 hashing of a chart.
Produces byte-identical output for identical input.

Rules:
  - Roots and children in sibling order (as built and sorted)
  - Assignments sorted by (is_primary desc, employee_name, id)
  - Removed positions in differ order (title, id)
  - Dates as ISO strings, None as null
  - UTF-8 JSON, no whitespace, ASCII-escaped
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Dict, List, Optional, Set, Tuple

from .constants import CHART_FORMAT_VERSION
from .domain_types import Assignment, Department, HierarchyNode, Position, coerce_date


def chart_to_dict(chart: Any) -> Dict[str, Any]:
    """
    Plain dict for an OrgChart (API payload / hashing input).

    Typed as Any to avoid a circular import with engine.py.
    """
    return {
        "format_version": CHART_FORMAT_VERSION,
        "reference_date": chart.reference_date.isoformat(),
        "compare_date": chart.compare_date.isoformat() if chart.compare_date else None,
        "department_id": chart.department_id,
        "comparison_active": chart.comparison_active,
        "roots": forest_to_list(chart.roots),
        "removed": [
            {
                **_position_dict(r.position),
                "department": _department_dict(r.department),
                "assignments": _assignments_list(r.assignments),
                "change_status": "removed",
                "children": [],
            }
            for r in chart.removed
        ],
        "summary": chart.summary.to_dict(),
    }


def forest_to_list(roots: List[HierarchyNode]) -> List[Dict[str, Any]]:
    """Nested node dicts. Iterative; each node emitted at most once."""
    out: List[Dict[str, Any]] = []
    visited: Set[str] = set()
    stack: List[Tuple[HierarchyNode, List[Dict[str, Any]]]] = [
        (r, out) for r in reversed(roots)
    ]
    while stack:
        node, sink = stack.pop()
        if node.id in visited:
            continue
        visited.add(node.id)
        entry = _node_dict(node)
        sink.append(entry)
        for child in reversed(node.children):
            stack.append((child, entry["children"]))
    return out


def canonical_serialize(chart: Any) -> bytes:
    """Canonical UTF-8 JSON bytes of chart_to_dict(chart)."""
    obj = chart_to_dict(chart)
    return json.dumps(
        obj, ensure_ascii=True, separators=(",", ":"), sort_keys=True,
    ).encode("utf-8")


def canonical_hash(chart: Any) -> str:
    """SHA-256 of canonical serialization. Lowercase hex string."""
    return hashlib.sha256(canonical_serialize(chart)).hexdigest()


# ---------------------------------------------------------------------------
# Internal builders
# ---------------------------------------------------------------------------

def _iso(value: Any) -> Optional[str]:
    day = coerce_date(value)
    return day.isoformat() if day is not None else None


def _position_dict(p: Position) -> Dict[str, Any]:
    return {
        "id": p.id,
        "title": p.title,
        "code": p.code,
        "description": p.description,
        "department_id": p.department_id,
        "reports_to_position_id": p.reports_to_position_id,
        "is_active": p.is_active,
        "authorized_headcount": p.authorized_headcount,
        "start_date": _iso(p.start_date),
        "end_date": _iso(p.end_date),
    }


def _department_dict(d: Optional[Department]) -> Optional[Dict[str, Any]]:
    if d is None:
        return None
    return {
        "id": d.id,
        "name": d.name,
        "code": d.code,
        "start_date": _iso(d.start_date),
        "end_date": _iso(d.end_date),
    }


def _assignments_list(assignments: Any) -> List[Dict[str, Any]]:
    ordered = sorted(
        assignments,
        key=lambda a: (not a.is_primary, a.employee_name, a.id),
    )
    return [_assignment_dict(a) for a in ordered]


def _assignment_dict(a: Assignment) -> Dict[str, Any]:
    return {
        "id": a.id,
        "employee_id": a.employee_id,
        "position_id": a.position_id,
        "is_primary": a.is_primary,
        "employee_name": a.employee_name,
        "employee_email": a.employee_email,
        "avatar_url": a.avatar_url,
        "start_date": _iso(a.start_date),
        "end_date": _iso(a.end_date),
    }


def _node_dict(node: HierarchyNode) -> Dict[str, Any]:
    return {
        **_position_dict(node.position),
        "department": _department_dict(node.department),
        "assignments": _assignments_list(node.assignments),
        "change_status": node.change_status,
        "children": [],
    }
