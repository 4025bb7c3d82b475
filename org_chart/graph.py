"""
Org Chart Kernel — Graph Utilities v1.0

Pure dict-based analysis of the reporting-line graph
(position -> reports_to position). No external dependencies.

Every traversal here is iterative and carries a visited guard: cyclic
data is not rejected upstream, so nothing may recurse on it.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from .domain_types import Assignment, HierarchyNode, Position
from .indexing import index_by_id
from .temporal import is_active_at


# ---------------------------------------------------------------------------
# Adjacency
# ---------------------------------------------------------------------------

def build_reporting_map(positions: Iterable[Position]) -> Dict[str, str]:
    """child position id -> declared parent id (only for present parents)."""
    by_id = index_by_id(positions)
    edges: Dict[str, str] = {}
    for pid, pos in by_id.items():
        parent = pos.reports_to_position_id
        if parent and parent in by_id:
            edges[pid] = parent
    return edges


# ---------------------------------------------------------------------------
# Forest traversal
# ---------------------------------------------------------------------------

def walk_depth_first(
    roots: Iterable[HierarchyNode],
) -> Iterator[Tuple[HierarchyNode, int]]:
    """Pre-order (node, depth) walk, each node yielded at most once."""
    visited: Set[str] = set()
    stack: List[Tuple[HierarchyNode, int]] = [(r, 0) for r in reversed(list(roots))]
    while stack:
        node, depth = stack.pop()
        if node.id in visited:
            continue
        visited.add(node.id)
        yield node, depth
        for child in reversed(node.children):
            stack.append((child, depth + 1))


def node_depths(roots: Iterable[HierarchyNode]) -> Dict[str, int]:
    """Depth of every reachable node; roots are depth 0."""
    return {node.id: depth for node, depth in walk_depth_first(roots)}


def flatten(roots: Iterable[HierarchyNode]) -> List[HierarchyNode]:
    """All reachable nodes in pre-order."""
    return [node for node, _ in walk_depth_first(roots)]


def count_descendants(node: HierarchyNode) -> int:
    """Number of nodes below node (span of control, transitively)."""
    return sum(1 for _ in walk_depth_first([node])) - 1


# ---------------------------------------------------------------------------
# Reporting chain
# ---------------------------------------------------------------------------

def reporting_chain(position_id: str, positions: Iterable[Position]) -> List[str]:
    """
    Ancestor ids from the direct parent upward.

    Stops at a missing parent or on re-entering the chain.
    """
    edges = build_reporting_map(positions)
    chain: List[str] = []
    seen: Set[str] = {position_id}
    current = edges.get(position_id)
    while current is not None and current not in seen:
        chain.append(current)
        seen.add(current)
        current = edges.get(current)
    return chain


def find_supervisor(
    position_id: str,
    positions: Iterable[Position],
    assignments: Iterable[Assignment],
    reference_date: object = None,
) -> Optional[Assignment]:
    """
    Assignment holding the position this one reports to.

    Primary assignments are preferred; with reference_date, only
    assignments active on that date qualify.
    """
    pos = index_by_id(positions).get(position_id)
    if pos is None or not pos.reports_to_position_id:
        return None
    candidates = [
        a for a in assignments
        if a.position_id == pos.reports_to_position_id
        and (reference_date is None or is_active_at(a, reference_date))
    ]
    if not candidates:
        return None
    primaries = [a for a in candidates if a.is_primary]
    return (primaries or candidates)[0]


# ---------------------------------------------------------------------------
# Cycle detection
# ---------------------------------------------------------------------------

def detect_reporting_cycles(positions: Iterable[Position]) -> List[List[str]]:
    """
    Detect cycles in the reports_to graph.

    Each cycle is reported once, rotated so its smallest id comes first.
    A self-reference is a cycle of length one. Cycles are returned in
    ascending order of that first id.
    Uses iterative walks with explicit colour tracking.
    """
    by_id = index_by_id(positions)
    edges = build_reporting_map(by_id.values())

    WHITE, GREY, BLACK = 0, 1, 2
    colour: Dict[str, int] = {pid: WHITE for pid in by_id}
    cycles: List[List[str]] = []

    for start in sorted(by_id):
        if colour[start] != WHITE:
            continue
        path: List[str] = []
        node: Optional[str] = start
        while node is not None and colour[node] == WHITE:
            colour[node] = GREY
            path.append(node)
            node = edges.get(node)
        if node is not None and colour[node] == GREY:
            cycle = path[path.index(node):]
            pivot = cycle.index(min(cycle))
            cycles.append(cycle[pivot:] + cycle[:pivot])
        for pid in path:
            colour[pid] = BLACK

    return sorted(cycles, key=lambda c: c[0])
