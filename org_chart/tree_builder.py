"""
Org Chart Kernel — Tree Builder v1.0

Assembles a forest of HierarchyNodes from flat, already-filtered
position / assignment / department records.

Passes (all linear):
  1. Index departments by id, assignments by position id.
  2. Wrap every position in a fresh node (first occurrence of an id wins).
  3. Attach each node under its reports_to parent if that parent is in
     the same set; otherwise promote it to root (orphan promotion).
  4. Break reporting cycles: any node not reachable from a root lies
     on, or hangs below, a cycle. In each cycle the member with the
     smallest sibling sort key is detached and promoted to root.

Inputs are never mutated. No failure paths.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Set

from .domain_types import (
    Assignment,
    ChangeStatus,
    Department,
    HierarchyForest,
    HierarchyNode,
    Position,
)
from .indexing import group_by, index_by_id
from .sorting import sibling_sort_key

logger = logging.getLogger(__name__)


def build_hierarchy(
    positions: Iterable[Position],
    assignments: Iterable[Assignment],
    departments: Iterable[Department],
    comparison_ids: Optional[Set[str]] = None,
) -> HierarchyForest:
    """
    Build one snapshot forest.

    If comparison_ids is given, nodes whose id is not a member are
    marked "added" and all others "unchanged". The symmetric "removed"
    set is the differ's job.
    """
    dept_by_id: Dict[str, Department] = index_by_id(departments)
    assignments_by_position: Dict[str, List[Assignment]] = group_by(
        assignments, lambda a: a.position_id,
    )

    # -- Pass 1: one node per position --------------------------------
    nodes: Dict[str, HierarchyNode] = {}
    order: List[HierarchyNode] = []
    for pos in positions:
        if pos.id in nodes:
            continue
        node = HierarchyNode(
            position=pos,
            department=dept_by_id.get(pos.department_id) if pos.department_id else None,
            assignments=list(assignments_by_position.get(pos.id, [])),
            children=[],
        )
        if comparison_ids is not None:
            node.change_status = (
                ChangeStatus.UNCHANGED if pos.id in comparison_ids
                else ChangeStatus.ADDED
            )
        nodes[pos.id] = node
        order.append(node)

    # -- Pass 2: attach to parent or promote to root ------------------
    roots: List[HierarchyNode] = []
    parent_of: Dict[str, str] = {}
    orphans: List[str] = []
    for node in order:
        parent_id = node.position.reports_to_position_id
        parent = nodes.get(parent_id) if parent_id else None
        if parent is None or parent is node:
            roots.append(node)
            if parent_id and parent is None:
                orphans.append(node.id)
            continue
        parent.children.append(node)
        parent_of[node.id] = parent.id

    # -- Pass 3: break cycles -----------------------------------------
    breaks = _break_cycles(nodes, order, roots, parent_of)

    logger.debug(
        "built hierarchy: %d nodes, %d roots, %d orphans, %d cycle breaks",
        len(nodes), len(roots), len(orphans), len(breaks),
    )
    return HierarchyForest(
        nodes=nodes,
        roots=roots,
        promoted_orphans=tuple(orphans),
        cycle_breaks=tuple(breaks),
    )


def _break_cycles(
    nodes: Dict[str, HierarchyNode],
    order: List[HierarchyNode],
    roots: List[HierarchyNode],
    parent_of: Dict[str, str],
) -> List[str]:
    """
    Promote one member of every unreachable cycle to root.

    Mutates roots / parent_of / children lists of the freshly built
    nodes. Returns the ids of promoted cycle members.
    """
    reachable: Set[str] = set()
    for root in roots:
        _mark_reachable(root, reachable)
    if len(reachable) == len(nodes):
        return []

    breaks: List[str] = []
    for node in order:
        if node.id in reachable:
            continue
        # Walk up parent pointers until we either hit reachable
        # territory (impossible for the first unreachable node of a
        # component) or revisit a node on this walk: that is the cycle.
        path: List[str] = []
        on_path: Set[str] = set()
        current: Optional[str] = node.id
        while current is not None and current not in on_path and current not in reachable:
            on_path.add(current)
            path.append(current)
            current = parent_of.get(current)
        if current is None or current in reachable:
            continue
        cycle = path[path.index(current):]
        head = min((nodes[cid] for cid in cycle), key=sibling_sort_key)

        parent = nodes[parent_of.pop(head.id)]
        parent.children = [c for c in parent.children if c is not head]
        roots.append(head)
        breaks.append(head.id)
        logger.debug("reporting cycle %s broken at %s", cycle, head.id)
        _mark_reachable(head, reachable)
    return breaks


def _mark_reachable(start: HierarchyNode, reachable: Set[str]) -> None:
    stack = [start]
    while stack:
        node = stack.pop()
        if node.id in reachable:
            continue
        reachable.add(node.id)
        stack.extend(node.children)
