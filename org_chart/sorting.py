"""
Org Chart Kernel — Deterministic Sorter

Sibling order is a strict total order:
  1. title under locale-aware collation (case-folded),
  2. raw title (separates titles that only differ by case),
  3. position id.

Identical input always yields identical traversal order.
"""

from __future__ import annotations

import locale
from typing import List, Set, Tuple

from .domain_types import HierarchyNode, Position


def collation_key(title: str) -> str:
    """Locale-aware collation key for a title."""
    folded = (title or "").casefold()
    try:
        return locale.strxfrm(folded)
    except ValueError:
        # embedded NUL
        return folded


def position_sort_key(position: Position) -> Tuple[str, str, str]:
    return (collation_key(position.title), position.title or "", position.id)


def sibling_sort_key(node: HierarchyNode) -> Tuple[str, str, str]:
    return position_sort_key(node.position)


def sort_siblings(nodes: List[HierarchyNode]) -> List[HierarchyNode]:
    """Return a new, deterministically ordered list of sibling nodes."""
    return sorted(nodes, key=sibling_sort_key)


def sort_forest(roots: List[HierarchyNode]) -> List[HierarchyNode]:
    """
    Sort roots and, at every level, each node's children.

    Children lists are re-ordered in place on the (freshly built) nodes.
    Iterative with a visited guard: a malformed cyclic structure is
    visited once per node and never recursed into.
    """
    ordered_roots = sort_siblings(roots)
    visited: Set[str] = set()
    stack: List[HierarchyNode] = list(ordered_roots)
    while stack:
        node = stack.pop()
        if node.id in visited:
            continue
        visited.add(node.id)
        if node.children:
            node.children[:] = sort_siblings(node.children)
            stack.extend(node.children)
    return ordered_roots
