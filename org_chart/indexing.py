"""
Org Chart Kernel — Relational Indexer

Parent-key -> children grouping for O(1) lookups during tree assembly.
Run it over FILTERED record sets only; indexing before filtering leaks
inactive children into active parents.
"""

from __future__ import annotations

from typing import Callable, Dict, Hashable, Iterable, List, TypeVar

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


def group_by(records: Iterable[T], key_fn: Callable[[T], K]) -> Dict[K, List[T]]:
    """Group records by key_fn. Input order is kept inside each group."""
    groups: Dict[K, List[T]] = {}
    for record in records:
        groups.setdefault(key_fn(record), []).append(record)
    return groups


def index_by_id(records: Iterable[T]) -> Dict[str, T]:
    """Map record.id -> record. First occurrence of a duplicate id wins."""
    index: Dict[str, T] = {}
    for record in records:
        index.setdefault(getattr(record, "id"), record)
    return index
