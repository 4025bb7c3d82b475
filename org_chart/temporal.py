"""
Org Chart Kernel — Temporal Filter

Active-at-date predicate, applied uniformly to departments, positions
and assignments:

    start_date <= D  and  (end_date is None  or  end_date >= D)

Never raises. A record with no start date, or with end before start,
is simply never active.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, TypeVar

from .domain_types import coerce_date

T = TypeVar("T")


def is_active_at(record: object, reference_date: object) -> bool:
    """True if record's validity interval contains reference_date."""
    ref = coerce_date(reference_date)
    if ref is None:
        return False
    start: Optional[date] = coerce_date(getattr(record, "start_date", None))
    end: Optional[date] = coerce_date(getattr(record, "end_date", None))
    if start is None or start > ref:
        return False
    return end is None or end >= ref


def filter_active(records: Iterable[T], reference_date: object) -> List[T]:
    """Subset of records active at reference_date. Input order preserved."""
    ref = coerce_date(reference_date)
    if ref is None:
        return []
    return [r for r in records if is_active_at(r, ref)]


def is_active_during(
    record: object, period_start: object, period_end: object,
) -> bool:
    """True if the validity interval overlaps [period_start, period_end]."""
    lo = coerce_date(period_start)
    hi = coerce_date(period_end)
    if lo is None or hi is None or lo > hi:
        return False
    start: Optional[date] = coerce_date(getattr(record, "start_date", None))
    end: Optional[date] = coerce_date(getattr(record, "end_date", None))
    if start is None or start > hi:
        return False
    if end is not None and end < start:
        return False
    return end is None or end >= lo
