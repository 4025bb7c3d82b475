"""
Org Chart Kernel — Core Domain Types v1.0

Pure data. No behaviour beyond trivial accessors.
Records mirror the three source tables (departments, positions,
employee_positions); HierarchyNode is derived and never persisted.

────────────────────────────────────────────────
DOMAIN GLOSSARY
────────────────────────────────────────────────

Active-at-date:
    A record whose validity interval contains the given date.

Root:
    A position with no resolvable parent in the current filtered set.

Orphan promotion:
    Treating a position whose declared parent was filtered out as a
    root rather than dropping it.

Snapshot:
    The fully-built forest for one specific reference date.

Identity-based diff:
    Classification by presence/absence of an id across two snapshots,
    ignoring field-level content changes.

────────────────────────────────────────────────
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple


# ── Change Status ─────────────────────────────────────────────

class ChangeStatus:
    """Comparison status of a hierarchy node. Plain string constants."""

    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"
    # Reserved. Never computed: diffing is identity-only.
    MODIFIED = "modified"

    ALL = (ADDED, REMOVED, UNCHANGED, MODIFIED)


# ── Date Coercion ─────────────────────────────────────────────

def coerce_date(value: object) -> Optional[date]:
    """
    Coerce an ISO string / date / datetime to a calendar date.

    Time-of-day is discarded. Anything unparseable becomes None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        # "2024-01-01", "2024-01-01T09:30:00Z", "2024-01-01 09:30"
        rest = text[10:]
        if rest and rest[0] not in "T ":
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


# ── Source Records ────────────────────────────────────────────

@dataclass(frozen=True)
class Department:
    """An organizational unit with a validity interval."""

    id: str
    name: str = ""
    code: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class Position:
    """
    A seat in the hierarchy.

    reports_to_position_id is the hierarchy edge (child -> parent).
    """

    id: str
    department_id: Optional[str] = None
    title: str = ""
    code: str = ""
    description: Optional[str] = None
    reports_to_position_id: Optional[str] = None
    is_active: bool = True
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    authorized_headcount: int = 1


@dataclass(frozen=True)
class Assignment:
    """Employee-to-position assignment. Many may share one position."""

    id: str
    employee_id: str = ""
    position_id: str = ""
    is_primary: bool = False
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    employee_name: str = ""
    employee_email: str = ""
    avatar_url: Optional[str] = None


# ── Derived ───────────────────────────────────────────────────

@dataclass
class HierarchyNode:
    """
    A position wrapped with its resolved context for one snapshot.

    children holds nodes from the same filtered set only.
    change_status is None unless a comparison is active.
    """

    position: Position
    department: Optional[Department] = None
    assignments: List[Assignment] = field(default_factory=list)
    children: List["HierarchyNode"] = field(default_factory=list)
    change_status: Optional[str] = None

    @property
    def id(self) -> str:
        return self.position.id

    @property
    def title(self) -> str:
        return self.position.title

    @property
    def is_vacant(self) -> bool:
        return not self.assignments


@dataclass
class HierarchyForest:
    """
    Arena representation of one snapshot.

    nodes: every node keyed by position id.
    roots: top-level nodes, in sibling order once sorted.
    """

    nodes: Dict[str, HierarchyNode] = field(default_factory=dict)
    roots: List[HierarchyNode] = field(default_factory=list)
    # Positions whose declared parent was not in the filtered set.
    promoted_orphans: Tuple[str, ...] = ()
    # Positions detached from their parent to break a reporting cycle.
    cycle_breaks: Tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.nodes)

    def get(self, position_id: str) -> Optional[HierarchyNode]:
        return self.nodes.get(position_id)
