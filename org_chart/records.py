"""
Org Chart Kernel — Record Decoder v1.0

Decode raw storage rows (plain dicts, as returned by the hosted
database client) into frozen domain records.

Rules:
  - Every row must be a mapping with a non-empty "id".
  - Unknown fields are ignored. Optional fields default.
  - Dates are coerced; unparseable dates become None (never active).
  - Nested employee objects ("employee": {"full_name", "email", ...})
    are flattened onto the assignment.
  - No mutation of the input rows.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from .constants import DEFAULT_AUTHORIZED_HEADCOUNT
from .domain_types import Assignment, Department, Position, coerce_date


# ══════════════════════════════════════════════════════════════
# Exception Hierarchy
# ══════════════════════════════════════════════════════════════

class RecordError(Exception):
    """Base exception for record decoding."""


class RecordDecodeError(RecordError):
    """Raised when a raw row cannot be turned into a record."""

    def __init__(self, table: str, index: int, detail: str) -> None:
        self.table = table
        self.index = index
        self.detail = detail
        super().__init__(f"{table}[{index}]: {detail}")


# ══════════════════════════════════════════════════════════════
# Single-row decoders
# ══════════════════════════════════════════════════════════════

def decode_department(row: Mapping[str, Any], index: int = 0) -> Department:
    _require_id(row, "departments", index)
    return Department(
        id=str(row["id"]),
        name=_text(row.get("name")),
        code=_text(row.get("code")),
        start_date=coerce_date(row.get("start_date")),
        end_date=coerce_date(row.get("end_date")),
    )


def decode_position(row: Mapping[str, Any], index: int = 0) -> Position:
    _require_id(row, "positions", index)
    headcount = row.get("authorized_headcount")
    if not isinstance(headcount, int) or isinstance(headcount, bool):
        headcount = DEFAULT_AUTHORIZED_HEADCOUNT
    return Position(
        id=str(row["id"]),
        department_id=_optional_id(row.get("department_id")),
        title=_text(row.get("title")),
        code=_text(row.get("code")),
        description=row.get("description"),
        reports_to_position_id=_optional_id(row.get("reports_to_position_id")),
        is_active=bool(row.get("is_active", True)),
        start_date=coerce_date(row.get("start_date")),
        end_date=coerce_date(row.get("end_date")),
        authorized_headcount=headcount,
    )


def decode_assignment(row: Mapping[str, Any], index: int = 0) -> Assignment:
    _require_id(row, "assignments", index)
    employee = row.get("employee")
    if not isinstance(employee, Mapping):
        employee = {}
    return Assignment(
        id=str(row["id"]),
        employee_id=_text(row.get("employee_id")),
        position_id=_text(row.get("position_id")),
        is_primary=bool(row.get("is_primary", False)),
        start_date=coerce_date(row.get("start_date")),
        end_date=coerce_date(row.get("end_date")),
        employee_name=_text(
            row.get("employee_name", employee.get("full_name"))
        ),
        employee_email=_text(
            row.get("employee_email", employee.get("email"))
        ),
        avatar_url=row.get("avatar_url", employee.get("avatar_url")),
    )


# ══════════════════════════════════════════════════════════════
# Table decoders
# ══════════════════════════════════════════════════════════════

def decode_departments(rows: Iterable[Mapping[str, Any]]) -> List[Department]:
    return [decode_department(r, i) for i, r in enumerate(rows)]


def decode_positions(rows: Iterable[Mapping[str, Any]]) -> List[Position]:
    return [decode_position(r, i) for i, r in enumerate(rows)]


def decode_assignments(rows: Iterable[Mapping[str, Any]]) -> List[Assignment]:
    return [decode_assignment(r, i) for i, r in enumerate(rows)]


# ══════════════════════════════════════════════════════════════
# Internal helpers
# ══════════════════════════════════════════════════════════════

def _require_id(row: Any, table: str, index: int) -> None:
    if not isinstance(row, Mapping):
        raise RecordDecodeError(
            table, index, f"row must be an object, got {type(row).__name__}"
        )
    rid = row.get("id")
    if rid is None or str(rid) == "":
        raise RecordDecodeError(table, index, "missing 'id'")


def _optional_id(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _text(value: Any) -> str:
    return "" if value is None else str(value)
