"""
Org Change Timeline — monthly movement report.

One MonthlyChange per calendar month touching [start, end]:

  active_*            records whose interval overlaps the month
  positions_added     positions whose start_date falls in the month
  positions_removed   positions whose end_date falls in the month
  employee_joins      assignments starting in the month
  employee_departures assignments ending in the month

active_employees counts distinct employee ids, not assignments.

Also: year_over_year (closing counts against one year earlier),
month_details (the named records behind one bucket) and
department_breakdown (largest departments by active positions).
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .constants import ALL_DEPARTMENTS
from .domain_types import Assignment, Department, Position, coerce_date
from .scope import scope_to_department
from .temporal import filter_active, is_active_during


@dataclass(frozen=True)
class MonthlyChange:
    month: date            # first day of the month
    active_positions: int
    positions_added: int
    positions_removed: int
    active_departments: int
    active_employees: int
    employee_joins: int
    employee_departures: int

    @property
    def net_change(self) -> int:
        return self.positions_added - self.positions_removed

    @property
    def label(self) -> str:
        return self.month.strftime("%b %Y")

    def to_dict(self) -> dict:
        return {
            "month": self.month.isoformat(),
            "label": self.label,
            "active_positions": self.active_positions,
            "positions_added": self.positions_added,
            "positions_removed": self.positions_removed,
            "active_departments": self.active_departments,
            "active_employees": self.active_employees,
            "employee_joins": self.employee_joins,
            "employee_departures": self.employee_departures,
            "net_change": self.net_change,
        }


@dataclass(frozen=True)
class TimelineSummary:
    total_positions_added: int
    total_positions_removed: int
    total_employee_joins: int
    total_employee_departures: int
    position_growth: int       # last month active - first month active
    employee_growth: int
    current_positions: int
    current_employees: int
    current_departments: int

    @property
    def net_position_change(self) -> int:
        return self.total_positions_added - self.total_positions_removed

    @property
    def net_employee_change(self) -> int:
        return self.total_employee_joins - self.total_employee_departures

    def to_dict(self) -> dict:
        return {
            "total_positions_added": self.total_positions_added,
            "total_positions_removed": self.total_positions_removed,
            "net_position_change": self.net_position_change,
            "total_employee_joins": self.total_employee_joins,
            "total_employee_departures": self.total_employee_departures,
            "net_employee_change": self.net_employee_change,
            "position_growth": self.position_growth,
            "employee_growth": self.employee_growth,
            "current_positions": self.current_positions,
            "current_employees": self.current_employees,
            "current_departments": self.current_departments,
        }


def month_starts(start: date, end: date) -> List[date]:
    """First day of every month touching [start, end]. Empty if start > end."""
    if start > end:
        return []
    months: List[date] = []
    current = start.replace(day=1)
    while current <= end:
        months.append(current)
        if current.month == 12:
            current = current.replace(year=current.year + 1, month=1)
        else:
            current = current.replace(month=current.month + 1)
    return months


def month_end(month: date) -> date:
    return month.replace(day=calendar.monthrange(month.year, month.month)[1])


def _within(value: object, lo: date, hi: date) -> bool:
    day = coerce_date(value)
    return day is not None and lo <= day <= hi


def compute_timeline(
    departments: Sequence[Department],
    positions: Sequence[Position],
    assignments: Sequence[Assignment],
    start_date: object,
    end_date: object,
    department_id: str = ALL_DEPARTMENTS,
) -> List[MonthlyChange]:
    """Monthly change buckets. Unparseable or inverted bounds yield []."""
    start = coerce_date(start_date)
    end = coerce_date(end_date)
    if start is None or end is None:
        return []

    depts, poss, asgs = scope_to_department(
        departments, positions, assignments, department_id,
    )

    result: List[MonthlyChange] = []
    for first in month_starts(start, end):
        last = month_end(first)
        active_asgs = [a for a in asgs if is_active_during(a, first, last)]
        result.append(MonthlyChange(
            month=first,
            active_positions=sum(1 for p in poss if is_active_during(p, first, last)),
            positions_added=sum(1 for p in poss if _within(p.start_date, first, last)),
            positions_removed=sum(1 for p in poss if _within(p.end_date, first, last)),
            active_departments=sum(1 for d in depts if is_active_during(d, first, last)),
            active_employees=len({a.employee_id for a in active_asgs}),
            employee_joins=sum(1 for a in asgs if _within(a.start_date, first, last)),
            employee_departures=sum(1 for a in asgs if _within(a.end_date, first, last)),
        ))
    return result


def summarize_timeline(months: Sequence[MonthlyChange]) -> Optional[TimelineSummary]:
    """Totals and first-to-last growth. None for an empty timeline."""
    if not months:
        return None
    first, last = months[0], months[-1]
    return TimelineSummary(
        total_positions_added=sum(m.positions_added for m in months),
        total_positions_removed=sum(m.positions_removed for m in months),
        total_employee_joins=sum(m.employee_joins for m in months),
        total_employee_departures=sum(m.employee_departures for m in months),
        position_growth=last.active_positions - first.active_positions,
        employee_growth=last.active_employees - first.active_employees,
        current_positions=last.active_positions,
        current_employees=last.active_employees,
        current_departments=last.active_departments,
    )


# ---------------------------------------------------------------------------
# Year-over-year comparison
# ---------------------------------------------------------------------------

def percent_growth(current: int, previous: int) -> float:
    """Relative change in percent. A zero baseline gives 100 or 0."""
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100.0


def shift_years(day: date, years: int) -> date:
    """Same calendar day `years` later; 29 Feb falls back to 28 Feb."""
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        return day.replace(year=day.year + years, day=28)


@dataclass(frozen=True)
class GrowthMetric:
    current: int
    previous: int

    @property
    def change(self) -> int:
        return self.current - self.previous

    @property
    def percent_growth(self) -> float:
        return percent_growth(self.current, self.previous)

    def to_dict(self) -> dict:
        return {
            "current": self.current,
            "previous": self.previous,
            "change": self.change,
            "percent_growth": self.percent_growth,
        }


@dataclass(frozen=True)
class YearOverYear:
    """End-of-period counts against the same day one year earlier."""

    positions: GrowthMetric
    employees: GrowthMetric
    departments: GrowthMetric
    previous_start: date
    previous_end: date

    @property
    def previous_period_label(self) -> str:
        return (
            f"{self.previous_start.strftime('%b %Y')} - "
            f"{self.previous_end.strftime('%b %Y')}"
        )

    def to_dict(self) -> dict:
        return {
            "positions": self.positions.to_dict(),
            "employees": self.employees.to_dict(),
            "departments": self.departments.to_dict(),
            "previous_start": self.previous_start.isoformat(),
            "previous_end": self.previous_end.isoformat(),
            "previous_period_label": self.previous_period_label,
        }


def year_over_year(
    departments: Sequence[Department],
    positions: Sequence[Position],
    assignments: Sequence[Assignment],
    start_date: object,
    end_date: object,
    department_id: str = ALL_DEPARTMENTS,
) -> Optional[YearOverYear]:
    """
    Compare the period's closing counts with the year before.

    Current figures are the last month of the timeline; previous
    figures are records active on end_date minus one year. None when
    the timeline is empty.
    """
    summary = summarize_timeline(compute_timeline(
        departments, positions, assignments, start_date, end_date,
        department_id=department_id,
    ))
    if summary is None:
        return None
    start = coerce_date(start_date)
    end = coerce_date(end_date)
    previous_end = shift_years(end, -1)

    depts, poss, asgs = scope_to_department(
        departments, positions, assignments, department_id,
    )
    previous_employees = {
        a.employee_id for a in filter_active(asgs, previous_end)
    }
    return YearOverYear(
        positions=GrowthMetric(
            summary.current_positions, len(filter_active(poss, previous_end)),
        ),
        employees=GrowthMetric(
            summary.current_employees, len(previous_employees),
        ),
        departments=GrowthMetric(
            summary.current_departments, len(filter_active(depts, previous_end)),
        ),
        previous_start=shift_years(start, -1),
        previous_end=previous_end,
    )


# ---------------------------------------------------------------------------
# Month drill-down
# ---------------------------------------------------------------------------

UNKNOWN_NAME = "Unknown"


@dataclass(frozen=True)
class PositionEntry:
    id: str
    title: str
    code: str
    department_name: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "code": self.code,
            "department_name": self.department_name,
        }


@dataclass(frozen=True)
class EmployeeEntry:
    employee_id: str
    name: str
    position_titles: Tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "name": self.name,
            "position_titles": list(self.position_titles),
        }


@dataclass(frozen=True)
class MovementEntry:
    """One assignment starting or ending in the month."""

    assignment_id: str
    employee_id: str
    employee_name: str
    position_title: str
    on: Optional[date]

    def to_dict(self) -> dict:
        return {
            "assignment_id": self.assignment_id,
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "position_title": self.position_title,
            "date": self.on.isoformat() if self.on else None,
        }


@dataclass(frozen=True)
class MonthDetails:
    month: date
    active_positions: Tuple[PositionEntry, ...]
    positions_added: Tuple[PositionEntry, ...]
    positions_removed: Tuple[PositionEntry, ...]
    active_employees: Tuple[EmployeeEntry, ...]
    employee_joins: Tuple[MovementEntry, ...]
    employee_departures: Tuple[MovementEntry, ...]

    def to_dict(self) -> dict:
        return {
            "month": self.month.isoformat(),
            "label": self.month.strftime("%b %Y"),
            "active_positions": [p.to_dict() for p in self.active_positions],
            "positions_added": [p.to_dict() for p in self.positions_added],
            "positions_removed": [p.to_dict() for p in self.positions_removed],
            "active_employees": [e.to_dict() for e in self.active_employees],
            "employee_joins": [m.to_dict() for m in self.employee_joins],
            "employee_departures": [m.to_dict() for m in self.employee_departures],
        }


def _employee_names(assignments: Iterable[Assignment]) -> Dict[str, str]:
    # First non-empty name, else first non-empty email, per employee.
    names: Dict[str, str] = {}
    emails: Dict[str, str] = {}
    for a in assignments:
        if a.employee_name and a.employee_id not in names:
            names[a.employee_id] = a.employee_name
        if a.employee_email and a.employee_id not in emails:
            emails[a.employee_id] = a.employee_email
    return {**emails, **names}


def month_details(
    departments: Sequence[Department],
    positions: Sequence[Position],
    assignments: Sequence[Assignment],
    month: object,
    department_id: str = ALL_DEPARTMENTS,
) -> Optional[MonthDetails]:
    """
    Named records behind one MonthlyChange bucket.

    Names resolve against the unscoped tables; unresolvable ids read
    "Unknown". Entries keep input order. None for an unparseable month.
    """
    day = coerce_date(month)
    if day is None:
        return None
    first = day.replace(day=1)
    last = month_end(first)

    department_names = {d.id: d.name for d in reversed(departments)}
    position_titles = {p.id: p.title for p in reversed(positions)}
    employee_names = _employee_names(assignments)

    _, poss, asgs = scope_to_department(
        departments, positions, assignments, department_id,
    )

    def position_entry(p: Position) -> PositionEntry:
        return PositionEntry(
            id=p.id, title=p.title, code=p.code,
            department_name=department_names.get(p.department_id) or UNKNOWN_NAME,
        )

    def movement(a: Assignment, on: object) -> MovementEntry:
        return MovementEntry(
            assignment_id=a.id,
            employee_id=a.employee_id,
            employee_name=employee_names.get(a.employee_id, UNKNOWN_NAME),
            position_title=position_titles.get(a.position_id) or UNKNOWN_NAME,
            on=coerce_date(on),
        )

    active_asgs = [a for a in asgs if is_active_during(a, first, last)]
    held: Dict[str, List[str]] = {}
    for a in active_asgs:
        held.setdefault(a.employee_id, []).append(
            position_titles.get(a.position_id) or UNKNOWN_NAME
        )

    return MonthDetails(
        month=first,
        active_positions=tuple(
            position_entry(p) for p in poss if is_active_during(p, first, last)
        ),
        positions_added=tuple(
            position_entry(p) for p in poss if _within(p.start_date, first, last)
        ),
        positions_removed=tuple(
            position_entry(p) for p in poss if _within(p.end_date, first, last)
        ),
        active_employees=tuple(
            EmployeeEntry(
                employee_id=emp,
                name=employee_names.get(emp, UNKNOWN_NAME),
                position_titles=tuple(titles),
            )
            for emp, titles in held.items()
        ),
        employee_joins=tuple(
            movement(a, a.start_date) for a in asgs
            if _within(a.start_date, first, last)
        ),
        employee_departures=tuple(
            movement(a, a.end_date) for a in asgs
            if _within(a.end_date, first, last)
        ),
    )


# ---------------------------------------------------------------------------
# Department breakdown
# ---------------------------------------------------------------------------

DEFAULT_BREAKDOWN_LIMIT = 6


@dataclass(frozen=True)
class DepartmentCount:
    name: str
    positions: int

    def to_dict(self) -> dict:
        return {"name": self.name, "positions": self.positions}


def department_breakdown(
    departments: Sequence[Department],
    positions: Sequence[Position],
    reference_date: object,
    department_id: str = ALL_DEPARTMENTS,
    limit: int = DEFAULT_BREAKDOWN_LIMIT,
) -> List[DepartmentCount]:
    """
    Active positions per department name at reference_date, largest
    first (ties by name), at most `limit` entries.

    Positions whose department id is unknown are not counted.
    """
    _, poss, _ = scope_to_department(departments, positions, (), department_id)
    department_names = {d.id: d.name for d in reversed(departments)}
    counts: Dict[str, int] = {}
    for p in filter_active(poss, reference_date):
        name = department_names.get(p.department_id)
        if name is None:
            continue
        counts[name] = counts.get(name, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [DepartmentCount(name, n) for name, n in ranked[:max(limit, 0)]]
