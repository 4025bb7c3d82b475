"""
Org Chart Kernel — Snapshot Comparison Tests

Deterministic tests:
  1-5:   Snapshot differ (partition, identity semantics)
  6-7:   Aggregator
  8-13:  Engine scenarios (comparison, removal, scope, dates)
  14-16: Canonical serialization, hashing, diagnostics
  17:    Aggregator against end-dated positions

Run:  python -m org_chart.test_comparison
"""

from __future__ import annotations

import sys

from org_chart.aggregator import summarize
from org_chart.constants import ALL_DEPARTMENTS
from org_chart.differ import diff_snapshots
from org_chart.domain_types import (
    Assignment,
    ChangeStatus,
    Department,
    Position,
    coerce_date,
)
from org_chart.engine import OrgChartEngine, build_org_chart
from org_chart.graph import walk_depth_first
from org_chart.hashing import canonical_hash, canonical_serialize, chart_to_dict


# ══════════════════════════════════════════════════════════════
# Test Fixtures
# ══════════════════════════════════════════════════════════════

def _dept(did: str, name: str, start: str = "2020-01-01",
          end: str | None = None) -> Department:
    return Department(
        id=did, name=name, code=did,
        start_date=coerce_date(start), end_date=coerce_date(end),
    )


def _pos(pid: str, title: str, reports_to: str | None = None,
         dept: str = "D1", start: str = "2023-01-01",
         end: str | None = None) -> Position:
    return Position(
        id=pid, department_id=dept, title=title, code=pid,
        reports_to_position_id=reports_to,
        start_date=coerce_date(start), end_date=coerce_date(end),
    )


def _assign(aid: str, position_id: str, employee_id: str,
            primary: bool = True, start: str = "2020-01-01",
            end: str | None = None) -> Assignment:
    return Assignment(
        id=aid, employee_id=employee_id, position_id=position_id,
        is_primary=primary, employee_name=employee_id,
        start_date=coerce_date(start), end_date=coerce_date(end),
    )


def _make_company() -> OrgChartEngine:
    """
    D1 Head Office (2020-), D2 Sales (2020-).

    P1 CEO         2020-          D1
    P2 CTO         2023-01-01-    D1  -> P1
    P3 COO         2020 - 2023-06-30  D1  -> P1   (removed by 2024)
    P4 Sales Lead  2020-          D2  -> P1
    P5 Sales Rep   2020-          D2  -> P4
    """
    departments = [_dept("D1", "Head Office"), _dept("D2", "Sales")]
    positions = [
        _pos("P1", "CEO", start="2020-01-01"),
        _pos("P2", "CTO", reports_to="P1", start="2023-01-01"),
        _pos("P3", "COO", reports_to="P1", start="2020-01-01", end="2023-06-30"),
        _pos("P4", "Sales Lead", reports_to="P1", dept="D2", start="2020-01-01"),
        _pos("P5", "Sales Rep", reports_to="P4", dept="D2", start="2020-01-01"),
    ]
    assignments = [
        _assign("A1", "P1", "E1"),
        _assign("A3", "P3", "E3", end="2023-06-30"),
        _assign("A4", "P4", "E4"),
        _assign("A5", "P5", "E5"),
        _assign("A6", "P5", "E6", primary=False, start="2024-02-01"),
    ]
    return OrgChartEngine(departments, positions, assignments)


def _header(title: str) -> None:
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}")


# ══════════════════════════════════════════════════════════════
# Differ (1 – 5)
# ══════════════════════════════════════════════════════════════

def test_01_added_only() -> None:
    """Comparison before P2 started -> added=[P2], unchanged=[P1]."""
    _header("Test 01 -- Added position")
    current = [_pos("P1", "CEO"), _pos("P2", "CTO", reports_to="P1")]
    comparison = [_pos("P1", "CEO")]
    diff = diff_snapshots(current, comparison)
    assert diff.added == ["P2"]
    assert diff.removed == []
    assert diff.unchanged == ["P1"]
    print("  [PASS]")


def test_02_partition_is_total_and_disjoint() -> None:
    _header("Test 02 -- Diff partition")
    current = [_pos(i, f"T{i}") for i in ["a", "b", "c", "d"]]
    comparison = [_pos(i, f"T{i}") for i in ["c", "d", "e", "f", "g"]]
    diff = diff_snapshots(current, comparison)

    added = set(diff.added)
    removed = set(diff.removed_ids)
    unchanged = set(diff.unchanged)
    assert not (added & removed)
    assert not (added & unchanged)
    assert not (removed & unchanged)
    assert added | removed | unchanged == set("abcdefg")
    assert diff.added == ["a", "b"]
    assert diff.unchanged == ["c", "d"]
    assert diff.removed_ids == ["e", "f", "g"]
    print("  [PASS]")


def test_03_identity_based_not_content_based() -> None:
    """Title / department / manager changes still count as unchanged."""
    _header("Test 03 -- Identity-based diff")
    before = _pos("P1", "Head of Engineering", dept="D1", reports_to=None)
    after = _pos("P1", "VP Engineering", dept="D2", reports_to="P0")
    diff = diff_snapshots([after], [before])
    assert diff.unchanged == ["P1"]
    assert diff.added == [] and diff.removed == []
    print("  [PASS]")


def test_04_removed_carry_comparison_context() -> None:
    _header("Test 04 -- Removed carry comparison department/assignments")
    gone = _pos("P9", "Legacy Role")
    diff = diff_snapshots(
        [],
        [gone],
        comparison_assignments=[_assign("A9", "P9", "E9"), _assign("A1", "P1", "E1")],
        comparison_departments=[_dept("D1", "Head Office")],
    )
    assert diff.removed_ids == ["P9"]
    removed = diff.removed[0]
    assert removed.position is gone
    assert removed.department is not None and removed.department.name == "Head Office"
    assert [a.id for a in removed.assignments] == ["A9"]
    print("  [PASS]")


def test_05_empty_and_duplicates() -> None:
    _header("Test 05 -- Empty inputs and duplicate ids")
    empty = diff_snapshots([], [])
    assert empty.added == [] and empty.removed == [] and empty.unchanged == []

    dup = diff_snapshots([_pos("P1", "CEO"), _pos("P1", "CEO")], [])
    assert dup.added == ["P1"]
    print("  [PASS]")


# ══════════════════════════════════════════════════════════════
# Aggregator (6 – 7)
# ══════════════════════════════════════════════════════════════

def test_06_summary_of_empty_input() -> None:
    _header("Test 06 -- Summary zeros")
    summary = summarize(None, [], [], [])
    assert all(v == 0 for v in summary.to_dict().values())
    print("  [PASS]")


def test_07_summary_counts() -> None:
    _header("Test 07 -- Summary counts")
    positions = [_pos("P1", "CEO"), _pos("P2", "CTO"), _pos("P3", "CFO")]
    assignments = [
        _assign("A1", "P1", "E1"),
        _assign("A2", "P2", "E1", primary=False),
        _assign("A3", "P2", "E2"),
    ]
    diff = diff_snapshots(positions, [_pos("P1", "CEO"), _pos("P0", "Old")])
    summary = summarize(diff, positions, assignments, [_dept("D1", "HQ")])
    assert (summary.added, summary.removed, summary.unchanged) == (2, 1, 1)
    assert summary.total_positions == 3
    assert summary.total_assignments == 3
    assert summary.total_departments == 1
    assert summary.vacant_positions == 1
    assert summary.filled_headcount == 2
    assert summary.authorized_headcount == 3
    print("  [PASS]")


# ══════════════════════════════════════════════════════════════
# Engine Scenarios (8 – 13)
# ══════════════════════════════════════════════════════════════

def test_08_comparison_scenario() -> None:
    """Compare date before CTO start: CTO added, rest unchanged."""
    _header("Test 08 -- Comparison before CTO start")
    departments = [_dept("D1", "Head Office", start="2022-01-01")]
    # P1 must exist at the comparison date for it to be "unchanged".
    positions = [
        _pos("P1", "CEO", start="2022-01-01"),
        _pos("P2", "CTO", reports_to="P1", start="2023-01-01"),
    ]
    chart = build_org_chart(
        departments, positions, [], "2024-01-01", compare_date="2022-06-01",
    )
    assert chart.comparison_active
    assert chart.diff.added == ["P2"]
    assert chart.diff.removed == []
    assert chart.diff.unchanged == ["P1"]
    root = chart.roots[0]
    assert root.id == "P1" and root.change_status == ChangeStatus.UNCHANGED
    assert root.children[0].change_status == ChangeStatus.ADDED
    assert (chart.summary.added, chart.summary.removed, chart.summary.unchanged) == (1, 0, 1)
    print("  [PASS]")


def test_09_removal_scenario() -> None:
    """COO active at compare date, ended before reference date."""
    _header("Test 09 -- Removed position")
    engine = _make_company()
    chart = engine.chart("2024-01-01", compare_date="2023-01-01")

    current_ids = {n.id for n, _ in walk_depth_first(chart.roots)}
    assert "P3" not in current_ids
    assert [r.id for r in chart.removed] == ["P3"]
    removed = chart.removed[0]
    assert removed.department is not None and removed.department.id == "D1"
    assert [a.id for a in removed.assignments] == ["A3"]
    assert chart.diff.added == []
    assert sorted(chart.diff.unchanged) == ["P1", "P2", "P4", "P5"]
    print("  [PASS]")


def test_10_no_comparison() -> None:
    _header("Test 10 -- No comparison")
    chart = _make_company().chart("2024-03-01")
    assert not chart.comparison_active
    assert chart.removed == []
    assert all(
        n.change_status is None for n, _ in walk_depth_first(chart.roots)
    )
    s = chart.summary
    assert (s.added, s.removed, s.unchanged) == (0, 0, 0)
    assert s.total_positions == 4
    assert s.total_assignments == 4   # A1, A4, A5, A6
    assert s.total_departments == 2
    assert s.vacant_positions == 1    # P2
    print("  [PASS]")


def test_11_department_scope() -> None:
    """Scoping to Sales promotes Sales Lead to root (manager out of scope)."""
    _header("Test 11 -- Department scope")
    engine = _make_company()
    chart = engine.chart("2024-03-01", department_id="D2")
    assert chart.department_id == "D2"
    assert [r.id for r in chart.roots] == ["P4"]
    assert [c.id for c in chart.roots[0].children] == ["P5"]
    assert chart.forest.promoted_orphans == ("P4",)
    assert chart.summary.total_departments == 1
    assert chart.summary.total_assignments == 3

    unscoped = engine.chart("2024-03-01", department_id=ALL_DEPARTMENTS)
    assert unscoped.department_id == ALL_DEPARTMENTS
    assert [r.id for r in unscoped.roots] == ["P1"]
    print("  [PASS]")


def test_12_snapshots_do_not_mix() -> None:
    """Comparison-only positions never appear inside the current forest."""
    _header("Test 12 -- No cross-snapshot mixing")
    engine = _make_company()
    chart = engine.chart("2024-01-01", compare_date="2021-01-01")
    forest_ids = set(chart.forest.nodes)
    assert forest_ids == {"P1", "P2", "P4", "P5"}
    assert set(chart.diff.added) == {"P2"}
    assert chart.removed[0].id == "P3"
    for node in chart.forest.nodes.values():
        for child in node.children:
            assert child.id in forest_ids
    print("  [PASS]")


def test_13_date_handling() -> None:
    _header("Test 13 -- Reference / compare date handling")
    engine = _make_company()
    try:
        engine.chart("yesterday")
    except ValueError:
        pass
    else:
        raise AssertionError("invalid reference date must raise ValueError")

    chart = engine.chart("2024-01-01", compare_date="garbage")
    assert not chart.comparison_active
    assert chart.compare_date is None
    print("  [PASS]")


# ══════════════════════════════════════════════════════════════
# Serialization, Hashing, Diagnostics (14 – 16)
# ══════════════════════════════════════════════════════════════

def test_14_chart_dict_shape() -> None:
    _header("Test 14 -- Chart dict")
    chart = _make_company().chart("2024-01-01", compare_date="2023-01-01")
    data = chart_to_dict(chart)
    assert data["reference_date"] == "2024-01-01"
    assert data["compare_date"] == "2023-01-01"
    assert data["comparison_active"] is True
    assert [r["id"] for r in data["roots"]] == ["P1"]
    assert [c["id"] for c in data["roots"][0]["children"]] == ["P2", "P4"]
    removed = data["removed"]
    assert len(removed) == 1
    assert removed[0]["id"] == "P3"
    assert removed[0]["change_status"] == "removed"
    assert removed[0]["children"] == []
    assert removed[0]["department"]["name"] == "Head Office"
    assert data["summary"]["removed"] == 1
    print("  [PASS]")


def test_15_hash_stability() -> None:
    """Same query twice -> byte-identical; different date -> different hash."""
    _header("Test 15 -- Canonical hash stability")
    engine = _make_company()
    a = engine.chart("2024-01-01", compare_date="2023-01-01")
    b = engine.chart("2024-01-01", compare_date="2023-01-01")
    assert canonical_serialize(a) == canonical_serialize(b)
    assert canonical_hash(a) == canonical_hash(b)
    assert len(canonical_hash(a)) == 64

    c = engine.chart("2024-03-01", compare_date="2023-01-01")
    assert canonical_hash(a) != canonical_hash(c)

    reversed_engine = OrgChartEngine(
        list(reversed(engine.departments)),
        list(reversed(engine.positions)),
        list(reversed(engine.assignments)),
    )
    d = reversed_engine.chart("2024-01-01", compare_date="2023-01-01")
    assert canonical_hash(a) == canonical_hash(d)
    print("  [PASS]")


def test_16_diagnostics() -> None:
    _header("Test 16 -- Diagnostics")
    departments = [_dept("D1", "Head Office")]
    positions = [
        _pos("P1", "CEO"),
        _pos("P2", "Orphan", reports_to="P404"),
        _pos("P3", "Alpha", reports_to="P4"),
        _pos("P4", "Beta", reports_to="P3"),
        _pos("P5", "Nowhere", dept="D404", reports_to="P1"),
    ]
    assignments = [
        _assign("A1", "P1", "E1"),
        _assign("A2", "P3", "E1"),
        _assign("A3", "P4", "E2"),
    ]
    engine = OrgChartEngine(departments, positions, assignments)
    diag = engine.diagnostics("2024-01-01")
    assert diag["position_count"] == 5
    assert diag["root_count"] == 3          # P1, P2, P3 (cycle break)
    assert diag["promoted_orphans"] == ["P2"]
    assert diag["cycle_breaks"] == ["P3"]
    assert diag["reporting_cycles"] == [["P3", "P4"]]
    assert diag["vacant_positions"] == ["P2", "P5"]
    assert diag["missing_department"] == ["P5"]
    assert diag["multiple_primary_employees"] == ["E1"]
    assert diag["max_depth"] == 1
    assert len(diag["warnings"]) == 4
    print("  [PASS]")


def test_17_assignments_on_ended_positions() -> None:
    """An open assignment on an end-dated position is not counted."""
    _header("Test 17 -- Assignment count follows current positions")
    engine = OrgChartEngine(
        [_dept("D1", "Head Office")],
        [
            _pos("P1", "CEO", start="2020-01-01"),
            _pos("P2", "Analyst", reports_to="P1", start="2020-01-01", end="2023-12-31"),
        ],
        [
            _assign("A1", "P1", "E1"),
            _assign("A2", "P2", "E2"),
        ],
    )
    s = engine.chart("2024-03-01").summary
    assert s.total_positions == 1
    assert s.total_assignments == 1
    assert s.filled_headcount == 1
    assert s.vacant_positions == 0
    print("  [PASS]")


# ══════════════════════════════════════════════════════════════
# Runner
# ══════════════════════════════════════════════════════════════

def main() -> None:
    tests = [
        test_01_added_only,
        test_02_partition_is_total_and_disjoint,
        test_03_identity_based_not_content_based,
        test_04_removed_carry_comparison_context,
        test_05_empty_and_duplicates,
        test_06_summary_of_empty_input,
        test_07_summary_counts,
        test_08_comparison_scenario,
        test_09_removal_scenario,
        test_10_no_comparison,
        test_11_department_scope,
        test_12_snapshots_do_not_mix,
        test_13_date_handling,
        test_14_chart_dict_shape,
        test_15_hash_stability,
        test_16_diagnostics,
        test_17_assignments_on_ended_positions,
    ]
    results = []
    for fn in tests:
        try:
            fn()
            results.append(True)
        except Exception as e:
            print(f"\n[ERROR] {fn.__name__}: {e}")
            import traceback
            traceback.print_exc()
            results.append(False)

    passed = sum(results)
    total = len(results)
    print(f"\n{'='*60}")
    print(f"  RESULTS: {passed}/{total} tests passed")
    print(f"{'='*60}")
    sys.exit(0 if all(results) else 1)


if __name__ == "__main__":
    main()
