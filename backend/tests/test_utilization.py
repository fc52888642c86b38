from datetime import date

import pytest

from resourcio.config import UtilizationThresholds
from resourcio.services.utilization import (
    UtilizationCategory,
    available_count,
    build_capacity_alerts,
    build_utilization_report,
    calculate_kpis,
    categorize,
    conflict_count,
    effective_capacity,
    filter_overlapping,
    summarize_departments,
    utilization,
    weekly_hours_for,
)

T = UtilizationThresholds()


def alloc(id, resource_id=1, hours=20, start="2025-01-06", end="2025-12-19", status="active", weekly=None):
    return {
        "id": id,
        "resource_id": resource_id,
        "project_id": 1,
        "allocated_hours": hours,
        "start_date": start,
        "end_date": end,
        "status": status,
        "weekly_allocations": weekly or {},
    }


ANNA = {"id": 1, "name": "Anna", "department": "IT", "weekly_capacity": 40}


# ── filter_overlapping ──


def test_filter_overlapping_keeps_any_overlap():
    rows = [
        alloc(1, start="2025-01-01", end="2025-01-31"),  # before
        alloc(2, start="2025-01-15", end="2025-02-10"),  # partial, left
        alloc(3, start="2025-02-05", end="2025-02-20"),  # inside
        alloc(4, start="2025-02-25", end="2025-03-15"),  # partial, right
        alloc(5, start="2025-03-01", end="2025-03-31"),  # after
        alloc(6, start="2025-01-01", end="2025-12-31"),  # covers
    ]
    kept = filter_overlapping(rows, "2025-02-01", "2025-02-28")
    assert [a["id"] for a in kept] == [2, 3, 4, 6]


def test_filter_overlapping_inclusive_edges():
    rows = [alloc(1, start="2025-01-01", end="2025-02-01"), alloc(2, start="2025-02-28", end="2025-03-05")]
    kept = filter_overlapping(rows, date(2025, 2, 1), date(2025, 2, 28))
    assert [a["id"] for a in kept] == [1, 2]


def test_filter_overlapping_skips_bad_dates():
    rows = [alloc(1, start="not-a-date"), alloc(2)]
    assert [a["id"] for a in filter_overlapping(rows, "2025-06-01", "2025-06-30")] == [2]


def test_filter_overlapping_camel_case_records():
    row = {"id": 1, "resourceId": 1, "projectId": 1, "startDate": "2025-06-01", "endDate": "2025-06-30"}
    assert filter_overlapping([row], "2025-06-15", "2025-07-15") == [row]


# ── weekly_hours_for ──


def test_weekly_override_wins():
    a = alloc(1, hours=20, weekly={"2025-W34": 8})
    assert weekly_hours_for(a, "2025-W34") == 8
    assert weekly_hours_for(a, "2025-W35") == 20


def test_weekly_hours_outside_range_is_zero():
    a = alloc(1, hours=20, start="2025-03-03", end="2025-03-28")
    assert weekly_hours_for(a, "2025-W34") == 0
    assert weekly_hours_for(a, "bogus") == 0


# ── capacity & utilization ──


def test_effective_capacity():
    assert effective_capacity({"weekly_capacity": 40}, 8) == 32
    assert effective_capacity({"weekly_capacity": 6}, 8) == 0
    assert effective_capacity({"weeklyCapacity": "36"}, 8) == 28
    assert effective_capacity({}, 8) == 0


def test_utilization_without_allocations_is_zero():
    assert utilization(ANNA, [], non_project_hours=8) == 0


def test_utilization_zero_capacity_is_zero():
    tiny = {"id": 9, "weekly_capacity": 5}
    assert utilization(tiny, [alloc(1, resource_id=9)], non_project_hours=8) == 0


def test_utilization_week_override_example():
    allocations = [alloc(1, hours=30, weekly={"2025-W34": 8})]
    pct = utilization(ANNA, allocations, week_key="2025-W34", non_project_hours=8)
    assert pct == pytest.approx(25.0)
    assert categorize(pct, T) is UtilizationCategory.UNDER_UTILIZED


def test_utilization_flat_hours_example():
    allocations = [alloc(1, hours=20), alloc(2, hours=16)]
    pct = utilization(ANNA, allocations, non_project_hours=8)
    assert pct == pytest.approx(112.5)
    assert categorize(pct, T) is UtilizationCategory.ERROR


def test_utilization_ignores_other_resources_and_inactive_allocations():
    allocations = [
        alloc(1, hours=16),
        alloc(2, hours=16, status="planned"),
        alloc(3, hours=16, status="completed"),
        alloc(4, resource_id=2, hours=40),
    ]
    assert utilization(ANNA, allocations, non_project_hours=8) == pytest.approx(50.0)


def test_garbage_hours_count_as_zero():
    allocations = [alloc(1, hours="abc"), alloc(2, hours=float("nan")), alloc(3, hours=None), alloc(4, hours=8)]
    assert utilization(ANNA, allocations, non_project_hours=8) == pytest.approx(25.0)


def test_engine_is_idempotent():
    allocations = [alloc(1, hours=20), alloc(2, hours=16, weekly={"2025-W34": 4})]
    first = build_utilization_report([ANNA], allocations, "2025-08-18", "2025-08-24", week_key="2025-W34",
                                     thresholds=T, non_project_hours=8)
    second = build_utilization_report([ANNA], allocations, "2025-08-18", "2025-08-24", week_key="2025-W34",
                                      thresholds=T, non_project_hours=8)
    assert first == second


# ── categorize ──


@pytest.mark.parametrize("pct,expected", [
    (0, UtilizationCategory.UNDER_UTILIZED),
    (49.9, UtilizationCategory.UNDER_UTILIZED),
    (50, UtilizationCategory.OPTIMAL),
    (89.99, UtilizationCategory.OPTIMAL),
    (90, UtilizationCategory.WARNING),
    (100, UtilizationCategory.ERROR),
    (119.9, UtilizationCategory.ERROR),
    (120, UtilizationCategory.CRITICAL),
    (300, UtilizationCategory.CRITICAL),
])
def test_categorize_boundaries(pct, expected):
    assert categorize(pct, T) is expected


def test_categorize_custom_thresholds():
    strict = UtilizationThresholds(optimal_min=60, optimal_max=80, warning=80, error=95, critical=110)
    assert categorize(55, strict) is UtilizationCategory.UNDER_UTILIZED
    assert categorize(85, strict) is UtilizationCategory.WARNING
    assert categorize(96, strict) is UtilizationCategory.ERROR


def test_thresholds_must_be_ordered():
    with pytest.raises(ValueError):
        UtilizationThresholds(optimal_min=90, optimal_max=50)
    with pytest.raises(ValueError):
        UtilizationThresholds(error=130, critical=120)


# ── reports ──


def _report(resources, allocations, **kw):
    kw.setdefault("thresholds", T)
    kw.setdefault("non_project_hours", 8)
    return build_utilization_report(resources, allocations, "2025-06-01", "2025-06-30", **kw)


def test_report_rows_and_counts():
    resources = [
        ANNA,
        {"id": 2, "name": "Bram", "department": "IT", "weekly_capacity": 40},
        {"id": 3, "name": "Chloe", "department": "Ops", "weekly_capacity": 40},
        {"id": 4, "name": "Finn", "department": "IT", "weekly_capacity": 40, "is_active": False},
    ]
    allocations = [alloc(1, 1, 36), alloc(2, 2, 32), alloc(3, 3, 8), alloc(4, 4, 80)]
    report = _report(resources, allocations)

    by_id = {r.resource_id: r for r in report.resources}
    assert by_id[1].utilization_percentage == 112.5
    assert by_id[1].category is UtilizationCategory.ERROR
    assert by_id[2].utilization_percentage == 100.0
    assert by_id[3].total_allocated_hours == 8
    assert by_id[3].effective_capacity == 32
    # inactive resources are reported but never counted
    assert report.conflicts == 1
    assert report.available == 1
    assert conflict_count(report.resources) == 1
    assert available_count(report.resources) == 1


def test_report_drops_malformed_and_deleted_records():
    resources = [ANNA, {"name": "no id", "weekly_capacity": 40}, {"id": 7, "name": "Gone", "is_deleted": True}]
    allocations = [alloc(1, 1, 16), {"id": 2, "allocated_hours": 40}, None]
    report = _report(resources, allocations)
    assert [r.resource_id for r in report.resources] == [1]
    assert report.resources[0].total_allocated_hours == 16


def test_report_department_filter():
    resources = [ANNA, {"id": 3, "name": "Chloe", "department": "Ops", "weekly_capacity": 40}]
    report = _report(resources, [], department="Ops")
    assert [r.resource_id for r in report.resources] == [3]


def test_report_window_excludes_non_overlapping():
    allocations = [alloc(1, 1, 16, start="2025-01-06", end="2025-03-28"), alloc(2, 1, 8)]
    report = _report([ANNA], allocations)
    assert report.resources[0].total_allocated_hours == 8


def test_report_week_key_sets_window():
    report = build_utilization_report([ANNA], [alloc(1, hours=30, weekly={"2025-W34": 8})],
                                      week_key="2025-W34", thresholds=T, non_project_hours=8)
    assert report.start_date == date(2025, 8, 18)
    assert report.end_date == date(2025, 8, 24)
    assert report.resources[0].utilization_percentage == 25.0
    assert report.resources[0].category is UtilizationCategory.UNDER_UTILIZED


def test_calculate_kpis():
    resources = [ANNA, {"id": 2, "name": "Bram", "department": "IT", "weekly_capacity": 40}]
    projects = [
        {"id": 1, "status": "active", "start_date": "2025-01-06", "end_date": "2025-12-19"},
        {"id": 2, "status": "active", "start_date": "2026-01-05", "end_date": "2026-06-26"},
        {"id": 3, "status": "draft", "start_date": "2025-01-06", "end_date": "2025-12-19"},
    ]
    allocations = [alloc(1, 1, 40), alloc(2, 2, 8)]
    kpis = calculate_kpis(resources, projects, allocations, "2025-06-01", "2025-06-30",
                          thresholds=T, non_project_hours=8)
    assert kpis.active_projects == 1
    assert kpis.total_projects == 3
    assert kpis.conflicts == 1
    assert kpis.available_resources == 1
    assert kpis.utilization == 75.0  # 48 / 64


def test_capacity_alerts_grouping():
    resources = [
        {"id": i, "name": f"R{i}", "department": "IT", "weekly_capacity": 40} for i in range(1, 6)
    ]
    allocations = [alloc(1, 1, 40), alloc(2, 2, 33), alloc(3, 3, 30), alloc(4, 4, 8)]
    report = _report(resources, allocations)
    categories = build_capacity_alerts(report, T)

    assert [c.type for c in categories] == ["critical", "error", "warning", "under_utilized", "unassigned"]
    counts = {c.type: c.count for c in categories}
    assert counts == {"critical": 1, "error": 1, "warning": 1, "under_utilized": 1, "unassigned": 1}
    assert categories[0].threshold == 120


def test_warning_must_match_optimal_max():
    with pytest.raises(ValueError):
        UtilizationThresholds(optimal_max=90, warning=95)
    shifted = UtilizationThresholds(optimal_max=95, warning=95)
    assert categorize(92, shifted) is UtilizationCategory.OPTIMAL
    assert categorize(95, shifted) is UtilizationCategory.WARNING


def test_department_does_not_fall_back_to_job_title():
    dev = {"id": 7, "name": "Daan", "role": "Developer", "weekly_capacity": 40}
    assert _report([dev], [], department="Developer").resources == []
    row = _report([dev], []).resources[0]
    assert row.department == "General"


def test_summarize_departments():
    resources = [
        {"id": 1, "name": "A", "department": "Ops", "weekly_capacity": 40},
        {"id": 2, "name": "B", "department": "Ops", "weekly_capacity": 40, "is_active": False},
        {"id": 3, "name": "C", "department": "IT", "weekly_capacity": 40, "is_deleted": True},
    ]
    assert summarize_departments(resources, always=("IT",)) == [("IT", 0, 0), ("Ops", 2, 1)]
