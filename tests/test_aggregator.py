from datetime import date

import pytest

from billing_engine.aggregator import (
    GroupBy,
    compute_summary,
    day_total_minutes,
    group_by_work_date,
    group_entries,
    select_entries,
    week_start,
)
from billing_engine.models.time_entry import GroupingRefs, TimeEntry


def make_entry(entry_id, minutes, *, owner="u1", project="p1", task="t1", rate=None, day=date(2025, 9, 15), **labels):
    return TimeEntry(
        id=entry_id,
        duration_minutes=minutes,
        work_date=day,
        owner_ref=owner,
        grouping_refs=GroupingRefs(project_ref=project, task_ref=task),
        hourly_rate=rate,
        **labels,
    )


def test_group_by_user_scenario():
    entries = [
        make_entry("a", 480, owner="ayse", rate=250, owner_name="Ayse"),
        make_entry("b", 360, owner="mehmet", rate=300, owner_name="Mehmet"),
    ]
    groups = group_entries(entries, GroupBy.user)
    assert [g.key for g in groups] == ["ayse", "mehmet"]
    assert [g.label for g in groups] == ["Ayse", "Mehmet"]
    assert [g.total_hours for g in groups] == [8.0, 6.0]
    assert [g.total_amount for g in groups] == [2000.0, 1800.0]
    assert [g.entries_count for g in groups] == [1, 1]


def test_groups_follow_first_seen_order():
    entries = [
        make_entry("1", 30, project="zeta"),
        make_entry("2", 30, project="alpha"),
        make_entry("3", 30, project="zeta"),
    ]
    groups = group_entries(entries, "project")
    assert [g.key for g in groups] == ["zeta", "alpha"]
    assert groups[0].total_minutes == 60


def test_group_entries_are_most_recent_first_and_stable():
    entries = [
        make_entry("old", 10, day=date(2025, 9, 1)),
        make_entry("same-1", 10, day=date(2025, 9, 3)),
        make_entry("new", 10, day=date(2025, 9, 5)),
        make_entry("same-2", 10, day=date(2025, 9, 3)),
    ]
    (group,) = group_entries(entries, GroupBy.task)
    assert [e.id for e in group.entries] == ["new", "same-1", "same-2", "old"]


def test_grouping_preserves_total_minutes():
    entries = [make_entry(str(i), i * 7, owner=f"u{i % 3}", project=f"p{i % 4}") for i in range(20)]
    expected = sum(e.duration_minutes for e in entries)
    for dimension in GroupBy:
        assert sum(g.total_minutes for g in group_entries(entries, dimension)) == expected


def test_missing_rate_counts_hours_but_not_amount():
    entries = [make_entry("a", 90, rate=None), make_entry("b", 30, rate=100)]
    (group,) = group_entries(entries, GroupBy.project)
    assert group.total_minutes == 120
    assert group.total_hours == 2.0
    assert group.total_amount == 50.0


def test_custom_key_and_label_functions():
    entries = [
        make_entry("a", 60, day=date(2025, 9, 15)),
        make_entry("b", 60, day=date(2025, 9, 22)),
        make_entry("c", 60, day=date(2025, 9, 16)),
    ]
    groups = group_entries(
        entries,
        GroupBy.project,
        key_fn=lambda e: week_start(e.work_date).isoformat(),
        label_fn=lambda e: f"Week of {week_start(e.work_date):%d %b}",
    )
    assert [g.key for g in groups] == ["2025-09-15", "2025-09-22"]
    assert groups[0].label == "Week of 15 Sep"
    assert groups[0].total_hours == 2.0


def test_labels_fall_back_to_keys():
    entries = [make_entry("a", 60, project="p-raw", task=None)]
    assert group_entries(entries, GroupBy.project)[0].label == "p-raw"
    assert group_entries(entries, GroupBy.task)[0].label == "Unassigned"


def test_unknown_dimension_is_rejected():
    with pytest.raises(ValueError):
        group_entries([], "client")


def test_summary_over_selection():
    entries = [
        make_entry("a", 480, owner="u1", project="p1", task="t1", rate=250),
        make_entry("b", 360, owner="u2", project="p1", task="t2", rate=300),
        make_entry("c", 240, owner="u2", project="p2", task="t3", rate=300),
    ]
    summary = compute_summary(entries, selected_ids={"a", "b"})
    assert summary.total_hours == 14.0
    assert summary.total_amount == 3800.0
    assert summary.entries_count == 2
    assert summary.distinct_users_count == 2
    assert summary.distinct_projects_count == 1
    assert summary.distinct_tasks_count == 2

    everything = compute_summary(entries)
    assert everything.total_amount == 5000.0
    assert everything.distinct_projects_count == 2


def test_summary_of_nothing_is_zero():
    summary = compute_summary([])
    assert summary.total_hours == 0.0
    assert summary.total_amount == 0.0
    assert summary.entries_count == 0


def test_summary_rounds_hours_to_one_decimal():
    summary = compute_summary([make_entry("a", 50, rate=60)])
    assert summary.total_hours == 0.8
    assert summary.total_amount == 50.0


def test_select_entries_keeps_input_order():
    entries = [make_entry(str(i), 10) for i in range(5)]
    assert [e.id for e in select_entries(entries, ["3", "1"])] == ["1", "3"]


def test_day_buckets_and_totals():
    entries = [
        make_entry("a", 120, day=date(2025, 9, 17)),
        make_entry("b", 45, day=date(2025, 9, 15)),
        make_entry("c", 30, day=date(2025, 9, 17)),
    ]
    by_day = group_by_work_date(entries)
    assert list(by_day) == [date(2025, 9, 15), date(2025, 9, 17)]
    assert day_total_minutes(by_day[date(2025, 9, 17)]) == 150


def test_week_start_is_monday():
    assert week_start(date(2025, 9, 21)) == date(2025, 9, 15)
    assert week_start(date(2025, 9, 15)) == date(2025, 9, 15)
