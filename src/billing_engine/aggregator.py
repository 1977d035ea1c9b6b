from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Callable, Collection, Iterable, Sequence

from .logging_config import billing_fields
from .models.time_entry import AggregationGroup, TimeEntry, TimeEntrySummary
from .numbers import round1, round2, to_decimal

logger = logging.getLogger(__name__)

KeyFn = Callable[[TimeEntry], str]
LabelFn = Callable[[TimeEntry], str]

MINUTES_PER_HOUR = Decimal(60)


class GroupBy(str, Enum):
    project = "project"
    task = "task"
    user = "user"


def _project_key(entry: TimeEntry) -> str:
    return entry.grouping_refs.project_ref


def _project_label(entry: TimeEntry) -> str:
    return entry.project_name or entry.grouping_refs.project_ref


def _task_key(entry: TimeEntry) -> str:
    return entry.grouping_refs.task_ref or ""


def _task_label(entry: TimeEntry) -> str:
    return entry.task_title or entry.grouping_refs.task_ref or "Unassigned"


def _user_key(entry: TimeEntry) -> str:
    return entry.owner_ref


def _user_label(entry: TimeEntry) -> str:
    return entry.owner_name or entry.owner_ref


DEFAULT_EXTRACTORS: dict[GroupBy, tuple[KeyFn, LabelFn]] = {
    GroupBy.project: (_project_key, _project_label),
    GroupBy.task: (_task_key, _task_label),
    GroupBy.user: (_user_key, _user_label),
}


def entry_amount(entry: TimeEntry) -> Decimal:
    """Unrounded billable amount; a missing rate contributes zero."""
    if entry.hourly_rate is None:
        return Decimal(0)
    return Decimal(entry.duration_minutes) / MINUTES_PER_HOUR * to_decimal(entry.hourly_rate)


@dataclass
class _GroupAccumulator:
    key: str
    label: str
    total_minutes: int = 0
    members: list[TimeEntry] = field(default_factory=list)

    def add(self, entry: TimeEntry) -> None:
        self.members.append(entry)
        self.total_minutes += entry.duration_minutes

    def build(self) -> AggregationGroup:
        amount = sum((entry_amount(entry) for entry in self.members), Decimal(0))
        # sorted() is stable under reverse=True, so same-day entries keep input order
        recent_first = sorted(self.members, key=lambda entry: entry.work_date, reverse=True)
        return AggregationGroup(
            key=self.key,
            label=self.label,
            total_minutes=self.total_minutes,
            total_hours=round1(Decimal(self.total_minutes) / MINUTES_PER_HOUR),
            total_amount=round2(amount),
            entries=recent_first,
        )


def group_entries(
    entries: Iterable[TimeEntry],
    group_by: GroupBy | str = GroupBy.project,
    key_fn: KeyFn | None = None,
    label_fn: LabelFn | None = None,
) -> list[AggregationGroup]:
    """Bucket time entries by project, task or user.

    Groups come back in first-seen key order. Each group's entries are
    ordered most recent first. Hours and amounts are derived once per group
    from the exact sums.

    Args:
        entries: Time entries to aggregate; never modified
        group_by: Dimension selecting the default key and label extractors
        key_fn: Optional override for the group key
        label_fn: Optional override for the group label

    Returns:
        List of AggregationGroup instances
    """
    dimension = GroupBy(group_by)
    default_key, default_label = DEFAULT_EXTRACTORS[dimension]
    key_of = key_fn or default_key
    label_of = label_fn or default_label

    accumulators: OrderedDict[str, _GroupAccumulator] = OrderedDict()
    for entry in entries:
        key = key_of(entry)
        accumulator = accumulators.get(key)
        if accumulator is None:
            accumulator = _GroupAccumulator(key=key, label=label_of(entry))
            accumulators[key] = accumulator
        accumulator.add(entry)

    groups = [accumulator.build() for accumulator in accumulators.values()]
    logger.debug("Grouped time entries", extra=billing_fields(group_by=dimension.value, groups=len(groups)))
    return groups


def select_entries(entries: Iterable[TimeEntry], selected_ids: Collection[str]) -> list[TimeEntry]:
    selected = set(selected_ids)
    return [entry for entry in entries if entry.id in selected]


def compute_summary(
    entries: Iterable[TimeEntry],
    selected_ids: Collection[str] | None = None,
) -> TimeEntrySummary:
    """Totals over a caller-chosen subset of entries.

    When ``selected_ids`` is given only those entries are counted; selection
    state itself stays with the caller.
    """
    subset = list(entries) if selected_ids is None else select_entries(entries, selected_ids)
    total_minutes = sum(entry.duration_minutes for entry in subset)
    total_amount = sum((entry_amount(entry) for entry in subset), Decimal(0))
    return TimeEntrySummary(
        total_hours=round1(Decimal(total_minutes) / MINUTES_PER_HOUR),
        total_amount=round2(total_amount),
        entries_count=len(subset),
        distinct_users_count=len({entry.owner_ref for entry in subset}),
        distinct_projects_count=len({entry.grouping_refs.project_ref for entry in subset}),
        distinct_tasks_count=len(
            {entry.grouping_refs.task_ref for entry in subset if entry.grouping_refs.task_ref}
        ),
    )


def group_by_work_date(entries: Iterable[TimeEntry]) -> dict[date, list[TimeEntry]]:
    by_day: dict[date, list[TimeEntry]] = {}
    for entry in entries:
        by_day.setdefault(entry.work_date, []).append(entry)
    return dict(sorted(by_day.items()))


def day_total_minutes(entries: Sequence[TimeEntry]) -> int:
    return sum(entry.duration_minutes or 0 for entry in entries)


def week_start(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


__all__ = [
    "GroupBy",
    "group_entries",
    "select_entries",
    "compute_summary",
    "entry_amount",
    "group_by_work_date",
    "day_total_minutes",
    "week_start",
]
