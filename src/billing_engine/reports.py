from __future__ import annotations

import csv
import io
from typing import Iterable

from .models.time_entry import TimeEntry

CSV_HEADERS = ("Date", "User", "Project", "Task", "Duration (hours)", "Notes")


def _row(entry: TimeEntry) -> list[str]:
    return [
        entry.work_date.isoformat(),
        entry.owner_name or entry.owner_ref,
        entry.project_name or entry.grouping_refs.project_ref,
        entry.task_title or entry.grouping_refs.task_ref or "",
        f"{entry.duration_minutes / 60:.2f}",
        entry.notes or "",
    ]


def export_entries_csv(entries: Iterable[TimeEntry]) -> str:
    """Render time entries as a fully quoted CSV document, input order kept."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for entry in entries:
        writer.writerow(_row(entry))
    return buffer.getvalue()


__all__ = ["export_entries_csv", "CSV_HEADERS"]
