"""
Dashboard aggregation: filtering and summary counts over the record set.
"""

from typing import Iterable

from pydantic import BaseModel

from invoice_harvester.core.models import EXPORTABLE_STATUSES, Record
from invoice_harvester.editor import RenderedRow, TabularEditor
from invoice_harvester.store.record_tracker import RecordTracker
from invoice_harvester.utils.formatting import stringify

ALL = "all"


class SummaryCounts(BaseModel):
    """Counts shown on the dashboard cards, computed over every record."""

    processed: int = 0
    needs_validation: int = 0
    error: int = 0
    in_progress: int = 0

    @property
    def total(self) -> int:
        return self.processed + self.needs_validation + self.error + self.in_progress


def _matches_search(record: Record, term: str) -> bool:
    if term in record.file_name.lower():
        return True
    return any(term in stringify(value).lower() for value in record.extracted_values.values())


def filter_records(records: Iterable[Record], search_term: str = "", status_filter: str = ALL) -> list[Record]:
    """
    Records matching both the status filter and the search term, order preserved.

    An empty search term matches everything. Matching is a case-insensitive
    substring test against the file name and every extracted value.
    """
    term = (search_term or "").lower()
    return [
        record
        for record in records
        if (status_filter == ALL or record.status == status_filter)
        and (not term or _matches_search(record, term))
    ]


def summary_counts(records: Iterable[Record]) -> SummaryCounts:
    counts = SummaryCounts()
    for record in records:
        if record.status == "processed":
            counts.processed += 1
        elif record.status == "needs_validation":
            counts.needs_validation += 1
        elif record.status == "error":
            counts.error += 1
        else:
            counts.in_progress += 1
    return counts


class Dashboard:
    """
    View state over a tracker: search term, status filter and export column
    selection. Every read works on a fresh tracker snapshot.
    """

    def __init__(self, tracker: RecordTracker, editor: TabularEditor):
        self.tracker = tracker
        self.editor = editor
        self.search_term = ""
        self.status_filter = ALL
        self.selected_export_keys: list[str] = [
            f.key for f in editor.schema.fields if f.type != "actions"
        ]

    def set_search(self, term: str) -> None:
        self.search_term = term or ""

    def set_status_filter(self, status: str) -> None:
        self.status_filter = status or ALL

    def toggle_export_column(self, key: str) -> None:
        """Flip one column in or out of the export selection, keeping schema order."""
        if self.editor.schema.get(key) is None:
            return
        selected = set(self.selected_export_keys)
        selected.symmetric_difference_update({key})
        self.selected_export_keys = [k for k in self.editor.schema.keys() if k in selected]

    def visible_records(self) -> list[Record]:
        return filter_records(self.tracker.snapshot(), self.search_term, self.status_filter)

    def counts(self) -> SummaryCounts:
        return summary_counts(self.tracker.snapshot())

    def rows(self) -> list[RenderedRow]:
        return self.editor.render_rows(self.visible_records())

    def exportable_count(self) -> int:
        return sum(1 for r in self.tracker.snapshot() if r.status in EXPORTABLE_STATUSES)
