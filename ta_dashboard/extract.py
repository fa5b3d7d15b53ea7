"""Shared extraction steps used by every tab reader.

A reader is configured by a field spec (which header predicates locate each
field), an optional grouping step, and a post-filter. The steps here turn a
tab into decoded records; the readers decide what the records mean.
"""

from datetime import datetime
from typing import Callable, Hashable, Iterable, Optional, Sequence, TypeVar

from .headers import ColumnMap, FieldSpec, resolve_columns
from .models import Tab
from .rows import Row, cell_int, cell_text

T = TypeVar("T")

EPOCH = datetime(1970, 1, 1)


def split_table(tab: Tab) -> tuple[list[str], list[Row]]:
    """Split a tab into its trimmed header row and its data rows."""
    if not tab.rows:
        return [], []
    headers = [(value or "").strip() for value in tab.rows[0]]
    return headers, tab.rows[1:]


def decode_row(
    row: Row, columns: ColumnMap, numeric_fields: Iterable[str] = ()
) -> dict:
    """Decode one row into a field -> value dict using resolved columns."""
    numeric = set(numeric_fields)
    record = {}
    for field, index in columns.items():
        if field in numeric:
            record[field] = cell_int(row, index)
        else:
            record[field] = cell_text(row, index)
    return record


def decode_records(
    tab: Tab, spec: FieldSpec, numeric_fields: Iterable[str] = ()
) -> list[dict]:
    """Resolve the spec against the tab's headers and decode every data row."""
    headers, rows = split_table(tab)
    columns = resolve_columns(headers, spec)
    numeric = list(numeric_fields)
    return [decode_row(row, columns, numeric) for row in rows]


def latest_by(
    records: Iterable[T],
    key: Callable[[T], Hashable],
    timestamp: Callable[[T], Optional[datetime]],
) -> list[T]:
    """Keep the record with the latest timestamp for each key.

    Unparseable timestamps sort as the epoch; ties keep the earlier record.
    Groups are returned in order of first appearance.
    """
    winners: dict = {}
    for record in records:
        group = key(record)
        when = timestamp(record) or EPOCH
        current = winners.get(group)
        if current is None or when > current[0]:
            winners[group] = (when, record)
    return [record for _, record in winners.values()]


def find_tab(tabs: Sequence[Tab], predicate: Callable[[str], bool]) -> Optional[Tab]:
    """Return the first tab whose lowercased title satisfies the predicate."""
    for tab in tabs:
        if predicate(tab.title.lower()):
            return tab
    return None
