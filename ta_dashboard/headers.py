"""Header resolution by case-insensitive name matching.

Spreadsheet owners rename and reorder columns freely, so columns are located
by what their header looks like rather than by position. A field is described
by a list of predicates; the first header satisfying any of them wins.

    spec = {"date": [startswith("timestamp"), startswith("date")]}
    columns = resolve_columns(headers, spec)
    columns["date"]  # -> index, or NOT_FOUND
"""

from types import MappingProxyType
from typing import Literal, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict

NOT_FOUND = -1

MatchKind = Literal["contains", "startswith", "equals"]


class HeaderPredicate(BaseModel):
    """A pure test on a single header string."""

    model_config = ConfigDict(frozen=True)

    kind: MatchKind
    text: str

    def matches(self, header: Optional[str]) -> bool:
        value = (header or "").strip().lower()
        needle = self.text.lower()
        if self.kind == "contains":
            return needle in value
        if self.kind == "startswith":
            return value.startswith(needle)
        return value == needle


def contains(text: str) -> HeaderPredicate:
    return HeaderPredicate(kind="contains", text=text)


def startswith(text: str) -> HeaderPredicate:
    return HeaderPredicate(kind="startswith", text=text)


def equals(text: str) -> HeaderPredicate:
    return HeaderPredicate(kind="equals", text=text)


FieldSpec = Mapping[str, Sequence[HeaderPredicate]]
ColumnMap = Mapping[str, int]


def find_column(
    headers: Sequence[Optional[str]], predicates: Sequence[HeaderPredicate]
) -> int:
    """Return the index of the first header matching any predicate, or NOT_FOUND."""
    for index, header in enumerate(headers):
        if any(predicate.matches(header) for predicate in predicates):
            return index
    return NOT_FOUND


def resolve_columns(headers: Sequence[Optional[str]], spec: FieldSpec) -> ColumnMap:
    """Resolve every field of a spec against one header row.

    The returned mapping is read-only; absent fields map to NOT_FOUND.
    """
    resolved = {field: find_column(headers, predicates) for field, predicates in spec.items()}
    return MappingProxyType(resolved)


def header_mentions(header: Optional[str], words: Sequence[str]) -> bool:
    """Check whether a header contains any of the given words (case-insensitive)."""
    value = (header or "").lower()
    return any(word in value for word in words)
