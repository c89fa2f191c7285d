"""Row filtering and display windowing.

The functions in this module operate on the rows produced by
:func:`csv_filter_viewer.parsers.csv_parser.parse_delimited_text`.  They
are pure: inputs are never mutated and every call re-scans the full row
set, because filters can be loosened as well as tightened.

A filter map associates a column with a substring.  An empty (or
whitespace only) value means the column is unconstrained.  Non-empty
filters combine with logical AND and match case-insensitively anywhere in
the cell.

Examples
--------
>>> rows = [{"a": "foo", "b": "bar"}, {"a": "foo", "b": "baz"}]
>>> filter_rows(rows, {"a": "FO", "b": "bar"})
[{'a': 'foo', 'b': 'bar'}]
>>> limit_rows(rows, 1)
[{'a': 'foo', 'b': 'bar'}]
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Sequence, Union

Row = Mapping[str, str]
ColumnKey = Union[str, int]


class UnknownColumnError(KeyError):
    """Raised when a filter addresses a column that is not in the headers."""

    def __str__(self) -> str:  # KeyError quotes its argument otherwise
        return str(self.args[0]) if self.args else ""


def _is_blank(value: str) -> bool:
    return not value or not value.strip()


def filter_rows(rows: Sequence[Row], filters: Mapping[str, str]) -> List[Row]:
    """Return the rows satisfying every non-empty filter.

    Parameters
    ----------
    rows : sequence of mappings
        The full row set.
    filters : mapping of column name to substring
        Blank values are ignored.

    Returns
    -------
    list
        The matching rows, in their original order.  When no filter is
        active the input rows are returned as a new list holding the same
        row objects.
    """
    active = [
        (column, value.strip().casefold())
        for column, value in filters.items()
        if not _is_blank(value)
    ]
    if not active:
        return list(rows)

    return [
        row
        for row in rows
        if all(needle in (row.get(column) or "").casefold() for column, needle in active)
    ]


def limit_rows(rows: Sequence[Row], count: int) -> List[Row]:
    """Return at most the first ``count`` rows, for display only."""
    return list(rows[: max(count, 0)])


def active_filter_count(filters: Mapping[str, str]) -> int:
    """Number of filters with a non-blank value."""
    return sum(1 for value in filters.values() if not _is_blank(value))


def empty_filters(headers: Iterable[str]) -> Dict[str, str]:
    """Filter map with every column unconstrained."""
    return {header: "" for header in headers}


def resolve_column(headers: Sequence[str], column: ColumnKey) -> str:
    """Map a column name or a zero-based index to a column name.

    Numeric strings are *not* treated as indices here; callers receiving
    text (such as the HTTP layer) decide how to interpret it.

    Raises
    ------
    UnknownColumnError
        If the name is not a header or the index is out of range.
    """
    if isinstance(column, int) and not isinstance(column, bool):
        if 0 <= column < len(headers):
            return headers[column]
        raise UnknownColumnError(f"Column index {column} out of range (0..{len(headers) - 1})")
    if column in headers:
        return column
    raise UnknownColumnError(f"Unknown column: {column!r}")


def resolve_filters(headers: Sequence[str], filters: Mapping[ColumnKey, str]) -> Dict[str, str]:
    """Translate a filter map keyed by names and/or indices to names only.

    When two keys address the same column the later one wins.
    """
    resolved: Dict[str, str] = {}
    for column, value in filters.items():
        resolved[resolve_column(headers, column)] = value
    return resolved


def match_ratio(matched: int, total: int) -> float:
    """Percentage of ``total`` rows that matched, ``0.0`` for an empty table."""
    if total <= 0:
        return 0.0
    return matched / total * 100


__all__ = [
    "ColumnKey",
    "UnknownColumnError",
    "active_filter_count",
    "empty_filters",
    "filter_rows",
    "limit_rows",
    "match_ratio",
    "resolve_column",
    "resolve_filters",
]
