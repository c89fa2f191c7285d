"""
viewer.py
=========

State of one table view: the parsed rows, the current filter map, the
filtered result and how many rows to render.

:class:`ViewerState` is the object passed between the load step and the
filter step.  It owns no timers and performs no I/O of its own except in
:meth:`ViewerState.load_source`, which delegates to :mod:`loader`.  The
filtered result is always recomputed from the full row set.

The lifecycle mirrors what a browser front end does:

1. **Load**: the text is fetched and parsed; headers seed an all-empty
   filter map and every row is visible.
2. **Filter**: each filter update recomputes the visible rows, either
   immediately (``auto_apply``) or when :meth:`ViewerState.apply` is
   called.  A :class:`~csv_filter_viewer.debounce.Debouncer` can drive
   ``apply`` to collapse bursts of keystrokes.
3. **Reset**: one filter or all of them go back to empty.

Example usage::

    state = ViewerState()
    state.load("name,city\\nAda,London\\nAlan,Wilmslow")
    state.set_filter("city", "lon")
    state.visible_rows()
    # [{'name': 'Ada', 'city': 'London'}]
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from . import config
from .loader import ResourceUnavailableError, load_text
from .parsers.csv_parser import ParsedTable, Row, parse_delimited_text
from .row_filter import (
    ColumnKey,
    active_filter_count,
    empty_filters,
    filter_rows,
    limit_rows,
    match_ratio,
    resolve_column,
    resolve_filters,
)

logger = logging.getLogger(__name__)

ROWS_PER_PAGE_OPTIONS = config.ROWS_PER_PAGE_OPTIONS


@dataclass
class ViewSummary:
    """Counters shown in the statistics panel and footer."""

    total_rows: int
    matched_rows: int
    match_percent: float
    displayed_rows: int
    column_count: int
    active_filters: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total_rows": self.total_rows,
            "matched_rows": self.matched_rows,
            "match_percent": self.match_percent,
            "displayed_rows": self.displayed_rows,
            "column_count": self.column_count,
            "active_filters": self.active_filters,
        }


@dataclass
class ViewerState:
    """Rows, filters and display settings for a single loaded file.

    Attributes
    ----------
    source : str, optional
        Path or URL the rows were loaded from.
    headers : list of str
        Column names from the header line.
    rows : list of dict
        All parsed rows.
    filters : dict
        Column name to filter substring; empty means unconstrained.
    filtered : list of dict
        Rows matching ``filters`` as of the last recompute.
    rows_to_display : int
        Upper bound on the rows returned by :meth:`visible_rows`.
    auto_apply : bool
        When true every filter update recomputes ``filtered`` at once.
    error : str, optional
        Message of the last load failure.
    loading : bool
        True while :meth:`load_source` is running.

    Loading, filter edits and recomputes hold an internal lock, so a
    recompute running on a timer thread never publishes rows of a file
    that has since been replaced.
    """

    source: Optional[str] = None
    headers: List[str] = field(default_factory=list)
    rows: List[Row] = field(default_factory=list)
    filters: Dict[str, str] = field(default_factory=dict)
    filtered: List[Row] = field(default_factory=list)
    rows_to_display: int = config.ROWS_TO_DISPLAY
    auto_apply: bool = True
    error: Optional[str] = None
    loading: bool = False
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False, compare=False)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load(self, text: str) -> ParsedTable:
        """Parse ``text`` and reset filters and results to the new data."""
        table = parse_delimited_text(text)
        with self._lock:
            self.headers = table.headers
            self.rows = table.rows
            self.filters = empty_filters(table.headers)
            self.filtered = list(self.rows)
            self.error = None
        logger.debug("Parsed %d rows across %d columns", table.row_count, table.column_count)
        return table

    def load_source(self, source: Optional[str] = None) -> ParsedTable:
        """Fetch ``source`` (or the current one) and load it.

        On failure the data is cleared, the message is kept in ``error`` and
        the :class:`ResourceUnavailableError` is re-raised.
        """
        source = source or self.source or config.SOURCE
        self.source = source
        self.loading = True
        try:
            text = load_text(source)
        except ResourceUnavailableError as exc:
            logger.error("%s", exc)
            with self._lock:
                self.headers, self.rows, self.filters, self.filtered = [], [], {}, []
                self.error = str(exc)
            raise
        finally:
            self.loading = False
        return self.load(text)

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------
    def column_name(self, column: ColumnKey) -> str:
        return resolve_column(self.headers, column)

    def set_filter(self, column: ColumnKey, value: str) -> None:
        """Set the filter of one column, addressed by name or index."""
        with self._lock:
            self.filters[self.column_name(column)] = value
            if self.auto_apply:
                self.apply()

    def reset_filter(self, column: ColumnKey) -> None:
        self.set_filter(column, "")

    def reset_filters(self) -> None:
        with self._lock:
            self.filters = empty_filters(self.headers)
            if self.auto_apply:
                self.apply()

    def apply(self) -> List[Row]:
        """Recompute ``filtered`` from all rows and the current filters."""
        with self._lock:
            self.filtered = filter_rows(self.rows, self.filters)
            return self.filtered

    def merge_filters(self, filters: Dict[ColumnKey, str]) -> Dict[str, str]:
        """Stored filters overridden column by column by ``filters``."""
        with self._lock:
            merged = dict(self.filters)
            merged.update(resolve_filters(self.headers, filters))
            return merged

    def query(self, filters: Dict[ColumnKey, str]) -> List[Row]:
        """Filter with an ad-hoc filter map without touching the state."""
        with self._lock:
            return filter_rows(self.rows, self.merge_filters(filters))

    @property
    def active_filters(self) -> int:
        return active_filter_count(self.filters)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------
    def set_rows_to_display(self, count: int) -> None:
        if count < 0:
            raise ValueError("rows_to_display must be non-negative")
        self.rows_to_display = count

    def visible_rows(self) -> List[Row]:
        return limit_rows(self.filtered, self.rows_to_display)

    def summary(self, matched: Optional[List[Row]] = None,
                filters: Optional[Dict[str, str]] = None,
                rows_to_display: Optional[int] = None) -> ViewSummary:
        """Statistics for the current view, or for an ad-hoc query result."""
        matched = self.filtered if matched is None else matched
        filters = self.filters if filters is None else filters
        limit = self.rows_to_display if rows_to_display is None else rows_to_display
        return ViewSummary(
            total_rows=len(self.rows),
            matched_rows=len(matched),
            match_percent=round(match_ratio(len(matched), len(self.rows)), 1),
            displayed_rows=min(max(limit, 0), len(matched)),
            column_count=len(self.headers),
            active_filters=active_filter_count(filters),
        )


__all__ = ["ROWS_PER_PAGE_OPTIONS", "ViewSummary", "ViewerState"]
