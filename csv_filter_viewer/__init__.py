"""Top level package for the csv_filter_viewer project.

The package loads one delimited text file and lets a user narrow its rows
with per-column substring filters.  The parsing and filtering core
(:mod:`csv_filter_viewer.parsers.csv_parser`,
:mod:`csv_filter_viewer.row_filter`) is pure and has no I/O; the
``loader``, ``viewer``, ``router`` and ``main`` modules wrap it into an
HTTP service for a browser front end.
"""

__version__ = "0.1"

__all__ = [
    "debounce",
    "loader",
    "row_filter",
    "viewer",
]
