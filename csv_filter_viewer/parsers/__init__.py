"""Parser modules for csv_filter_viewer.

Parsing modules convert raw text into in-memory rows.  Submodules are
named ``<format>_parser.py``; ``csv_parser`` is the only format so far.
"""

from .csv_parser import ParsedTable, parse_delimited_text, split_csv_line  # noqa: F401

__all__ = ["ParsedTable", "parse_delimited_text", "split_csv_line"]
