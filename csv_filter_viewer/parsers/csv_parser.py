"""
CSV Parser Module
=================

This module provides :func:`parse_delimited_text`, which turns the raw text
of a comma-separated values (CSV) file into an ordered list of header names
and a list of rows, each row being a mapping from column name to cell value.

The parser is deliberately permissive.  It never raises on malformed input:
short rows are padded with empty strings, surplus trailing fields are
dropped, blank lines are skipped and unbalanced quotes are absorbed until
the end of the line.  No type coercion is performed; every cell is a
``str``.

The parser does **not** read files or fetch remote resources itself; use the
``loader`` module to obtain the text first.

Example
-------
>>> from csv_filter_viewer.parsers.csv_parser import parse_delimited_text
>>> table = parse_delimited_text('a,b\\n"x,y",z')
>>> table.headers
['a', 'b']
>>> table.rows
[{'a': 'x,y', 'b': 'z'}]

Functions
---------
split_csv_line(line: str) -> list[str]
    Split a single line into fields, honouring double-quoted fields.
parse_delimited_text(text: str) -> ParsedTable
    Parse a whole document into headers and rows.
rows_to_dataframe(table: ParsedTable) -> pandas.DataFrame
    Build a string-typed DataFrame from a parsed table.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List

import pandas as pd

Row = Dict[str, str]

QUOTE = '"'
DELIMITER = ","


@dataclass
class ParsedTable:
    """Result of :func:`parse_delimited_text`.

    Attributes
    ----------
    headers : list of str
        Column names in file order, trimmed.  Duplicates are kept here even
        though they collapse into a single key inside each row.
    rows : list of dict
        Parsed rows in file order.
    """

    headers: List[str] = field(default_factory=list)
    rows: List[Row] = field(default_factory=list)

    @property
    def column_count(self) -> int:
        return len(self.headers)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator:
        # Allows ``headers, rows = parse_delimited_text(text)``
        return iter((self.headers, self.rows))


def split_csv_line(line: str) -> List[str]:
    """Split one line of CSV into its fields.

    A double quote toggles the quoted state and is not emitted, except for
    a doubled quote inside a quoted region which produces one literal
    quote.  Commas only separate fields outside quotes.  Each field is
    stripped of surrounding whitespace.

    The last field is always emitted, so an empty line gives ``[""]``.
    An unclosed quote simply keeps the rest of the line in the current
    field.

    Parameters
    ----------
    line : str
        A single line without its line terminator.

    Returns
    -------
    list of str
        The field values in order.
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        char = line[i]
        if char == QUOTE:
            if in_quotes and i + 1 < length and line[i + 1] == QUOTE:
                current.append(QUOTE)
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == DELIMITER and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1

    fields.append("".join(current).strip())
    return fields


def _build_row(headers: List[str], values: List[str]) -> Row:
    row: Row = {}
    for index, header in enumerate(headers):
        # Duplicate header names: the later column overwrites the earlier one
        row[header] = values[index] if index < len(values) else ""
    return row


def parse_delimited_text(text: str) -> ParsedTable:
    """Parse CSV text into headers and rows.

    The first line is the header line; it is split on commas and trimmed
    without any quote handling.  Every following non-blank line is split
    with :func:`split_csv_line` and zipped positionally with the headers.

    Parameters
    ----------
    text : str
        The full text of the file.  Lines are separated by ``\\n``; a
        trailing ``\\r`` is removed by per-field trimming.

    Returns
    -------
    ParsedTable
        Headers and rows.  Empty input produces an empty table.

    Notes
    -----
    This function is total: it returns a (possibly empty) table for any
    string, including malformed CSV.
    """
    if not text:
        return ParsedTable()

    lines = text.split("\n")
    headers = [header.strip() for header in lines[0].split(DELIMITER)]

    rows: List[Row] = []
    for line in lines[1:]:
        if not line.strip():
            continue
        rows.append(_build_row(headers, split_csv_line(line)))

    return ParsedTable(headers=headers, rows=rows)


def rows_to_dataframe(table: ParsedTable) -> pd.DataFrame:
    """Return the rows of ``table`` as a :class:`pandas.DataFrame`.

    Columns follow the header order with duplicates removed (matching the
    row mappings).  All values stay strings.
    """
    columns = list(dict.fromkeys(table.headers))
    return pd.DataFrame(table.rows, columns=columns, dtype=str)


__all__ = [
    "ParsedTable",
    "Row",
    "parse_delimited_text",
    "rows_to_dataframe",
    "split_csv_line",
]
