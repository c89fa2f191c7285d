"""
router.py
---------

HTTP routes exposed by the csv_filter_viewer API.  This module holds
request validation, the calls into :class:`~csv_filter_viewer.viewer.ViewerState`
and the translation of errors into HTTP responses.

The browser front end uses two styles of interaction:

* ``GET /table`` with ``filter.<column>=value`` query parameters computes a
  view without changing anything on the server.  Columns may be given by
  name or by zero-based index.
* ``PUT``/``DELETE`` on ``/filters`` edit the shared filter map.  Updates
  are debounced: the recompute runs once input pauses, unless the caller
  asks for ``immediate`` application or posts to ``/filters/apply``.

Errors are mapped as follows: an unavailable source gives 503 with the
loader's message, an unknown column gives 404, and anything unexpected is
logged and returned as 500.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from pydantic import BaseModel, Field

from .debounce import Debouncer
from .loader import ResourceUnavailableError
from .parsers.csv_parser import ParsedTable, rows_to_dataframe
from .row_filter import UnknownColumnError, limit_rows
from .viewer import ViewerState

logger = logging.getLogger(__name__)

FILTER_PREFIX = "filter."


class FilterUpdate(BaseModel):
    """Body of ``PUT /filters/{column}``.

    Attributes
    ----------
    value : str
        Substring to look for in the column; an empty string clears it.
    """

    value: str = Field("", description="Substring filter, empty to clear")


class TableSummary(BaseModel):
    total_rows: int
    matched_rows: int
    match_percent: float
    displayed_rows: int
    column_count: int
    active_filters: int


class TableResponse(BaseModel):
    """Schema of a rendered table view.

    Attributes
    ----------
    headers : list of str
        Column names in file order.
    filters : dict
        Effective filter map used for this view.
    rows : list of dict
        The first ``limit`` matching rows.
    summary : TableSummary
        Counters for the statistics panel.
    filtering : bool
        True while a debounced recompute is still pending.
    """

    headers: List[str]
    filters: Dict[str, str]
    rows: List[Dict[str, str]]
    summary: TableSummary
    filtering: bool = False


class FiltersResponse(BaseModel):
    filters: Dict[str, str]
    active_filters: int
    filtering: bool = False


def get_state(request: Request) -> ViewerState:
    """Return the loaded view state, or fail with 503 if loading failed."""
    state: ViewerState = request.app.state.viewer
    if state.error:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=state.error)
    return state


def get_debouncer(request: Request) -> Debouncer:
    return request.app.state.debouncer


def _column_key(headers: List[str], raw: str) -> Union[str, int]:
    """Interpret a column given in a URL: header name first, then index."""
    if raw in headers:
        return raw
    if raw.isdecimal():
        return int(raw)
    return raw


def _unknown_column(exc: UnknownColumnError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


api_router = APIRouter(prefix="", tags=["table"])


@api_router.get("/columns", response_model=List[str], summary="List column headers")
async def columns_endpoint(state: ViewerState = Depends(get_state)) -> List[str]:
    return state.headers


@api_router.get(
    "/table",
    response_model=TableResponse,
    summary="Filtered view of the table",
    response_description="Matching rows, limited for display, with statistics",
)
async def table_endpoint(
    request: Request,
    limit: Optional[int] = Query(None, ge=0, description="Number of rows to render"),
    state: ViewerState = Depends(get_state),
    debouncer: Debouncer = Depends(get_debouncer),
) -> TableResponse:
    """Compute a view from the stored filters overridden by query filters.

    Query parameters named ``filter.<column>`` set the filter of that
    column for this request only.
    """
    overrides: Dict[Union[str, int], str] = {}
    for key, value in request.query_params.multi_items():
        if key.startswith(FILTER_PREFIX):
            overrides[_column_key(state.headers, key[len(FILTER_PREFIX):])] = value

    try:
        filters = state.merge_filters(overrides)
    except UnknownColumnError as exc:
        raise _unknown_column(exc) from exc

    if overrides:
        matched = state.query(overrides)
    else:
        matched = state.filtered
    count = state.rows_to_display if limit is None else limit
    summary = state.summary(matched=matched, filters=filters, rows_to_display=count)

    return TableResponse(
        headers=state.headers,
        filters=filters,
        rows=limit_rows(matched, count),
        summary=TableSummary(**summary.as_dict()),
        filtering=debouncer.pending,
    )


@api_router.get("/filters", response_model=FiltersResponse, summary="Current filter map")
async def filters_endpoint(
    state: ViewerState = Depends(get_state),
    debouncer: Debouncer = Depends(get_debouncer),
) -> FiltersResponse:
    return FiltersResponse(
        filters=state.filters, active_filters=state.active_filters, filtering=debouncer.pending
    )


@api_router.put("/filters/{column}", response_model=FiltersResponse, summary="Set one column filter")
async def set_filter_endpoint(
    column: str,
    payload: FilterUpdate,
    immediate: bool = Query(False, description="Apply now instead of debouncing"),
    state: ViewerState = Depends(get_state),
    debouncer: Debouncer = Depends(get_debouncer),
) -> FiltersResponse:
    try:
        state.set_filter(_column_key(state.headers, column), payload.value)
    except UnknownColumnError as exc:
        raise _unknown_column(exc) from exc

    if immediate:
        debouncer.cancel()
        state.apply()
    else:
        debouncer.trigger()
    return FiltersResponse(
        filters=state.filters, active_filters=state.active_filters, filtering=debouncer.pending
    )


@api_router.delete("/filters/{column}", response_model=FiltersResponse, summary="Clear one column filter")
async def reset_filter_endpoint(
    column: str,
    state: ViewerState = Depends(get_state),
    debouncer: Debouncer = Depends(get_debouncer),
) -> FiltersResponse:
    try:
        state.reset_filter(_column_key(state.headers, column))
    except UnknownColumnError as exc:
        raise _unknown_column(exc) from exc
    debouncer.cancel()
    state.apply()
    return FiltersResponse(filters=state.filters, active_filters=state.active_filters)


@api_router.delete("/filters", response_model=FiltersResponse, summary="Clear all filters")
async def reset_filters_endpoint(
    state: ViewerState = Depends(get_state),
    debouncer: Debouncer = Depends(get_debouncer),
) -> FiltersResponse:
    debouncer.cancel()
    state.reset_filters()
    state.apply()
    return FiltersResponse(filters=state.filters, active_filters=state.active_filters)


@api_router.post("/filters/apply", response_model=FiltersResponse, summary="Apply pending filters now")
async def apply_filters_endpoint(
    state: ViewerState = Depends(get_state),
    debouncer: Debouncer = Depends(get_debouncer),
) -> FiltersResponse:
    # Equivalent to pressing Enter in a filter box
    if debouncer.flush() is None:
        state.apply()
    return FiltersResponse(filters=state.filters, active_filters=state.active_filters)


@api_router.post("/reload", summary="Reload the configured source")
async def reload_endpoint(request: Request) -> Dict[str, Any]:
    state: ViewerState = request.app.state.viewer
    request.app.state.debouncer.cancel()
    try:
        table = state.load_source()
    except ResourceUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Unexpected error while reloading %s", state.source)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An internal error occurred while reloading the source.",
        ) from exc
    return {"source": state.source, "rows": table.row_count, "columns": table.column_count}


@api_router.get("/export.csv", summary="Download the filtered rows as CSV")
async def export_endpoint(state: ViewerState = Depends(get_state)) -> Response:
    frame = rows_to_dataframe(ParsedTable(headers=state.headers, rows=state.filtered))
    return Response(
        content=frame.to_csv(index=False),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="filtered.csv"'},
    )
