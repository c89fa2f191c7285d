"""
main.py
-------

Entry point of the csv_filter_viewer HTTP API.  This module builds the
FastAPI application, attaches the view state and the filter debouncer, and
mounts the routes defined in ``router.py``.

The configured source is loaded once when the application starts.  A
failed load does not stop the server: the message is kept on the state and
every data route answers 503 with it until ``POST /reload`` succeeds.

Run the API with ``uvicorn`` or any other ASGI server::

    CSV_VIEWER_SOURCE=exports/data.csv uvicorn csv_filter_viewer.main:app --reload

The module contains no business logic of its own.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from fastapi import FastAPI

from . import __version__, config
from .debounce import Debouncer
from .loader import ResourceUnavailableError
from .router import api_router
from .viewer import ViewerState

logger = logging.getLogger(__name__)


def create_app(source: Optional[str] = None, state: Optional[ViewerState] = None,
               debounce_seconds: float = config.DEBOUNCE_SECONDS) -> FastAPI:
    """Create and configure the FastAPI application.

    :param source: path or URL of the CSV file, defaults to ``CSV_VIEWER_SOURCE``
    :param state: an already populated state, mostly useful in tests; it is
                  not reloaded at start-up
    :param debounce_seconds: delay before a filter update is applied
    :returns: a :class:`~fastapi.FastAPI` instance ready to be served
    """
    config.configure_logging()

    if state is None:
        state = ViewerState(source=source or config.SOURCE)
    # Recomputes are driven by the debouncer or by explicit apply calls
    state.auto_apply = False

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        viewer: ViewerState = app.state.viewer
        if not viewer.headers and viewer.error is None:
            try:
                viewer.load_source()
            except ResourceUnavailableError:
                logger.warning("Starting without data; POST /reload once %s is reachable", viewer.source)
        yield
        app.state.debouncer.cancel()

    app = FastAPI(
        title="CSV Filter Viewer API",
        description=(
            "Load one delimited text file and narrow its rows with per-column, "
            "case-insensitive substring filters combined with AND."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.viewer = state
    app.state.debouncer = Debouncer(state.apply, delay=debounce_seconds)

    app.include_router(api_router)

    @app.get("/", summary="API root", tags=["root"])
    async def root() -> Dict[str, str]:
        """Welcome message, also usable as a liveness check."""
        return {
            "message": "CSV Filter Viewer API. GET /table to view rows, PUT /filters/{column} to filter.",
            "source": str(app.state.viewer.source),
        }

    return app


# Global application instance, imported by ASGI servers
app = create_app()


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
