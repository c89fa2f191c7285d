"""Loading the input resource as a single text payload.

The viewer works on exactly one delimited text file whose location is
configured at start-up.  :func:`load_text` reads it in full, either from
the local filesystem or from an ``http(s)`` URL, and hands the decoded
text back to the caller for parsing.

There is deliberately no retry and no partial load: one attempt is made,
and any failure (non-success status, transport error, missing file,
undecodable bytes) is reported once as a :class:`ResourceUnavailableError`
carrying a single human-readable message.

Examples
--------
>>> from csv_filter_viewer.loader import load_text
>>> text = load_text("/srv/exports/data.csv")  # doctest: +SKIP
>>> text = load_text("https://example.com/data.csv")  # doctest: +SKIP
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

import requests
from requests.adapters import HTTPAdapter

from .config import FETCH_TIMEOUT

logger = logging.getLogger(__name__)

ENCODINGS = ("utf-8-sig", "latin-1")


class ViewerError(Exception):
    """Base class for errors raised by csv_filter_viewer."""


class ResourceUnavailableError(ViewerError):
    """The input resource could not be read.

    Attributes
    ----------
    source : str
        The path or URL that was requested.
    status_code : int, optional
        HTTP status returned by the server, when there was one.
    """

    def __init__(self, source: str, reason: str, status_code: Optional[int] = None) -> None:
        self.source = source
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Failed to load {source}: {reason}")


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def _create_session() -> requests.Session:
    """Return a session that makes exactly one attempt per request."""
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=0)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update({"User-Agent": "csv_filter_viewer/0.1 loader"})
    return session


def _decode(payload: bytes, source: str) -> str:
    for encoding in ENCODINGS:
        try:
            return payload.decode(encoding)
        except UnicodeDecodeError:
            logger.debug("Could not decode %s as %s", source, encoding)
    raise ResourceUnavailableError(source, "unable to decode file contents")


def _fetch(url: str, timeout: float) -> str:
    session = _create_session()
    try:
        logger.debug("Fetching %s", url)
        response = session.get(url, timeout=timeout)
    except requests.RequestException as exc:
        raise ResourceUnavailableError(url, str(exc)) from exc
    finally:
        session.close()

    if not response.ok:
        raise ResourceUnavailableError(url, f"HTTP {response.status_code}", response.status_code)

    if response.encoding and "charset" in response.headers.get("Content-Type", "").lower():
        return response.text.lstrip("\ufeff")
    return _decode(response.content, url)


def _read_file(path: Path) -> str:
    try:
        payload = path.read_bytes()
    except FileNotFoundError as exc:
        raise ResourceUnavailableError(str(path), "file not found") from exc
    except OSError as exc:
        raise ResourceUnavailableError(str(path), exc.strerror or str(exc)) from exc
    return _decode(payload, str(path))


def load_text(source: Union[str, Path], timeout: float = FETCH_TIMEOUT) -> str:
    """Read ``source`` in full and return its text.

    Parameters
    ----------
    source : str or Path
        Local file path, or an ``http://``/``https://`` URL.
    timeout : float
        Seconds to wait for a remote server before giving up.

    Returns
    -------
    str
        The decoded contents, with any UTF-8 byte order mark removed.

    Raises
    ------
    ValueError
        If ``source`` is empty.
    ResourceUnavailableError
        If the resource could not be fetched or read.
    """
    if not source:
        raise ValueError("A source path or URL must be provided")

    source_str = str(source)
    if _is_url(source_str):
        text = _fetch(source_str, timeout)
    else:
        text = _read_file(Path(source_str))
    logger.info("Loaded %d characters from %s", len(text), source_str)
    return text


__all__ = ["ResourceUnavailableError", "ViewerError", "load_text"]
