# Location resolver — requested directory path from the addressable location,
# plus the URL helpers shared by the browser and the download links.
# Created: 2026-10-02

from __future__ import annotations

import time
import urllib.parse
from collections.abc import Mapping, Sequence
from typing import Any

ROOT_PATH = "/"

PATH_PARAM = "p"
DOWNLOAD_ENDPOINT = "/api/download"

# Characters JavaScript's encodeURIComponent leaves alone on top of quote()'s
# always-safe set.
_URI_COMPONENT_SAFE = "!*'()"


def encode_uri_component(value: str) -> str:
    """Percent-encode ``value`` the way ``encodeURIComponent`` does."""
    return urllib.parse.quote(value, safe=_URI_COMPONENT_SAFE)


def resolve_path(location: str | Mapping[str, Any] | None) -> str:
    """Return the directory path requested by ``location``.

    ``location`` is a URL (absolute or relative, e.g. ``"/?p=%2Fdocs"``), a bare
    query string (``"p=%2Fdocs"``) or an already-parsed mapping of query
    parameters. A missing or empty ``p`` parameter resolves to the root path.
    Anything else is returned verbatim.
    """
    if location is None:
        return ROOT_PATH

    if isinstance(location, Mapping):
        value = location.get(PATH_PARAM)
        if isinstance(value, Sequence) and not isinstance(value, str):
            value = value[0] if value else None
    else:
        parts = urllib.parse.urlsplit(location)
        query = parts.query
        bare_query = "?" not in location and not parts.scheme and not location.startswith("/")
        if bare_query and "=" in location:
            query = location
        values = urllib.parse.parse_qs(query, keep_blank_values=True).get(PATH_PARAM)
        value = values[0] if values else None

    return value or ROOT_PATH


def browse_location(path: str) -> str:
    """Addressable location that shows the directory at ``path``."""
    return f"/?{PATH_PARAM}={encode_uri_component(path)}"


def download_url(path: str, now_ms: int | None = None) -> str:
    """Link that downloads ``path`` (directories arrive as a zip archive).

    The ``_`` parameter only defeats client-side caching; the server ignores it.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{DOWNLOAD_ENDPOINT}?f={encode_uri_component(path)}&_={now_ms}"


__all__ = [
    "DOWNLOAD_ENDPOINT",
    "ROOT_PATH",
    "browse_location",
    "download_url",
    "encode_uri_component",
    "resolve_path",
]
