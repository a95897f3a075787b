"""Query-string access as an injected capability.

The session never touches global page state; it reads and writes through a
:class:`Location`, so the core stays testable without a browser or server.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from yarl import URL


class Location(Protocol):
    """Structural interface for reading and writing query parameters."""

    def read(self) -> Mapping[str, str]:
        ...

    def write(self, query: Mapping[str, str]) -> None:
        ...


class QueryStringLocation:
    """In-memory location backed by a :class:`yarl.URL`.

    ``write`` updates only the given parameters; the rest of the query is kept.
    """

    def __init__(self, url: str | URL = "/") -> None:
        self._url = URL(url)

    @property
    def url(self) -> URL:
        return self._url

    def read(self) -> Mapping[str, str]:
        return {key: self._url.query[key] for key in self._url.query}

    def write(self, query: Mapping[str, str]) -> None:
        self._url = self._url.update_query(dict(query))
