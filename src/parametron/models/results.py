"""Executor responses and the public state snapshot."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from parametron.models._base import ParametronBaseModel


class Pagination(ParametronBaseModel):
    total_count: int = 0
    total_pages: int = 0


class SearchResult(ParametronBaseModel):
    """A successful executor response.

    Missing fields default to empty/zero so a sparse response still commits
    cleanly.
    """

    objects: list[Any] = Field(default_factory=list)
    aggregations: dict[str, Any] = Field(default_factory=dict)
    pagination: Pagination = Field(default_factory=Pagination)


class QuerySnapshot(ParametronBaseModel):
    """Point-in-time view of a search session.

    Handed to the ``update`` callback and returned from ``fire()``.
    ``filters`` and ``persistent_filters`` are in wire (list) form.
    """

    # Params are arbitrary caller scalars; the view mirrors them untyped.
    page: Any = None
    per: Any = None
    sort: Any = None
    order: Any = None
    total_count: int = 0
    total_pages: int = 0
    running: bool = False
    request_id: int = 0
    params: dict[str, Any] = Field(default_factory=dict)
    filters: list[list[Any]] = Field(default_factory=list)
    persistent_filters: list[list[Any]] = Field(default_factory=list)
    fixed_order: list[Any] | None = None
    objects: list[Any] = Field(default_factory=list)
    aggregations: dict[str, Any] = Field(default_factory=dict)
    stats: Any = None
