"""In-memory query state for a single search session.

This is the only component allowed to mutate filters, params and results.
It performs no I/O; the fetch coordinator drives the request lifecycle
through :meth:`QueryStore.begin_request`, :meth:`QueryStore.commit` and
:meth:`QueryStore.finish_failed`.
"""

from __future__ import annotations

import copy
from collections.abc import Hashable, Iterable, Mapping
from typing import Any

from parametron._constants import AGGREGATION_PREFIX, VIEW_PARAMS
from parametron.config import ParametronConfig
from parametron.models.filters import Filter, FilterMethod, FilterValue
from parametron.models.results import QuerySnapshot, SearchResult
from parametron.state.policy import apply_fixed_order, is_replaced_by, matches


def _prune(params: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in params.items() if value is not None}


def _deep_merge(target: dict[str, Any], incoming: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *incoming* into *target*; nested dicts merge, ``None`` never overwrites."""
    for key, value in incoming.items():
        if value is None:
            continue
        existing = target.get(key)
        if isinstance(value, Mapping) and isinstance(existing, dict):
            _deep_merge(existing, value)
        else:
            target[key] = copy.deepcopy(value)
    return target


class QueryStore:
    """Filters, params and last committed results of one search session."""

    def __init__(self, config: ParametronConfig | None = None) -> None:
        self._config = config or ParametronConfig()
        self._params: dict[str, Any] = self._config.initial_params()
        self._filters: list[Filter] = []
        self._persistent_filters: list[Filter] = []
        self._fixed_order: list[Hashable] | None = None
        self._request_id = 0
        self._running = False
        self._view: dict[str, Any] = {key: self._params.get(key) for key in VIEW_PARAMS}
        self._reset_results()

    # ------------------------------------------------------------------
    # Read-only properties
    # ------------------------------------------------------------------

    @property
    def params(self) -> dict[str, Any]:
        return dict(self._params)

    @property
    def persistent_filters(self) -> list[Filter]:
        return list(self._persistent_filters)

    @property
    def fixed_order(self) -> list[Hashable] | None:
        return list(self._fixed_order) if self._fixed_order is not None else None

    @property
    def request_id(self) -> int:
        return self._request_id

    @property
    def running(self) -> bool:
        return self._running

    @property
    def objects(self) -> list[Any]:
        return list(self._objects)

    @property
    def aggregations(self) -> dict[str, Any]:
        return dict(self._aggregations)

    @property
    def total_count(self) -> int:
        return self._total_count

    @property
    def total_pages(self) -> int:
        return self._total_pages

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def set_filter(
        self,
        attribute: str,
        method: FilterMethod | str,
        value1: FilterValue | None = None,
        value2: FilterValue | None = None,
    ) -> Filter:
        """Add a filter, replacing related filters on the same attribute.

        ``eq``/``ne``, ``range``/``in``/``not_in`` and ``exist``/``not_exist``
        replace each other; ``match`` replaces ``match``; a ``q`` filter
        replaces any previous full-text query.  Resets ``page`` to 1.
        """
        incoming = Filter.build(attribute, method, value1, value2)
        self._filters = [flt for flt in self._filters if not is_replaced_by(flt, incoming)]
        self._filters.append(incoming)
        self._params["page"] = 1
        return incoming

    def set_persistent_filter(
        self,
        attribute: str,
        method: FilterMethod | str,
        value1: FilterValue | None = None,
        value2: FilterValue | None = None,
    ) -> Filter:
        """Add a filter that :meth:`drop_filters` never removes.

        Persistent filters are additive: no de-duplication, no family clearing.
        """
        flt = Filter.build(attribute, method, value1, value2)
        self._persistent_filters.append(flt)
        return flt

    def drop_filters(self, attribute: str | None = None, method: FilterMethod | str | None = None) -> None:
        """Remove matching filters; with no arguments, all non-persistent filters."""
        self._filters = [flt for flt in self._filters if not matches(flt, attribute, method)]

    def get_filters(self, attribute: str | None = None, method: FilterMethod | str | None = None) -> list[Filter]:
        return [flt for flt in self._filters if matches(flt, attribute, method)]

    def get_filter_values(self, attribute: str, method: FilterMethod | str) -> Any:
        """Values of the *first* matching filter.

        ``get_filter_values("_", "q")`` gives ``"Foo"`` (a single value is
        unwrapped) and ``get_filter_values("year", "range")`` gives
        ``[1900, 2008]``.  ``None`` when nothing matches.
        """
        applied = self.get_filters(attribute, method)
        if not applied:
            return None
        values = applied[0].values
        if len(values) > 1:
            return list(values)
        return values[0] if values else None

    def pristine(self) -> bool:
        """True when no filters are applied (persistent filters do not count)."""
        return not self.get_filters()

    # ------------------------------------------------------------------
    # Params and ordering
    # ------------------------------------------------------------------

    def set_params(self, patch: Mapping[str, Any] | None = None, /, **params: Any) -> dict[str, Any]:
        """Merge *patch* into params and prune keys that end up ``None``.

        Naming ``sort`` or ``order`` clears the fixed order: a manual ordering
        and a sort directive are mutually exclusive.
        """
        changes = {**(patch or {}), **params}
        self._params = _prune({**self._params, **changes})
        if "sort" in changes or "order" in changes:
            self._fixed_order = None
        return self.params

    def drop_params(self, *keys: str) -> None:
        for key in keys:
            self._params.pop(key, None)

    def set_fixed_order(self, ids: Iterable[Hashable] | None) -> None:
        """Order results by *ids* on the client.

        The server cannot honour an arbitrary id ordering, so sort/order are
        unset and one large page is requested.  ``None`` or an empty sequence
        removes the override and leaves params alone.
        """
        order = list(ids) if ids is not None else []
        if not order:
            self._fixed_order = None
            return
        self.set_params(sort=None, order=None, page=1, per=self._config.fixed_order_per)
        self._fixed_order = order

    def get_aggregations(self, attribute: str) -> Any:
        return self._aggregations.get(f"{AGGREGATION_PREFIX}{attribute}", [])

    # ------------------------------------------------------------------
    # Request lifecycle (driven by the coordinator)
    # ------------------------------------------------------------------

    def _reset_results(self) -> None:
        self._objects: list[Any] = []
        self._aggregations: dict[str, Any] = {}
        self._total_count = 0
        self._total_pages = 0

    def begin_request(self) -> int:
        """Mark a new request as running and return its id.

        Copies pagination/sort params onto the public view and clears results.
        """
        self._running = True
        self._request_id += 1
        self._view = {key: self._params.get(key) for key in VIEW_PARAMS}
        self._reset_results()
        return self._request_id

    def is_current(self, request_id: int) -> bool:
        return request_id == self._request_id

    def build_body(self, stats: Any = None) -> dict[str, Any]:
        """Request body: params plus the combined filter list and optional stats."""
        filters = [flt.as_tuple() for flt in [*self._persistent_filters, *self._filters]]
        return _deep_merge(
            copy.deepcopy(self._params),
            {"search": {"filters": filters}, "stats": stats},
        )

    def commit(self, result: SearchResult) -> None:
        """Apply a current (non-stale) result."""
        objects = list(result.objects)
        if self._fixed_order is not None:
            objects = apply_fixed_order(objects, self._fixed_order, self._config.id_key)
        self._objects = objects
        self._aggregations = dict(result.aggregations)
        self._total_count = result.pagination.total_count
        self._total_pages = result.pagination.total_pages
        self._running = False

    def finish_failed(self) -> None:
        """A current request failed; results are left as they are."""
        self._running = False

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def export_state(self) -> dict[str, Any]:
        return {
            "params": copy.deepcopy(self._params),
            "filters": [flt.as_tuple() for flt in self._filters],
            "persistent_filters": [flt.as_tuple() for flt in self._persistent_filters],
        }

    def restore(self, state: Mapping[str, Any]) -> None:
        """Merge a decoded state token.

        Params are merged; filter lists present in *state* replace the current ones.
        """
        params = state.get("params")
        if params:
            self._params = _prune({**self._params, **params})
            self._view = {key: self._params.get(key) for key in VIEW_PARAMS}
        if "filters" in state:
            self._filters = [Filter.from_tuple(item) for item in state["filters"]]
        if "persistent_filters" in state:
            self._persistent_filters = [Filter.from_tuple(item) for item in state["persistent_filters"]]

    def snapshot(self, stats: Any = None) -> QuerySnapshot:
        return QuerySnapshot(
            **self._view,
            total_count=self._total_count,
            total_pages=self._total_pages,
            running=self._running,
            request_id=self._request_id,
            params=copy.deepcopy(self._params),
            filters=[flt.as_tuple() for flt in self._filters],
            persistent_filters=[flt.as_tuple() for flt in self._persistent_filters],
            fixed_order=self.fixed_order,
            objects=copy.deepcopy(self._objects),
            aggregations=copy.deepcopy(self._aggregations),
            stats=copy.deepcopy(stats),
        )
