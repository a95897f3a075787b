"""High-level search session API."""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterable, Mapping
from typing import Any

from parametron._transport import Executor
from parametron.config import ParametronConfig
from parametron.coordinator import FetchCoordinator, FetchPhase, UpdateCallback
from parametron.exceptions import ParametronConfigError, RequestSuperseded
from parametron.location import Location
from parametron.models.filters import Filter, FilterMethod, FilterValue
from parametron.models.results import QuerySnapshot
from parametron.serialization import deserialize, serialize
from parametron.state.store import QueryStore

_logger = logging.getLogger(__name__)


class Parametron:
    """A stateful search session.

    Mutators (``set_filter``, ``set_params`` ...) only change local state and
    return the session for chaining; ``fire()`` submits the accumulated query.
    The ``apply_*`` coroutines mutate and fire in one call.

    Usage::

        async with Parametron(executor, update=render) as search:
            search.set_filter("genre", "eq", "drama").set_params(per=48)
            snapshot = await search.fire()

    Only the newest request's results are ever committed.  An older
    ``fire()`` that resolves late raises :class:`RequestSuperseded`, which is
    not an error and can be ignored.
    """

    def __init__(
        self,
        executor: Executor,
        config: ParametronConfig | None = None,
        *,
        init: Callable[[Parametron], None] | None = None,
        update: UpdateCallback | None = None,
        location: Location | None = None,
    ) -> None:
        if executor is None:
            raise ParametronConfigError("'executor' option missing")
        self._config = config or ParametronConfig()
        if self._config.serialize_to_url and location is None:
            raise ParametronConfigError("'serialize_to_url' requires a location")

        self._location = location
        self._store = QueryStore(self._config)
        self._coordinator = FetchCoordinator(self._store, executor, self._config, update=update)

        if init is not None:
            init(self)
        if self._config.serialize_to_url:
            self._restore_from_location()
        if update is not None:
            update(self.snapshot())

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> Parametron:
        if self._config.immediate:
            try:
                await self.fire()
            except RequestSuperseded:
                _logger.debug("Initial fire superseded")
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None

    # ------------------------------------------------------------------
    # State inspection
    # ------------------------------------------------------------------

    @property
    def config(self) -> ParametronConfig:
        return self._config

    @property
    def phase(self) -> FetchPhase:
        return self._coordinator.phase

    @property
    def data(self) -> QuerySnapshot:
        return self.snapshot()

    def snapshot(self) -> QuerySnapshot:
        return self._coordinator.snapshot()

    def get_filters(self, attribute: str | None = None, method: FilterMethod | str | None = None) -> list[Filter]:
        return self._store.get_filters(attribute, method)

    def get_filter_values(self, attribute: str, method: FilterMethod | str) -> Any:
        return self._store.get_filter_values(attribute, method)

    def get_aggregations(self, attribute: str) -> Any:
        return self._store.get_aggregations(attribute)

    def pristine(self) -> bool:
        return self._store.pristine()

    def serialize(self) -> str:
        return serialize(self._store)

    # ------------------------------------------------------------------
    # Mutators (chainable, never fire)
    # ------------------------------------------------------------------

    def set_filter(
        self,
        attribute: str,
        method: FilterMethod | str,
        value1: FilterValue | None = None,
        value2: FilterValue | None = None,
    ) -> Parametron:
        self._store.set_filter(attribute, method, value1, value2)
        return self

    def set_persistent_filter(
        self,
        attribute: str,
        method: FilterMethod | str,
        value1: FilterValue | None = None,
        value2: FilterValue | None = None,
    ) -> Parametron:
        self._store.set_persistent_filter(attribute, method, value1, value2)
        return self

    def drop_filters(self, attribute: str | None = None, method: FilterMethod | str | None = None) -> Parametron:
        self._store.drop_filters(attribute, method)
        return self

    def set_params(self, patch: Mapping[str, Any] | None = None, /, **params: Any) -> Parametron:
        self._store.set_params(patch, **params)
        return self

    def drop_params(self, *keys: str) -> Parametron:
        self._store.drop_params(*keys)
        return self

    def set_fixed_order(self, ids: Iterable[Hashable] | None) -> Parametron:
        self._store.set_fixed_order(ids)
        return self

    # ------------------------------------------------------------------
    # Firing
    # ------------------------------------------------------------------

    def prepare(self) -> int:
        """Switch to the loading state without firing."""
        return self._coordinator.prepare()

    async def fire(self) -> QuerySnapshot:
        snapshot = await self._coordinator.fire()
        if self._config.serialize_to_url:
            self._write_to_location()
        return snapshot

    async def apply_filter(
        self,
        attribute: str,
        method: FilterMethod | str,
        value1: FilterValue | None = None,
        value2: FilterValue | None = None,
    ) -> QuerySnapshot:
        return await self.set_filter(attribute, method, value1, value2).fire()

    async def apply_persistent_filter(
        self,
        attribute: str,
        method: FilterMethod | str,
        value1: FilterValue | None = None,
        value2: FilterValue | None = None,
    ) -> QuerySnapshot:
        return await self.set_persistent_filter(attribute, method, value1, value2).fire()

    async def apply_drop_filters(
        self, attribute: str | None = None, method: FilterMethod | str | None = None
    ) -> QuerySnapshot:
        return await self.drop_filters(attribute, method).fire()

    async def apply_params(self, patch: Mapping[str, Any] | None = None, /, **params: Any) -> QuerySnapshot:
        return await self.set_params(patch, **params).fire()

    # ------------------------------------------------------------------
    # Location persistence
    # ------------------------------------------------------------------

    def _restore_from_location(self) -> None:
        if self._location is None:
            return
        token = self._location.read().get(self._config.url_param)
        state = deserialize(token)
        if state:
            _logger.debug("Restoring state from location parameter %r", self._config.url_param)
            self._store.restore(state)

    def _write_to_location(self) -> None:
        if self._location is None:
            return
        self._location.write({self._config.url_param: self.serialize()})
