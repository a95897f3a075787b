"""Request sequencing against the search executor.

Every fire gets a monotonically increasing request id from the store.  When
a response arrives its id is compared with the store's current id; a
mismatch means a newer request was issued meanwhile and the response is
dropped without touching state.  Nothing is cancelled upstream: in-flight
executor calls always run to completion, only their results are ignored.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import StrEnum

from pydantic import ValidationError

from parametron._redact import redact_for_log
from parametron._transport import Executor
from parametron.config import ParametronConfig
from parametron.exceptions import ParametronConfigError, ParametronResponseError, RequestSuperseded
from parametron.models.results import QuerySnapshot, SearchResult
from parametron.state.store import QueryStore

_logger = logging.getLogger(__name__)

UpdateCallback = Callable[[QuerySnapshot], None]


class FetchPhase(StrEnum):
    IDLE = "idle"
    PREPARING = "preparing"
    AWAITING = "awaiting"
    RECONCILED = "reconciled"
    FAILED = "failed"


class FetchCoordinator:
    """Fires requests for a :class:`QueryStore` and reconciles the results.

    ``phase`` tracks the newest request only; a stale response never moves it.
    """

    def __init__(
        self,
        store: QueryStore,
        executor: Executor,
        config: ParametronConfig | None = None,
        *,
        update: UpdateCallback | None = None,
    ) -> None:
        if executor is None:
            raise ParametronConfigError("'executor' option missing")
        self._store = store
        self._executor = executor
        self._config = config or ParametronConfig()
        self._update = update
        self.phase = FetchPhase.IDLE

    def snapshot(self) -> QuerySnapshot:
        return self._store.snapshot(self._config.stats)

    def _notify(self) -> None:
        if self._update is not None:
            self._update(self.snapshot())

    def prepare(self) -> int:
        """Enter the loading state immediately and return the new request id."""
        request_id = self._store.begin_request()
        self.phase = FetchPhase.PREPARING
        _logger.debug("Prepared request id=%d", request_id)
        self._notify()
        return request_id

    async def fire(self) -> QuerySnapshot:
        """Issue a request and commit its results if it is still the newest.

        Raises :class:`RequestSuperseded` when a newer request was issued
        before this one resolved; executor errors propagate unchanged.
        """
        request_id = self.prepare()
        body = self._store.build_body(self._config.stats)
        params = self._store.params
        schema = self._config.schema

        self.phase = FetchPhase.AWAITING
        _logger.debug("Dispatching request id=%d body=%s", request_id, redact_for_log(body))

        try:
            raw = await self._executor(body=body, params=params, schema=schema)
            result = raw if isinstance(raw, SearchResult) else SearchResult.model_validate(raw)
        except asyncio.CancelledError:
            if self._store.is_current(request_id):
                self._fail(request_id)
            raise
        except ValidationError as exc:
            self._raise_if_stale(request_id, exc)
            self._fail(request_id)
            raise ParametronResponseError(f"Invalid search response: {exc}") from exc
        except Exception as exc:
            self._raise_if_stale(request_id, exc)
            self._fail(request_id)
            raise

        self._raise_if_stale(request_id)
        self._store.commit(result)
        self.phase = FetchPhase.RECONCILED
        _logger.debug(
            "Committed request id=%d objects=%d total_count=%d",
            request_id,
            len(result.objects),
            result.pagination.total_count,
        )
        snapshot = self.snapshot()
        if self._update is not None:
            self._update(snapshot)
        return snapshot

    def _raise_if_stale(self, request_id: int, cause: BaseException | None = None) -> None:
        if self._store.is_current(request_id):
            return
        current_id = self._store.request_id
        _logger.debug("Discarding request id=%d superseded by id=%d", request_id, current_id)
        raise RequestSuperseded(request_id, current_id) from cause

    def _fail(self, request_id: int) -> None:
        self._store.finish_failed()
        self.phase = FetchPhase.FAILED
        _logger.debug("Request id=%d failed", request_id, exc_info=True)
        self._notify()

