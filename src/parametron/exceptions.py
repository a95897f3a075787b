"""Custom exception hierarchy for parametron."""

from __future__ import annotations


class ParametronError(Exception):
    """Base exception for all parametron errors."""


class ParametronConfigError(ParametronError):
    """Invalid or missing configuration."""


class ParametronTransportError(ParametronError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class ParametronResponseError(ParametronError):
    """Executor returned a payload that is not a valid search result."""


class RequestSuperseded(Exception):  # noqa: N818
    """A resolved request whose results were discarded.

    Raised from ``fire()`` when a newer request was issued before this one
    resolved.  This is not a failure: nothing was applied and nothing needs
    reporting.  It intentionally does not derive from :class:`ParametronError`
    so ``except ParametronError`` never swallows or mistakes it.
    """

    def __init__(self, request_id: int, current_id: int) -> None:
        self.request_id = request_id
        self.current_id = current_id
        super().__init__(f"request {request_id} superseded by request {current_id}")
