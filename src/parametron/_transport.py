"""Search executors.

An executor is any coroutine function called as
``await executor(body=..., params=..., schema=...)`` that returns the raw
search response mapping.  :class:`HttpExecutor` is the production
implementation for JSON search endpoints.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from parametron._constants import USER_AGENT
from parametron._redact import redact_for_log
from parametron.exceptions import ParametronTransportError
from parametron.serialization import camelize

_logger = logging.getLogger(__name__)


class Executor(Protocol):
    """Structural executor interface.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpExecutor`) concrete.
    """

    async def __call__(
        self,
        *,
        body: Mapping[str, Any],
        params: Mapping[str, Any],
        schema: str | None,
    ) -> Mapping[str, Any]:
        ...


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return json.dumps(value, separators=(",", ":"))


class HttpExecutor:
    """POST search bodies to ``{base_url}/{model}/{action}``.

    ``model`` may be dotted (``"pm.product"``); dots become path segments.
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        *,
        session: aiohttp.ClientSession,
        action: str = "search",
        headers: Mapping[str, str] | None = None,
        camelize_response: bool = False,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._endpoint = "/" + "/".join([*model.split("."), action])
        self._http = session
        self._headers = dict(headers or {})
        self._camelize_response = camelize_response

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def __call__(
        self,
        *,
        body: Mapping[str, Any],
        params: Mapping[str, Any],
        schema: str | None = None,
    ) -> dict[str, Any]:
        headers: dict[str, str] = {
            "accept": "application/json",
            "content-type": "application/json; charset=UTF-8",
            "user-agent": USER_AGENT,
            **self._headers,
        }
        if schema:
            headers["schema"] = schema

        endpoint = self._endpoint
        url = f"{self._base_url}{endpoint}"
        query = {key: _query_value(value) for key, value in params.items() if value is not None}

        _logger.debug("POST %s params=%s headers=%s", url, query, redact_for_log(headers))
        _logger.debug("POST %s body=%s", url, redact_for_log(body))

        try:
            async with self._http.post(
                url,
                data=json.dumps(body, separators=(",", ":")),
                params=query,
                headers=headers,
            ) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise ParametronTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except ParametronTransportError:
            raise
        except aiohttp.ClientError as exc:
            raise ParametronTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            result = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParametronTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc

        if not isinstance(result, dict):
            raise ParametronTransportError(
                f"Expected a JSON object from {endpoint}",
                endpoint=endpoint,
            )

        if self._camelize_response:
            # Facet names are looked up verbatim (``count_by_<attribute>``).
            aggregations = result.get("aggregations")
            result = camelize(result)
            if aggregations is not None:
                result["aggregations"] = aggregations
        return result
