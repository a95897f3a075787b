"""Portable state tokens.

A token is URL-safe base64 over compact JSON::

    {"params": {...}, "filters": [[...]], "persistentFilters": [[...]]}

Decoding never raises: anything malformed yields an empty dict.
"""

from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import Field, ValidationError
from pydantic.alias_generators import to_camel

from parametron.models._base import ParametronBaseModel
from parametron.models.filters import Filter
from parametron.state.store import QueryStore

_logger = logging.getLogger(__name__)


class StateToken(ParametronBaseModel):
    params: dict[str, Any] = Field(default_factory=dict)
    filters: list[list[Any]] = Field(default_factory=list)
    persistent_filters: list[list[Any]] = Field(default_factory=list)


def encode_state(state: Mapping[str, Any]) -> str:
    token = StateToken.model_validate(state)
    raw = token.model_dump_json(by_alias=True)
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def serialize(store: QueryStore) -> str:
    """Encode the params and filters of *store*."""
    return encode_state(store.export_state())


def deserialize(token: str | None) -> dict[str, Any]:
    """Decode a token into ``{"params", "filters", "persistent_filters"}``.

    Returns ``{}`` for missing, corrupt or structurally invalid tokens.
    """
    if not token:
        return {}
    try:
        padded = token + "=" * (-len(token) % 4)
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        decoded = StateToken.model_validate_json(raw)
        # Filters must also parse as valid filter tuples.
        for item in (*decoded.filters, *decoded.persistent_filters):
            Filter.from_tuple(item)
    except (binascii.Error, UnicodeError, ValueError, ValidationError) as exc:
        _logger.debug("Ignoring malformed state token: %s", exc)
        return {}
    return decoded.model_dump()


def camelize(data: Any) -> Any:
    """Recursively camel-case the keys of dicts (inside lists too).

    A leading ``@`` is kept, so ``"@type_name"`` becomes ``"@typeName"``.
    """
    if isinstance(data, list):
        return [camelize(item) for item in data]
    if isinstance(data, Mapping):
        camelized: dict[str, Any] = {}
        for key, value in data.items():
            name = str(key)
            if name.startswith("@"):
                name = f"@{to_camel(name[1:])}"
            else:
                name = to_camel(name)
            camelized[name] = camelize(value)
        return camelized
    return data
