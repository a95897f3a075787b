"""Deterministic filter and ordering rules.

Pure functions; the store decides when to apply them.
"""

from __future__ import annotations

import math
from collections.abc import Hashable, Iterable, Mapping, Sequence
from typing import Any

from parametron._constants import QUERY_ATTRIBUTE
from parametron.models.filters import Filter, FilterMethod

_FAMILIES: tuple[frozenset[FilterMethod], ...] = (
    frozenset({FilterMethod.MATCH}),
    frozenset({FilterMethod.EQ, FilterMethod.NE}),
    frozenset({FilterMethod.RANGE, FilterMethod.IN, FilterMethod.NOT_IN}),
    frozenset({FilterMethod.EXIST, FilterMethod.NOT_EXIST}),
)

#: Methods a newly set filter replaces on the same attribute.
SUPERSEDES: dict[FilterMethod, frozenset[FilterMethod]] = {
    method: family for family in _FAMILIES for method in family
}


def matches(flt: Filter, attribute: str | None = None, method: FilterMethod | str | None = None) -> bool:
    """Attribute/method predicate; an omitted (or empty) criterion matches anything."""
    if attribute and method:
        return flt.attribute == attribute and flt.method == method
    if attribute:
        return flt.attribute == attribute
    if method:
        return flt.method == method
    return True


def is_replaced_by(existing: Filter, incoming: Filter) -> bool:
    """Whether setting *incoming* removes *existing*."""
    if incoming.method == FilterMethod.QUERY:
        # Full-text query is a singleton regardless of attribute.
        return existing.attribute == QUERY_ATTRIBUTE or existing.method == FilterMethod.QUERY
    family = SUPERSEDES.get(incoming.method, frozenset())
    return existing.attribute == incoming.attribute and existing.method in family


def identify(obj: Any, id_key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(id_key)
    return getattr(obj, id_key, None)


def apply_fixed_order(objects: Iterable[Any], order: Sequence[Hashable], id_key: str = "id") -> list[Any]:
    """Stable sort of *objects* by the position of their id in *order*.

    Objects whose id is not listed sort to the end, keeping their relative order.
    """
    positions: dict[Any, int] = {}
    for index, ident in enumerate(order):
        positions.setdefault(ident, index)

    def _position(obj: Any) -> float:
        ident = identify(obj, id_key)
        try:
            return positions.get(ident, math.inf)
        except TypeError:  # unhashable id
            return math.inf

    return sorted(objects, key=_position)
