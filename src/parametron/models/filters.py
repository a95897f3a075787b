"""Filter tuples.

A filter is an ``(attribute, method, value...)`` constraint.  On the wire it
travels as a flat list, e.g. ``["year", "range", 1900, 2008]``.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum
from typing import Any

from pydantic import Field

from parametron.models._base import ParametronBaseModel

Scalar = str | int | float | bool
FilterValue = Scalar | list[Scalar]


class FilterMethod(StrEnum):
    QUERY = "q"
    MATCH = "match"
    EQ = "eq"
    NE = "ne"
    IN = "in"
    NOT_IN = "not_in"
    RANGE = "range"
    EXIST = "exist"
    NOT_EXIST = "not_exist"


class Filter(ParametronBaseModel):
    """One search constraint."""

    attribute: str
    method: FilterMethod
    values: tuple[FilterValue, ...] = Field(default=(), max_length=2)

    @classmethod
    def build(
        cls,
        attribute: str,
        method: FilterMethod | str,
        value1: FilterValue | None = None,
        value2: FilterValue | None = None,
    ) -> Filter:
        """Build a filter, dropping unset values.

        Attribute and method are always kept, even when empty.
        """
        values = tuple(value for value in (value1, value2) if value is not None)
        return cls(attribute=attribute, method=FilterMethod(method), values=values)

    @classmethod
    def from_tuple(cls, data: Sequence[Any]) -> Filter:
        attribute, method, *values = data
        return cls(attribute=attribute, method=method, values=tuple(values))

    def as_tuple(self) -> list[Any]:
        return [self.attribute, self.method.value, *self.values]
