"""Base model shared by parametron's pydantic models.

* ``alias_generator=to_camel`` so payloads may use either ``total_count`` or
  ``totalCount``; dumps with ``by_alias=True`` produce camelCase.
* Frozen instances; the store hands out snapshots, never live state.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ParametronBaseModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )
