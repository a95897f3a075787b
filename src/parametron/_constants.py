"""Internal constants shared across the library."""

from __future__ import annotations

from typing import Any

USER_AGENT = "parametron"

DEFAULT_PARAMS: dict[str, Any] = {
    "page": 1,
    "per": 24,
    "sort": "created_at",
    "order": "desc",
}

#: Params copied onto the public view on every prepare.
VIEW_PARAMS: tuple[str, ...] = ("page", "per", "sort", "order")

#: Page size requested while a fixed order is active.  The server cannot
#: order by an arbitrary id list, so one large page is fetched and sorted locally.
FIXED_ORDER_PAGE_SIZE = 1000

#: Query-string parameter carrying the serialized state token.
URL_STATE_PARAM = "p"

AGGREGATION_PREFIX = "count_by_"

#: Pseudo-attribute used by full-text ``q`` filters.
QUERY_ATTRIBUTE = "_"
