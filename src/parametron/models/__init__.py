"""Pydantic models used by parametron."""

from parametron.models.filters import Filter, FilterMethod, FilterValue, Scalar
from parametron.models.results import Pagination, QuerySnapshot, SearchResult

__all__ = [
    "Filter",
    "FilterMethod",
    "FilterValue",
    "Pagination",
    "QuerySnapshot",
    "Scalar",
    "SearchResult",
]
