"""parametron - Stateful search query builder with last-request-wins reconciliation."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("parametron")
except PackageNotFoundError:
    __version__ = "0+local"
from parametron._transport import Executor, HttpExecutor
from parametron.client import Parametron
from parametron.config import ParametronConfig
from parametron.coordinator import FetchCoordinator, FetchPhase
from parametron.exceptions import (
    ParametronConfigError,
    ParametronError,
    ParametronResponseError,
    ParametronTransportError,
    RequestSuperseded,
)
from parametron.location import Location, QueryStringLocation
from parametron.models import (
    Filter,
    FilterMethod,
    Pagination,
    QuerySnapshot,
    SearchResult,
)
from parametron.serialization import camelize, deserialize, serialize
from parametron.state.store import QueryStore

__all__ = [
    "__version__",
    "Executor",
    "FetchCoordinator",
    "FetchPhase",
    "Filter",
    "FilterMethod",
    "HttpExecutor",
    "Location",
    "Pagination",
    "Parametron",
    "ParametronConfig",
    "ParametronConfigError",
    "ParametronError",
    "ParametronResponseError",
    "ParametronTransportError",
    "QuerySnapshot",
    "QueryStore",
    "QueryStringLocation",
    "RequestSuperseded",
    "SearchResult",
    "camelize",
    "deserialize",
    "serialize",
]
