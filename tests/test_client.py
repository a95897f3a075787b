from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from parametron import (
    Parametron,
    ParametronConfig,
    ParametronConfigError,
    QuerySnapshot,
    QueryStringLocation,
    RequestSuperseded,
    deserialize,
)
from parametron.serialization import encode_state


@dataclass
class FakeSearchBackend:
    """Answers every search with the objects whose ids it was configured with."""

    ids: list[int] = field(default_factory=lambda: [1, 2, 3])
    bodies: list[dict[str, Any]] = field(default_factory=list)

    async def __call__(self, *, body: Mapping[str, Any], params: Mapping[str, Any], schema: str | None) -> Any:
        self.bodies.append(dict(body))
        return {
            "objects": [{"id": ident} for ident in self.ids],
            "aggregations": {"count_by_genre": [{"value": "drama", "count": len(self.ids)}]},
            "pagination": {"total_count": len(self.ids), "total_pages": 1},
        }


def test_missing_executor_raises_at_construction() -> None:
    with pytest.raises(ParametronConfigError):
        Parametron(None)  # type: ignore[arg-type]


def test_serialize_to_url_requires_location() -> None:
    with pytest.raises(ParametronConfigError):
        Parametron(FakeSearchBackend(), ParametronConfig(serialize_to_url=True))


def test_init_runs_before_initial_update() -> None:
    events: list[str] = []

    def init(api: Parametron) -> None:
        events.append("init")
        api.set_persistent_filter("owner", "eq", 7)

    def update(snapshot: QuerySnapshot) -> None:
        events.append(f"update:{snapshot.persistent_filters}")

    Parametron(FakeSearchBackend(), init=init, update=update)

    assert events == ["init", "update:[['owner', 'eq', 7]]"]


def test_mutators_chain() -> None:
    search = Parametron(FakeSearchBackend())

    result = (
        search.set_filter("genre", "eq", "drama")
        .set_filter("year", "range", 1900, 2008)
        .set_persistent_filter("published", "eq", True)
        .set_params(per=10, lang="en")
        .drop_params("lang")
        .drop_filters("genre")
        .set_fixed_order([2, 1])
    )

    assert result is search
    assert search.get_filter_values("year", "range") == [1900, 2008]
    assert search.get_filters("genre") == []
    assert not search.pristine()
    assert search.data.params == {"page": 1, "per": 1000}


@pytest.mark.asyncio
async def test_context_manager_fires_immediately() -> None:
    backend = FakeSearchBackend()
    updates: list[QuerySnapshot] = []

    async with Parametron(backend, update=updates.append) as search:
        assert search.data.objects == [{"id": 1}, {"id": 2}, {"id": 3}]
        assert search.get_aggregations("genre") == [{"value": "drama", "count": 3}]

    # construction, prepare, commit
    assert [snapshot.running for snapshot in updates] == [False, True, False]
    assert len(backend.bodies) == 1


@pytest.mark.asyncio
async def test_context_manager_respects_immediate_false() -> None:
    backend = FakeSearchBackend()

    async with Parametron(backend, ParametronConfig(immediate=False)) as search:
        assert search.data.request_id == 0

    assert backend.bodies == []


@pytest.mark.asyncio
async def test_apply_helpers_mutate_and_fire() -> None:
    backend = FakeSearchBackend()
    search = Parametron(backend, ParametronConfig(immediate=False))

    await search.apply_filter("_", "q", "Foo")
    await search.apply_params(per=5)
    await search.apply_persistent_filter("owner", "eq", 1)
    snapshot = await search.apply_drop_filters()

    assert [body["search"]["filters"] for body in backend.bodies] == [
        [["_", "q", "Foo"]],
        [["_", "q", "Foo"]],
        [["owner", "eq", 1], ["_", "q", "Foo"]],
        [["owner", "eq", 1]],
    ]
    assert backend.bodies[1]["per"] == 5
    assert snapshot.request_id == 4
    assert search.pristine()


@pytest.mark.asyncio
async def test_superseded_fire_is_distinguishable() -> None:
    gate: asyncio.Future[None] = asyncio.get_running_loop().create_future()
    calls = 0

    async def executor(*, body: Mapping[str, Any], params: Mapping[str, Any], schema: str | None) -> Any:
        nonlocal calls
        calls += 1
        if calls == 1:
            await gate
            return {"objects": [{"id": "old"}]}
        return {"objects": [{"id": "new"}]}

    search = Parametron(executor, ParametronConfig(immediate=False))
    first = asyncio.create_task(search.fire())
    await asyncio.sleep(0)
    await search.fire()
    gate.set_result(None)

    with pytest.raises(RequestSuperseded):
        await first
    assert search.data.objects == [{"id": "new"}]


@pytest.mark.asyncio
async def test_state_written_to_location_after_fire() -> None:
    location = QueryStringLocation("https://example.com/search?tab=films")
    search = Parametron(
        FakeSearchBackend(),
        ParametronConfig(serialize_to_url=True, immediate=False),
        location=location,
    )
    search.set_filter("genre", "eq", "drama").set_params(per=12)

    await search.fire()

    query = location.read()
    assert query["tab"] == "films"
    state = deserialize(query["p"])
    assert state["filters"] == [["genre", "eq", "drama"]]
    assert state["params"]["per"] == 12


@pytest.mark.asyncio
async def test_state_restored_from_location_before_first_fire() -> None:
    source = Parametron(FakeSearchBackend(), ParametronConfig(immediate=False))
    source.set_filter("year", "range", 1900, 2008).set_persistent_filter("owner", "eq", 3).set_params(per=6)
    location = QueryStringLocation().url.update_query({"p": source.serialize()})

    backend = FakeSearchBackend()
    config = ParametronConfig(serialize_to_url=True)
    async with Parametron(backend, config, location=QueryStringLocation(location)) as search:
        assert search.get_filter_values("year", "range") == [1900, 2008]

    assert backend.bodies[0]["per"] == 6
    assert backend.bodies[0]["search"]["filters"] == [["owner", "eq", 3], ["year", "range", 1900, 2008]]


def test_corrupt_location_token_is_ignored() -> None:
    location = QueryStringLocation("/search?p=bm90IGpzb24")
    search = Parametron(
        FakeSearchBackend(),
        ParametronConfig(serialize_to_url=True, immediate=False),
        location=location,
    )

    assert search.pristine()
    assert search.data.params["per"] == 24


def test_location_token_with_non_numeric_page_still_constructs() -> None:
    token = encode_state({"params": {"page": "last", "sort": 3}})
    updates: list[QuerySnapshot] = []

    search = Parametron(
        FakeSearchBackend(),
        ParametronConfig(serialize_to_url=True, immediate=False),
        location=QueryStringLocation(f"/search?p={token}"),
        update=updates.append,
    )

    assert search.data.params["page"] == "last"
    assert updates[-1].page == "last"
    assert updates[-1].sort == 3


@pytest.mark.asyncio
async def test_arbitrary_param_values_survive_fire() -> None:
    backend = FakeSearchBackend()
    search = Parametron(backend, ParametronConfig(immediate=False))

    snapshot = await search.set_params(page="next", per="all").fire()

    assert snapshot.page == "next"
    assert snapshot.per == "all"
    assert snapshot.objects == [{"id": 1}, {"id": 2}, {"id": 3}]
    assert backend.bodies[0]["page"] == "next"
