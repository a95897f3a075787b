from __future__ import annotations

import pytest

from parametron.config import ParametronConfig


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "PARAMETRON_PER",
        "PARAMETRON_SORT",
        "PARAMETRON_ORDER",
        "PARAMETRON_SCHEMA",
        "PARAMETRON_STATS",
        "PARAMETRON_IMMEDIATE",
        "PARAMETRON_SERIALIZE_TO_URL",
        "PARAMETRON_URL_PARAM",
        "PARAMETRON_ID_KEY",
        "PARAMETRON_FIXED_ORDER_PER",
    ):
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    config = ParametronConfig.from_env()

    assert config.immediate is True
    assert config.serialize_to_url is False
    assert config.url_param == "p"
    assert config.initial_params() == {"page": 1, "per": 24, "sort": "created_at", "order": "desc"}


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PARAMETRON_PER", "48")
    monkeypatch.setenv("PARAMETRON_SORT", "title")
    monkeypatch.setenv("PARAMETRON_SCHEMA", "id, title")
    monkeypatch.setenv("PARAMETRON_STATS", '{"genre": {}}')
    monkeypatch.setenv("PARAMETRON_IMMEDIATE", "no")
    monkeypatch.setenv("PARAMETRON_SERIALIZE_TO_URL", "1")
    monkeypatch.setenv("PARAMETRON_FIXED_ORDER_PER", "250")

    config = ParametronConfig.from_env()

    assert config.initial_params()["per"] == 48
    assert config.initial_params()["sort"] == "title"
    assert config.schema == "id, title"
    assert config.stats == {"genre": {}}
    assert config.immediate is False
    assert config.serialize_to_url is True
    assert config.fixed_order_per == 250


def test_plain_stats_string_kept(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PARAMETRON_STATS", "genre,year")
    assert ParametronConfig.from_env().stats == "genre,year"


def test_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PARAMETRON_PER", "48")
    monkeypatch.setenv("PARAMETRON_IMMEDIATE", "false")

    config = ParametronConfig.from_env(immediate=True, params={"per": 12, "lang": "en"})

    assert config.immediate is True
    assert config.params == {"per": 12, "lang": "en"}
