"""Client configuration for parametron."""

from __future__ import annotations

import dataclasses
import json
import os
from typing import Any

from parametron._constants import DEFAULT_PARAMS, FIXED_ORDER_PAGE_SIZE, URL_STATE_PARAM


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_stats(value: str) -> Any:
    """Stats may be a plain facet list (``"a,b"``) or a JSON document."""
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


@dataclasses.dataclass(frozen=True)
class ParametronConfig:
    """Search session configuration.

    Parameters
    ----------
    params : dict
        Initial params merged over the defaults
        (``page=1, per=24, sort=created_at, order=desc``).
    stats : Any
        Facet request passed through verbatim as ``body["stats"]``.
        Omitted from the body when ``None``.
    schema : str or None
        Response schema passed through verbatim to the executor.
    immediate : bool
        Fire once when the session is entered (``async with``).
    serialize_to_url : bool
        Persist the state token into the injected location after every
        committed fire, and restore it on construction.
    url_param : str
        Query-string parameter that carries the state token.
    id_key : str
        Key (or attribute) identifying an object for fixed ordering.
    fixed_order_per : int
        Page size requested while a fixed order is active.
    """

    params: dict[str, Any] = dataclasses.field(default_factory=dict)
    stats: Any = None
    schema: str | None = None
    immediate: bool = True
    serialize_to_url: bool = False
    url_param: str = URL_STATE_PARAM
    id_key: str = "id"
    fixed_order_per: int = FIXED_ORDER_PAGE_SIZE

    def initial_params(self) -> dict[str, Any]:
        """Defaults merged with ``params``; ``None`` values unset a default."""
        merged = {**DEFAULT_PARAMS, **self.params}
        return {key: value for key, value in merged.items() if value is not None}

    @classmethod
    def from_env(cls, **overrides: Any) -> ParametronConfig:
        """Create configuration from environment variables.

        Reads optional ``PARAMETRON_*`` variables. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        ParametronConfig
            Populated configuration.
        """
        env = os.environ

        params: dict[str, Any] = {}
        per_env = env.get("PARAMETRON_PER")
        if per_env is not None:
            params["per"] = int(per_env)
        for env_key, param in (("PARAMETRON_SORT", "sort"), ("PARAMETRON_ORDER", "order")):
            val = env.get(env_key)
            if val is not None:
                params[param] = val

        # Explicit params extend (not replace) the env-derived ones
        param_overrides = overrides.pop("params", None)
        if isinstance(param_overrides, dict):
            params.update(param_overrides)

        config_kwargs: dict[str, Any] = {"params": params}

        _ENV_CONFIG_MAP = {
            "PARAMETRON_SCHEMA": "schema",
            "PARAMETRON_URL_PARAM": "url_param",
            "PARAMETRON_ID_KEY": "id_key",
        }
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        stats_env = env.get("PARAMETRON_STATS")
        if stats_env is not None and "stats" not in overrides:
            config_kwargs["stats"] = _env_stats(stats_env)

        if "immediate" not in overrides:
            config_kwargs["immediate"] = _env_bool(env.get("PARAMETRON_IMMEDIATE"), True)

        if "serialize_to_url" not in overrides:
            config_kwargs["serialize_to_url"] = _env_bool(env.get("PARAMETRON_SERIALIZE_TO_URL"), False)

        per_fixed_env = env.get("PARAMETRON_FIXED_ORDER_PER")
        if per_fixed_env is not None and "fixed_order_per" not in overrides:
            config_kwargs["fixed_order_per"] = int(per_fixed_env)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
