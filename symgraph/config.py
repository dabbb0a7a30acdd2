# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Engine configuration.

Example:
    from symgraph.config import EngineConfig, set_config

    set_config(EngineConfig(strict_erfinv_domain=True))
"""

import os
from dataclasses import dataclass, replace
from typing import Optional

from .errors import ConfigurationError
from .observability import set_verbosity


_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(key: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigurationError(
        "expected a boolean flag", config_key=key, config_value=raw
    )


def _parse_int(key: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            "expected an integer", config_key=key, config_value=raw
        ) from None


@dataclass(frozen=True)
class EngineConfig:
    """
    Configuration for graph construction and execution.

    Attributes:
        verbosity: Structured logger verbosity level (0-4)
        memoize_ops: Reuse an existing node when the same operator is
            applied to the same inputs
        strict_erfinv_domain: Raise DomainError for erfinv inputs
            outside [-1, 1] instead of producing inf/nan
        default_seed: Seed for sampling ops built without one
    """

    verbosity: int = 2
    memoize_ops: bool = True
    strict_erfinv_domain: bool = False
    default_seed: int = 0

    def __post_init__(self):
        if not 0 <= self.verbosity <= 4:
            raise ConfigurationError(
                "verbosity must be between 0 and 4",
                config_key="verbosity",
                config_value=str(self.verbosity),
            )
        if self.default_seed < 0:
            raise ConfigurationError(
                "seed must be non-negative",
                config_key="default_seed",
                config_value=str(self.default_seed),
            )

    @classmethod
    def from_env(cls, base: Optional["EngineConfig"] = None) -> "EngineConfig":
        """
        Build a config from SYMGRAPH_* environment variables.

        Unset variables keep the value from ``base`` (or the defaults).
        """
        config = base or cls()
        overrides = {}

        raw = os.environ.get("SYMGRAPH_VERBOSITY")
        if raw is not None:
            overrides["verbosity"] = _parse_int("SYMGRAPH_VERBOSITY", raw)

        raw = os.environ.get("SYMGRAPH_MEMOIZE")
        if raw is not None:
            overrides["memoize_ops"] = _parse_bool("SYMGRAPH_MEMOIZE", raw)

        raw = os.environ.get("SYMGRAPH_STRICT_ERFINV")
        if raw is not None:
            overrides["strict_erfinv_domain"] = _parse_bool(
                "SYMGRAPH_STRICT_ERFINV", raw
            )

        raw = os.environ.get("SYMGRAPH_SEED")
        if raw is not None:
            overrides["default_seed"] = _parse_int("SYMGRAPH_SEED", raw)

        return replace(config, **overrides)


_config: Optional[EngineConfig] = None


def get_config() -> EngineConfig:
    """Get the process-wide default config, reading the environment once."""
    global _config
    if _config is None:
        _config = EngineConfig.from_env()
    return _config


def set_config(config: Optional[EngineConfig]) -> None:
    """Replace the process-wide default config (None re-reads the environment)."""
    global _config
    _config = config
    if config is not None:
        set_verbosity(config.verbosity)
