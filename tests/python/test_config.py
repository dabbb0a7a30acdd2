# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tests for EngineConfig and the process-wide default config.
"""

import pytest

from symgraph import Graph
from symgraph.config import EngineConfig, get_config, set_config
from symgraph.errors import ConfigurationError
from symgraph.observability import Verbosity, get_logger


class TestEngineConfig:
    """Tests for the EngineConfig dataclass."""

    def test_defaults(self):
        config = EngineConfig()
        assert config.verbosity == 2
        assert config.memoize_ops is True
        assert config.strict_erfinv_domain is False
        assert config.default_seed == 0

    def test_frozen(self):
        config = EngineConfig()
        with pytest.raises(AttributeError):
            config.verbosity = 3

    @pytest.mark.parametrize("verbosity", [-1, 5])
    def test_invalid_verbosity(self, verbosity):
        with pytest.raises(ConfigurationError):
            EngineConfig(verbosity=verbosity)

    def test_negative_seed(self):
        with pytest.raises(ConfigurationError):
            EngineConfig(default_seed=-1)


class TestFromEnv:
    """Tests for SYMGRAPH_* environment overrides."""

    def test_reads_all_variables(self, monkeypatch):
        monkeypatch.setenv("SYMGRAPH_VERBOSITY", "4")
        monkeypatch.setenv("SYMGRAPH_MEMOIZE", "off")
        monkeypatch.setenv("SYMGRAPH_STRICT_ERFINV", "yes")
        monkeypatch.setenv("SYMGRAPH_SEED", "42")

        config = EngineConfig.from_env()
        assert config.verbosity == 4
        assert config.memoize_ops is False
        assert config.strict_erfinv_domain is True
        assert config.default_seed == 42

    def test_unset_keeps_base(self, monkeypatch):
        for key in ("SYMGRAPH_VERBOSITY", "SYMGRAPH_MEMOIZE",
                    "SYMGRAPH_STRICT_ERFINV", "SYMGRAPH_SEED"):
            monkeypatch.delenv(key, raising=False)
        base = EngineConfig(default_seed=9)
        assert EngineConfig.from_env(base) == base

    def test_bad_bool(self, monkeypatch):
        monkeypatch.setenv("SYMGRAPH_MEMOIZE", "maybe")
        with pytest.raises(ConfigurationError) as exc_info:
            EngineConfig.from_env()
        assert exc_info.value.context["config_key"] == "SYMGRAPH_MEMOIZE"

    def test_bad_int(self, monkeypatch):
        monkeypatch.setenv("SYMGRAPH_SEED", "seven")
        with pytest.raises(ConfigurationError):
            EngineConfig.from_env()


class TestDefaultConfig:
    """Tests for get_config / set_config."""

    def test_graph_uses_default(self):
        config = EngineConfig(default_seed=5)
        set_config(config)
        assert get_config() is config
        assert Graph().config is config

    def test_explicit_graph_config(self):
        config = EngineConfig(memoize_ops=False)
        assert Graph(config=config).config is config

    def test_set_config_applies_verbosity(self):
        set_config(EngineConfig(verbosity=4))
        assert get_logger().get_verbosity() == Verbosity.DEBUG
