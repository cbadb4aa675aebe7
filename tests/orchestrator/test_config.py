"""
Tests for scanner configuration loading.

============================================================
PURPOSE
============================================================
- Defaults, YAML and environment layering
- Type coercion of raw strings
- Unknown keys and invalid values raise ConfigurationError

============================================================
"""

import pytest

from core.exceptions import ConfigurationError
from orchestrator.config import JobConfig, ScannerConfig


# ============================================================
# FROM DICT
# ============================================================

class TestFromDict:

    def test_defaults(self):
        config = ScannerConfig.from_dict({})
        assert config.fetch.max_requests == 10
        assert config.job.concurrency == 3
        assert config.surge.volume_cap == 45.0

    def test_nested_sections(self):
        config = ScannerConfig.from_dict({
            "fetch": {"max_requests": 30},
            "explosion": {"weights": {"viral": 0.30}},
            "job": {"data_source": "synthetic"},
        })
        assert config.fetch.max_requests == 30
        assert config.explosion.weights.viral == pytest.approx(0.30)
        assert config.job.data_source == "synthetic"

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError) as exc_info:
            ScannerConfig.from_dict({"fetch": {"max_requets": 30}})
        assert exc_info.value.context["config_key"] == "fetch.max_requets"

    def test_unknown_section(self):
        with pytest.raises(ConfigurationError):
            ScannerConfig.from_dict({"database": {}})

    def test_section_must_be_mapping(self):
        with pytest.raises(ConfigurationError):
            ScannerConfig.from_dict({"fetch": 5})

    def test_invalid_value(self):
        with pytest.raises(ConfigurationError):
            ScannerConfig.from_dict({"job": {"concurrency": 0}})

    def test_uncoercible_value(self):
        with pytest.raises(ConfigurationError):
            ScannerConfig.from_dict({"fetch": {"max_requests": "many"}})

    def test_market_cap_bands_from_lists(self):
        config = ScannerConfig.from_dict({
            "surge": {"market_cap_bands": [[1_000_000, 30], [5_000_000, 10]]},
        })
        assert config.surge.market_cap_bands == ((1_000_000.0, 30.0), (5_000_000.0, 10.0))

    def test_to_dict_hides_api_key(self):
        config = ScannerConfig.from_dict({"fetch": {"api_key": "secret"}, "job": {"seed": 7}})
        data = config.to_dict()
        assert data["fetch"]["api_key_set"] is True
        assert "secret" not in str(data)
        assert data["job"]["seed"] == 7


# ============================================================
# JOB CONFIG
# ============================================================

class TestJobConfig:

    def test_log_level_upper_cased(self):
        assert JobConfig(log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize("overrides", [
        {"max_jobs": 0},
        {"cache_ttl": 0},
        {"data_source": "binance"},
        {"log_level": "LOUD"},
        {"log_format": "xml"},
    ])
    def test_rejects_invalid(self, overrides):
        with pytest.raises(ConfigurationError):
            JobConfig(**overrides)


# ============================================================
# LAYERING
# ============================================================

class TestLayering:

    def test_env_overrides(self):
        config = ScannerConfig.from_env({
            "SCANNER_FETCH_MAX_REQUESTS": "25",
            "SCANNER_FETCH_API_KEY": "demo",
            "SCANNER_DISCOVERY_MAX_TOKENS": "50",
            "SCANNER_JOB_DATA_SOURCE": "synthetic",
            "UNRELATED": "x",
        })
        assert config.fetch.max_requests == 25
        assert config.fetch.api_key == "demo"
        assert config.discovery.max_tokens == 50
        assert config.job.data_source == "synthetic"

    def test_env_nested_weights(self):
        config = ScannerConfig.from_env({
            "SCANNER_EXPLOSION_WEIGHTS_VIRAL": "0.30",
            "SCANNER_EXPLOSION_WEIGHTS_PRICE_ACTION": "0.25",
        })
        assert config.explosion.weights.viral == pytest.approx(0.30)

    def test_env_tuple_setting(self):
        config = ScannerConfig.from_env({
            "SCANNER_SURGE_MARKET_CAP_BANDS": "[[1000000, 30]]",
        })
        assert config.surge.market_cap_bands == ((1_000_000.0, 30.0),)

    def test_yaml_then_env(self, tmp_path):
        path = tmp_path / "scanner.yaml"
        path.write_text(
            "fetch:\n"
            "  max_requests: 20\n"
            "  timeout: 5\n"
            "job:\n"
            "  concurrency: 5\n"
        )

        config = ScannerConfig.load(path, environ={"SCANNER_FETCH_MAX_REQUESTS": "40"})

        assert config.fetch.max_requests == 40
        assert config.fetch.timeout == 5.0
        assert config.job.concurrency == 5

    def test_load_without_file_uses_env(self):
        config = ScannerConfig.load(None, environ={"SCANNER_JOB_CONCURRENCY": "7"})
        assert config.job.concurrency == 7

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert ScannerConfig.from_yaml(path).job.concurrency == 3

    def test_yaml_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigurationError):
            ScannerConfig.from_yaml(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ScannerConfig.from_yaml(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("fetch: [unclosed\n")
        with pytest.raises(ConfigurationError):
            ScannerConfig.from_yaml(path)
