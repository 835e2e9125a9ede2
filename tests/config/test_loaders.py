"""
Tests for the engine configuration loader (YAML + Cerberus + pydantic).
"""
import pytest
import yaml

from hobong.config.loaders import (
    ConfigLoadError,
    load_engine_config,
    load_yaml_config,
    parse_engine_config,
)
from hobong.config.models import EngineConfig, RankRules


def _write(tmp_path, data, name="hobong.yaml"):
    path = tmp_path / name
    path.write_text(yaml.safe_dump(data, allow_unicode=True), encoding="utf-8")
    return path


def test_defaults_without_a_path():
    config = load_engine_config()
    assert config == EngineConfig()
    assert config.remote.mode == "local"
    assert config.rank.upgrade_interval_years == 1
    assert config.cache_enabled is True


def test_yaml_values_override_defaults(tmp_path):
    path = _write(
        tmp_path,
        {
            "rank": {"snap_upgrade_to_month_start": True, "max_rank": 40},
            "remote": {"mode": "remote", "base_url": "https://rank.example.org", "max_attempts": 5},
            "cache_enabled": False,
        },
    )
    config = load_engine_config(path)
    assert config.rank.snap_upgrade_to_month_start is True
    assert config.rank.max_rank == 40
    assert config.remote.url == "https://rank.example.org/calculate-rank-batch"
    assert config.remote.max_attempts == 5
    assert config.cache_enabled is False


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_engine_config(path) == EngineConfig()


@pytest.mark.parametrize(
    "data",
    [
        {"rank": {"max_rank": "forty"}},
        {"remote": {"mode": "cloud"}},
        {"cache_enabled": "yes"},
        {"rank": "strict"},
    ],
)
def test_schema_errors_are_reported(data):
    with pytest.raises(ConfigLoadError, match="Config validation failed"):
        parse_engine_config(data)


@pytest.mark.parametrize(
    "data",
    [
        {"remote": {"mode": "remote"}},
        {"rank": {"min_rank": 10, "max_rank": 5}},
        {"rank": {"upgrade_interval_years": 0}},
        {"remote": {"backoff_min_seconds": 5.0, "backoff_max_seconds": 1.0}},
    ],
)
def test_model_errors_are_reported(data):
    with pytest.raises(ConfigLoadError):
        parse_engine_config(data)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigLoadError, match="not found"):
        load_yaml_config(tmp_path / "absent.yaml")


def test_non_mapping_yaml(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigLoadError, match="Expected a dictionary"):
        load_yaml_config(path)


def test_unparsable_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("rank: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigLoadError, match="Error parsing"):
        load_yaml_config(path)


def test_rank_rules_bounds_validator():
    with pytest.raises(ValueError):
        RankRules(min_rank=3, max_rank=2)
