"""
Tests for configuration profiles

Tests config_loader.py: profile loading, inheritance, flattening,
env var overrides, CLI overrides, and the full merge chain.
"""

import os
import sys
from argparse import Namespace
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "scripts"))

import config_loader
from config_loader import (
    build_unified_config,
    deep_merge,
    extract_cli_overrides,
    flatten_profile,
    get_default_config,
    list_available_profiles,
    load_env_overrides,
    load_profile,
    parse_fail_on,
    validate_config,
)
from exceptions import ConfigError


# ============================================================================
# Test get_default_config
# ============================================================================


class TestGetDefaultConfig:
    def test_all_keys_present(self):
        config = get_default_config()
        for key in (
            "enable_structural_refactor", "enable_pq_replacement",
            "execute_tests", "simulation_seed", "generate_test_report",
            "max_code_size", "fail_on", "output_format", "output_dir", "log_level",
        ):
            assert key in config, f"Missing key: {key}"

    def test_sensible_defaults(self):
        config = get_default_config()
        assert config["execute_tests"] is False
        assert config["simulation_seed"] is None
        assert config["enable_structural_refactor"] is True
        assert config["enable_pq_replacement"] is True
        assert config["max_code_size"] == 1_000_000
        assert config["output_format"] == "markdown"

    def test_defaults_are_valid(self):
        assert validate_config(get_default_config()) == []


# ============================================================================
# Test flatten_profile
# ============================================================================


class TestFlattenProfile:
    def test_rewrite_section(self):
        flat = flatten_profile({"rewrite": {"structural_refactor": False, "pq_replacement": True}})
        assert flat["enable_structural_refactor"] is False
        assert flat["enable_pq_replacement"] is True

    def test_simulation_section(self):
        flat = flatten_profile({"simulation": {"execute_tests": True, "seed": 7, "generate_report": False}})
        assert flat["execute_tests"] is True
        assert flat["simulation_seed"] == 7
        assert flat["generate_test_report"] is False

    def test_output_and_logging_sections(self):
        flat = flatten_profile({
            "output": {"format": "sarif", "dir": "out", "fail_on": "critical"},
            "logging": {"level": "DEBUG"},
        })
        assert flat["output_format"] == "sarif"
        assert flat["output_dir"] == "out"
        assert flat["fail_on"] == "critical"
        assert flat["log_level"] == "DEBUG"

    def test_limits_section(self):
        flat = flatten_profile({"limits": {"max_code_size": 500}})
        assert flat["max_code_size"] == 500

    def test_none_values_excluded(self):
        flat = flatten_profile({"simulation": {"seed": None, "execute_tests": True}})
        assert "simulation_seed" not in flat
        assert flat["execute_tests"] is True

    def test_top_level_scalars(self):
        flat = flatten_profile({"name": "custom", "description": "A custom profile"})
        assert flat["name"] == "custom"
        assert flat["description"] == "A custom profile"


# ============================================================================
# Test load_profile
# ============================================================================


class TestLoadProfile:
    def test_load_default_profile(self):
        profile = load_profile("default")
        assert profile["name"] == "default"
        assert profile["execute_tests"] is False

    def test_strict_inherits_default(self):
        profile = load_profile("strict")
        assert profile["name"] == "strict"
        assert parse_fail_on(profile["fail_on"]) == ["critical", "high", "medium"]
        # Inherited from default
        assert profile["enable_pq_replacement"] is True
        assert profile["max_code_size"] == 1000000

    def test_ci_profile_is_seeded_and_executes(self):
        profile = load_profile("ci")
        assert profile["execute_tests"] is True
        assert isinstance(profile["simulation_seed"], int)
        assert profile["output_format"] == "json"

    def test_nonexistent_profile(self):
        with pytest.raises(FileNotFoundError):
            load_profile("does-not-exist")

    def test_all_profiles_loadable(self):
        for name in list_available_profiles():
            profile = load_profile(name)
            assert profile["name"] == name
            assert validate_config(deep_merge(get_default_config(), profile)) == []

    def test_builtin_profiles_listed(self):
        names = list_available_profiles()
        for expected in ("default", "strict", "ci"):
            assert expected in names

    def test_circular_inheritance_detected(self, tmp_path):
        (tmp_path / "a.yml").write_text("_extends: b\nname: a\n")
        (tmp_path / "b.yml").write_text("_extends: a\nname: b\n")
        with patch.object(config_loader, "_profile_search_paths", lambda name: [tmp_path / f"{name}.yml"]):
            with pytest.raises(ConfigError, match="Circular"):
                load_profile("a")

    def test_invalid_yaml_raises_config_error(self, tmp_path):
        (tmp_path / "broken.yml").write_text("name: [unclosed\n")
        with patch.object(config_loader, "_profile_search_paths", lambda name: [tmp_path / f"{name}.yml"]):
            with pytest.raises(ConfigError):
                load_profile("broken")


# ============================================================================
# Test load_env_overrides
# ============================================================================


class TestLoadEnvOverrides:
    def test_empty_when_no_env(self):
        with patch.dict(os.environ, {}, clear=True):
            assert load_env_overrides() == {}

    def test_bool_env_var(self):
        with patch.dict(os.environ, {"QSHIELD_EXECUTE_TESTS": "true"}, clear=True):
            assert load_env_overrides()["execute_tests"] is True

    def test_int_env_var(self):
        with patch.dict(os.environ, {"QSHIELD_SIMULATION_SEED": "42"}, clear=True):
            assert load_env_overrides()["simulation_seed"] == 42

    def test_first_match_wins(self):
        env = {"QSHIELD_LOG_LEVEL": "DEBUG", "LOG_LEVEL": "ERROR"}
        with patch.dict(os.environ, env, clear=True):
            assert load_env_overrides()["log_level"] == "DEBUG"

    def test_invalid_int_ignored(self):
        with patch.dict(os.environ, {"QSHIELD_MAX_CODE_SIZE": "lots"}, clear=True):
            assert "max_code_size" not in load_env_overrides()


# ============================================================================
# Test extract_cli_overrides / deep_merge
# ============================================================================


class TestExtractCliOverrides:
    def test_none_args(self):
        assert extract_cli_overrides(None) == {}

    def test_explicit_args(self):
        args = Namespace(execute=True, seed=3, format="json", fail_on="high")
        overrides = extract_cli_overrides(args)
        assert overrides["execute_tests"] is True
        assert overrides["simulation_seed"] == 3
        assert overrides["output_format"] == "json"
        assert overrides["fail_on"] == "high"

    def test_none_values_excluded(self):
        overrides = extract_cli_overrides(Namespace(execute=None, seed=None, pq_replacement=False))
        assert "execute_tests" not in overrides
        assert "simulation_seed" not in overrides
        assert overrides["enable_pq_replacement"] is False


class TestDeepMerge:
    def test_basic_merge(self):
        assert deep_merge({"a": 1, "b": 2}, {"b": 3}) == {"a": 1, "b": 3}

    def test_none_skipped(self):
        assert deep_merge({"a": 1}, {"a": None}) == {"a": 1}

    def test_base_unchanged(self):
        base = {"a": 1}
        deep_merge(base, {"a": 2})
        assert base == {"a": 1}


# ============================================================================
# Test build_unified_config
# ============================================================================


class TestBuildUnifiedConfig:
    def test_defaults_only(self, tmp_path):
        with patch.dict(os.environ, {}, clear=True):
            config = build_unified_config(repo_path=str(tmp_path))
        assert config == get_default_config()

    def test_with_profile(self, tmp_path):
        with patch.dict(os.environ, {}, clear=True):
            config = build_unified_config(profile="ci", repo_path=str(tmp_path))
        assert config["execute_tests"] is True
        assert config["output_format"] == "json"

    def test_project_yml_overrides_profile(self, tmp_path):
        (tmp_path / ".qshield.yml").write_text("output:\n  format: sarif\n")
        with patch.dict(os.environ, {}, clear=True):
            config = build_unified_config(profile="ci", repo_path=str(tmp_path))
        assert config["output_format"] == "sarif"

    def test_env_overrides_project_yml(self, tmp_path):
        (tmp_path / ".qshield.yml").write_text("output:\n  format: sarif\n")
        with patch.dict(os.environ, {"QSHIELD_OUTPUT_FORMAT": "json"}, clear=True):
            config = build_unified_config(repo_path=str(tmp_path))
        assert config["output_format"] == "json"

    def test_cli_overrides_env(self, tmp_path):
        with patch.dict(os.environ, {"QSHIELD_SIMULATION_SEED": "1"}, clear=True):
            config = build_unified_config(cli_args=Namespace(seed=99), repo_path=str(tmp_path))
        assert config["simulation_seed"] == 99

    def test_profile_env_var(self, tmp_path):
        with patch.dict(os.environ, {"QSHIELD_PROFILE": "strict"}, clear=True):
            config = build_unified_config(repo_path=str(tmp_path))
        assert "medium" in parse_fail_on(config["fail_on"])

    def test_nonexistent_profile_falls_back_to_defaults(self, tmp_path):
        with patch.dict(os.environ, {}, clear=True):
            config = build_unified_config(profile="nope", repo_path=str(tmp_path))
        assert config == get_default_config()

    def test_profile_key_not_leaked(self, tmp_path):
        with patch.dict(os.environ, {}, clear=True):
            config = build_unified_config(cli_args=Namespace(profile="default"), repo_path=str(tmp_path))
        assert "_profile" not in config


# ============================================================================
# Test validate_config
# ============================================================================


class TestValidateConfig:
    def test_invalid_output_format(self):
        config = deep_merge(get_default_config(), {"output_format": "xml"})
        issues = validate_config(config)
        assert any("output_format" in issue for issue in issues)

    def test_invalid_fail_on_severity(self):
        config = deep_merge(get_default_config(), {"fail_on": "critical,urgent"})
        issues = validate_config(config)
        assert len(issues) == 1
        assert "urgent" in issues[0]

    def test_invalid_max_code_size(self):
        config = deep_merge(get_default_config(), {"max_code_size": 0})
        assert any("max_code_size" in issue for issue in validate_config(config))

    def test_invalid_seed(self):
        config = deep_merge(get_default_config(), {"simulation_seed": "abc"})
        assert any("simulation_seed" in issue for issue in validate_config(config))

    def test_disabled_replacement_warns(self):
        config = deep_merge(get_default_config(), {"enable_pq_replacement": False})
        issues = validate_config(config)
        assert issues and issues[0].startswith("WARNING")


class TestParseFailOn:
    def test_comma_separated(self):
        assert parse_fail_on("Critical, high") == ["critical", "high"]

    def test_empty(self):
        assert parse_fail_on("") == []
        assert parse_fail_on(None) == []

    def test_list_value(self):
        assert parse_fail_on(["low"]) == ["low"]
