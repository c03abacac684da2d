"""
Configuration Loader for the QShield pipeline.

Implements a layered configuration system:
    hardcoded defaults < profile YAML < .qshield.yml < env vars < CLI args

Usage:
    from config_loader import build_unified_config, load_profile
    config = build_unified_config(profile="strict", cli_args=args)
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from exceptions import ConfigError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Project root detection
# ---------------------------------------------------------------------------

def _find_project_root() -> Path:
    """Find the QShield project root by looking for known markers."""
    current = Path(__file__).resolve().parent
    for ancestor in [current, *current.parents]:
        if (ancestor / "profiles").is_dir() and (ancestor / "scripts").is_dir():
            return ancestor
        if (ancestor / "pyproject.toml").is_file():
            return ancestor
    return current.parent


PROJECT_ROOT = _find_project_root()

# ---------------------------------------------------------------------------
# Default configuration
# ---------------------------------------------------------------------------

def get_default_config() -> Dict[str, Any]:
    """Return all configuration parameters with their defaults.

    This is the lowest-priority layer.  Every configurable key must appear
    here so that downstream code never needs to guard against missing keys.
    """
    return {
        # -- Rewrite --
        "enable_structural_refactor": True,
        "enable_pq_replacement": True,

        # -- Simulation --
        "execute_tests": False,
        "simulation_seed": None,         # None = non-deterministic draws
        "generate_test_report": True,

        # -- Limits --
        "max_code_size": 1_000_000,      # characters

        # -- Output --
        "fail_on": "",                   # comma-separated severities, e.g. "critical,high"
        "output_format": "markdown",     # json | markdown | sarif
        "output_dir": "",
        "log_level": "INFO",
    }

# ---------------------------------------------------------------------------
# Profile loading
# ---------------------------------------------------------------------------

def _profile_search_paths(profile_name: str) -> List[Path]:
    """Return candidate YAML paths for *profile_name*, in lookup order."""
    return [
        PROJECT_ROOT / "profiles" / f"{profile_name}.yml",              # built-in
        Path.home() / ".qshield" / "profiles" / f"{profile_name}.yml",  # user
        Path(".qshield") / "profiles" / f"{profile_name}.yml",          # project-local
    ]


def _read_yaml(path: Path) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(raw).__name__}")
    return raw


def _load_raw_profile(profile_name: str, _chain: Optional[List[str]] = None) -> dict:
    """Load raw YAML dict for *profile_name*, resolving ``_extends``.

    Raises
    ------
    FileNotFoundError
        If the profile YAML cannot be found in any search path.
    ConfigError
        If a circular ``_extends`` chain is detected or the YAML is invalid.
    """
    if _chain is None:
        _chain = []

    if profile_name in _chain:
        raise ConfigError(
            f"Circular profile inheritance detected: "
            f"{' -> '.join(_chain)} -> {profile_name}"
        )
    _chain.append(profile_name)

    loaded_path: Optional[Path] = None
    for candidate in _profile_search_paths(profile_name):
        if candidate.is_file():
            loaded_path = candidate
            break

    if loaded_path is None:
        raise FileNotFoundError(
            f"Profile '{profile_name}' not found.  Searched: "
            + ", ".join(str(p) for p in _profile_search_paths(profile_name))
        )

    logger.info("Loading profile '%s' from %s", profile_name, loaded_path)
    raw = _read_yaml(loaded_path)

    parent_name = raw.pop("_extends", None)
    if parent_name:
        parent = _load_raw_profile(parent_name, _chain=_chain)
        raw = _deep_merge_nested(parent, raw)

    return raw


def _deep_merge_nested(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (nested dicts)."""
    merged = dict(base)
    for key, value in override.items():
        if (
            key in merged
            and isinstance(merged[key], dict)
            and isinstance(value, dict)
        ):
            merged[key] = _deep_merge_nested(merged[key], value)
        else:
            merged[key] = value
    return merged

# ---------------------------------------------------------------------------
# Flatten nested YAML -> flat config dict
# ---------------------------------------------------------------------------

# (section, yaml key) -> flat config key
_SECTION_KEY_MAP: Dict[tuple, str] = {
    ("rewrite", "structural_refactor"): "enable_structural_refactor",
    ("rewrite", "pq_replacement"): "enable_pq_replacement",
    ("simulation", "execute_tests"): "execute_tests",
    ("simulation", "seed"): "simulation_seed",
    ("simulation", "generate_report"): "generate_test_report",
    ("output", "format"): "output_format",
    ("output", "dir"): "output_dir",
    ("output", "fail_on"): "fail_on",
    ("logging", "level"): "log_level",
}


def flatten_profile(nested: dict) -> Dict[str, Any]:
    """Convert a nested profile YAML dict to a flat config dict.

    Mapping rules:
    - ``nested["rewrite"]["structural_refactor"]`` -> ``enable_structural_refactor``
    - ``nested["rewrite"]["pq_replacement"]``      -> ``enable_pq_replacement``
    - ``nested["simulation"]["seed"]``             -> ``simulation_seed``
    - ``nested["simulation"]["generate_report"]``  -> ``generate_test_report``
    - ``nested["simulation"]["execute_tests"]``    -> ``execute_tests``
    - ``nested["limits"][key]``                    -> key (directly)
    - ``nested["output"]["format" | "dir"]``       -> ``output_format`` / ``output_dir``
    - ``nested["output"]["fail_on"]``              -> ``fail_on``
    - ``nested["logging"]["level"]``               -> ``log_level``
    - Top-level scalar keys (``name``, ``description``) are passed through.

    Only non-None values are included.
    """
    flat: Dict[str, Any] = {}

    for (section, key), config_key in _SECTION_KEY_MAP.items():
        block = nested.get(section)
        if isinstance(block, dict) and block.get(key) is not None:
            flat[config_key] = block[key]

    limits = nested.get("limits")
    if isinstance(limits, dict):
        for key, value in limits.items():
            if value is not None:
                flat[key] = value

    for scalar_key in ("name", "description"):
        if nested.get(scalar_key) is not None:
            flat[scalar_key] = nested[scalar_key]

    return flat


def load_profile(profile_name: str) -> Dict[str, Any]:
    """Load a profile by name and return a flat config dict.

    Search order (first match wins):
      1. ``{PROJECT_ROOT}/profiles/{name}.yml``   (built-in)
      2. ``~/.qshield/profiles/{name}.yml``        (user)
      3. ``.qshield/profiles/{name}.yml``          (project-local)

    The ``_extends`` key enables profile inheritance: the parent profile is
    loaded first and the child values are overlaid on top.
    """
    raw = _load_raw_profile(profile_name)
    return flatten_profile(raw)

# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------

# Mapping: (env_var_name, ...) -> (config_key, type)
# Types: "str", "bool", "int", "float"
_ENV_MAPPINGS: List[tuple] = [
    (("QSHIELD_ENABLE_STRUCTURAL_REFACTOR",),       "enable_structural_refactor", "bool"),
    (("QSHIELD_ENABLE_PQ_REPLACEMENT",),            "enable_pq_replacement", "bool"),
    (("QSHIELD_EXECUTE_TESTS",),                    "execute_tests",        "bool"),
    (("QSHIELD_SIMULATION_SEED",),                  "simulation_seed",      "int"),
    (("QSHIELD_GENERATE_TEST_REPORT",),             "generate_test_report", "bool"),
    (("QSHIELD_MAX_CODE_SIZE",),                    "max_code_size",        "int"),
    (("QSHIELD_FAIL_ON", "INPUT_FAIL_ON"),          "fail_on",              "str"),
    (("QSHIELD_OUTPUT_FORMAT",),                    "output_format",        "str"),
    (("QSHIELD_OUTPUT_DIR",),                       "output_dir",           "str"),
    (("QSHIELD_LOG_LEVEL", "LOG_LEVEL"),            "log_level",            "str"),
]


def _coerce(raw: str, type_tag: str) -> Any:
    """Convert a raw env-var string to the appropriate Python type."""
    if type_tag == "bool":
        return raw.lower() == "true"
    if type_tag == "int":
        return int(raw)
    if type_tag == "float":
        return float(raw)
    return raw


def load_env_overrides() -> Dict[str, Any]:
    """Load configuration values from explicitly-set environment variables.

    Only variables that are **present** in ``os.environ`` are returned.
    The first name found in a mapping tuple wins.
    """
    overrides: Dict[str, Any] = {}

    for env_names, config_key, type_tag in _ENV_MAPPINGS:
        for env_name in env_names:
            if env_name in os.environ:
                try:
                    overrides[config_key] = _coerce(os.environ[env_name], type_tag)
                except (ValueError, TypeError) as exc:
                    logger.warning(
                        "Ignoring env var %s: could not convert %r to %s (%s)",
                        env_name, os.environ[env_name], type_tag, exc,
                    )
                break  # first match wins

    return overrides

# ---------------------------------------------------------------------------
# CLI argument extraction
# ---------------------------------------------------------------------------

# Mapping: argparse attribute -> config key
_CLI_ATTR_MAP: Dict[str, str] = {
    "profile": "_profile",  # handled separately in build_unified_config
    "execute": "execute_tests",
    "seed": "simulation_seed",
    "fail_on": "fail_on",
    "format": "output_format",
    "output_dir": "output_dir",
    "log_level": "log_level",
    "max_code_size": "max_code_size",
    "structural_refactor": "enable_structural_refactor",
    "pq_replacement": "enable_pq_replacement",
    "test_report": "generate_test_report",
}


def extract_cli_overrides(args: Any) -> Dict[str, Any]:
    """Extract explicitly-set CLI arguments into a flat config dict.

    Only attributes whose value is not ``None`` are included, so that
    argparse defaults do not shadow earlier layers.
    """
    if args is None:
        return {}

    overrides: Dict[str, Any] = {}
    for attr, config_key in _CLI_ATTR_MAP.items():
        value = getattr(args, attr, None)
        if value is not None:
            overrides[config_key] = value

    return overrides

# ---------------------------------------------------------------------------
# Merge helpers
# ---------------------------------------------------------------------------

def deep_merge(base: dict, override: dict) -> dict:
    """Merge *override* into *base*.  Only non-None override values win.

    This operates on **flat** dicts (no recursive descent).
    """
    merged = dict(base)
    for key, value in override.items():
        if value is not None:
            merged[key] = value
    return merged

# ---------------------------------------------------------------------------
# .qshield.yml loader
# ---------------------------------------------------------------------------

def _load_project_yml(repo_path: str) -> Dict[str, Any]:
    """Load ``.qshield.yml`` from *repo_path* and return flat config dict.

    Returns an empty dict if the file does not exist.
    """
    yml_path = Path(repo_path) / ".qshield.yml"
    if not yml_path.is_file():
        return {}

    logger.info("Loading .qshield.yml from %s", yml_path)
    return flatten_profile(_read_yaml(yml_path))

# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def build_unified_config(
    profile: Optional[str] = None,
    cli_args: Any = None,
    repo_path: str = ".",
) -> Dict[str, Any]:
    """Build a fully-merged configuration dict.

    Layer precedence (last wins):
        1. Hard-coded defaults          (``get_default_config()``)
        2. Profile YAML                 (``load_profile()``)
        3. ``.qshield.yml``             (project-level overrides)
        4. Environment variables        (``load_env_overrides()``)
        5. CLI arguments                (``extract_cli_overrides()``)

    Parameters
    ----------
    profile:
        Explicit profile name.  If ``None``, the function checks
        ``cli_args.profile``, then the ``QSHIELD_PROFILE`` env var.
    cli_args:
        An ``argparse.Namespace`` (or ``None``).
    repo_path:
        Directory searched for ``.qshield.yml``.
    """
    config = get_default_config()

    profile_name = profile
    if profile_name is None and cli_args is not None:
        profile_name = getattr(cli_args, "profile", None)
    if profile_name is None:
        profile_name = os.environ.get("QSHIELD_PROFILE")

    if profile_name:
        try:
            profile_values = load_profile(profile_name)
            config = deep_merge(config, profile_values)
            logger.info("Applied profile '%s'", profile_name)
        except FileNotFoundError:
            logger.warning("Profile '%s' not found; skipping", profile_name)

    project_yml = _load_project_yml(repo_path)
    if project_yml:
        config = deep_merge(config, project_yml)
        logger.info("Applied .qshield.yml overrides (%d keys)", len(project_yml))

    env_overrides = load_env_overrides()
    if env_overrides:
        config = deep_merge(config, env_overrides)
        logger.debug("Applied %d env-var overrides", len(env_overrides))

    cli_overrides = extract_cli_overrides(cli_args)
    cli_overrides.pop("_profile", None)
    if cli_overrides:
        config = deep_merge(config, cli_overrides)
        logger.debug("Applied %d CLI overrides", len(cli_overrides))

    return config

# ---------------------------------------------------------------------------
# Profile discovery
# ---------------------------------------------------------------------------

def list_available_profiles() -> List[str]:
    """Return the names of all available profiles.

    Searches:
    - ``{PROJECT_ROOT}/profiles/*.yml``
    - ``~/.qshield/profiles/*.yml``
    - ``.qshield/profiles/*.yml``
    """
    names: set = set()

    search_dirs = [
        PROJECT_ROOT / "profiles",
        Path.home() / ".qshield" / "profiles",
        Path(".qshield") / "profiles",
    ]
    for directory in search_dirs:
        if directory.is_dir():
            for yml_file in directory.glob("*.yml"):
                names.add(yml_file.stem)

    return sorted(names)

# ---------------------------------------------------------------------------
# Configuration validation
# ---------------------------------------------------------------------------

_VALID_OUTPUT_FORMATS = {"json", "markdown", "sarif"}
_VALID_SEVERITIES = {"critical", "high", "medium", "low"}
_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def parse_fail_on(value: Any) -> List[str]:
    """Split a comma-separated ``fail_on`` value into severities."""
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        items = value
    else:
        items = str(value).split(",")
    return [item.strip().lower() for item in items if item.strip()]


def validate_config(config: Dict[str, Any]) -> List[str]:
    """Validate a configuration dict and return a list of warnings/errors.

    Returns
    -------
    list[str]
        Human-readable warning/error messages.  An empty list means the
        config is valid.
    """
    issues: List[str] = []

    fmt = config.get("output_format", "markdown")
    if fmt not in _VALID_OUTPUT_FORMATS:
        issues.append(
            f"ERROR: Invalid output_format '{fmt}'. "
            f"Must be one of: {', '.join(sorted(_VALID_OUTPUT_FORMATS))}"
        )

    for severity in parse_fail_on(config.get("fail_on")):
        if severity not in _VALID_SEVERITIES:
            issues.append(
                f"ERROR: Invalid fail_on severity '{severity}'. "
                f"Must be one of: {', '.join(sorted(_VALID_SEVERITIES))}"
            )

    level = str(config.get("log_level", "INFO")).upper()
    if level not in _VALID_LOG_LEVELS:
        issues.append(
            f"ERROR: Invalid log_level '{config.get('log_level')}'. "
            f"Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )

    max_code_size = config.get("max_code_size", 1_000_000)
    if not isinstance(max_code_size, int) or isinstance(max_code_size, bool) or max_code_size < 1:
        issues.append("ERROR: max_code_size must be an integer >= 1.")

    seed = config.get("simulation_seed")
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
        issues.append("ERROR: simulation_seed must be an integer or null.")

    if not config.get("enable_pq_replacement", True):
        issues.append(
            "WARNING: enable_pq_replacement is false; refactored code will keep "
            "its quantum-vulnerable primitives."
        )

    return issues
