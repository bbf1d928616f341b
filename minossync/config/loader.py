# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Configuration loading and merging for minossync.

This module implements a layered configuration system so that a tenant-wide
defaults file can carry shared settings (feed URL, grouping mode) while each
config file names one compliance policy, and scheduled runs can still
override single values through the environment or the command line.

Configuration Layers (later wins):
    1. **Built-in defaults** (DEFAULT_CONFIG)
    2. **Organization defaults** (defaults/org.yaml)
       - Found by walking upward from the config file; optional
    3. **Config file** (e.g., configs/macos-baseline.yaml)
    4. **Environment variables** (MINOSSYNC_*, .env supported)
    5. **CLI overrides** (passed in as a nested dict)

Merge Behavior:
    The loader performs deep merging with "last wins" semantics:

    - **Dicts**: Recursively merged (keys from overlay override base)
    - **Lists**: Completely replaced (NOT appended/extended)
    - **Scalars**: Overwritten (strings, numbers, booleans)

Environment Variables:
    MINOSSYNC_FEED_URL             -> feed.url
    MINOSSYNC_POLICY_ID            -> policy.id
    MINOSSYNC_PLATFORM             -> policy.platform
    MINOSSYNC_VERSIONS_BELOW       -> selection.versions_below
    MINOSSYNC_USE_MINOR_VERSIONS   -> selection.use_minor_versions
    MINOSSYNC_PIN_TO_MAJOR_VERSION -> selection.pin_to_major_version
    MINOSSYNC_DRY_RUN              -> dry_run

    Values are kept as strings; SelectionPolicy.from_config and
    resolve_dry_run coerce them.

Path Resolution:
    Relative paths are resolved against the CONFIG FILE location. Currently
    resolved paths:

    - feed.path (file source)

Error Handling:
    - ConfigError: Config file doesn't exist, YAML parse errors, empty files,
        or invalid structure
    - All errors are chained with "from err" for better debugging

Example:
    Basic usage:
        ```python
        from pathlib import Path
        from minossync.config import load_effective_config

        cfg = load_effective_config(Path("configs/macos.yaml"))
        print(cfg["selection"]["versions_below"])  # Output: 2
        ```

    Override from the command line:
        ```python
        cfg = load_effective_config(
            Path("configs/macos.yaml"),
            overrides={"selection": {"versions_below": 1}},
        )
        ```
"""

from __future__ import annotations

from collections.abc import Mapping
import copy
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
import yaml

from minossync.exceptions import ConfigError
from minossync.logging import get_global_logger

API_VERSION = "minossync/v1"

DEFAULT_CONFIG: dict[str, Any] = {
    "apiVersion": API_VERSION,
    "feed": {
        "source": "http_json",
        "releases_path": "$[*]",
        "timeout": 30,
    },
    "policy": {
        "platform": "macos",
    },
    "selection": {
        "versions_below": 2,
        "use_minor_versions": False,
        "pin_to_major_version": 0,
    },
    "dry_run": False,
}

# environment variable -> (section, key); section None means top level
ENV_OVERRIDES: dict[str, tuple[str | None, str]] = {
    "MINOSSYNC_FEED_URL": ("feed", "url"),
    "MINOSSYNC_POLICY_ID": ("policy", "id"),
    "MINOSSYNC_PLATFORM": ("policy", "platform"),
    "MINOSSYNC_VERSIONS_BELOW": ("selection", "versions_below"),
    "MINOSSYNC_USE_MINOR_VERSIONS": ("selection", "use_minor_versions"),
    "MINOSSYNC_PIN_TO_MAJOR_VERSION": ("selection", "pin_to_major_version"),
    "MINOSSYNC_DRY_RUN": (None, "dry_run"),
}

# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> Any:
    """Loads a YAML file and returns the parsed Python object.

    Raises:
        ConfigError: When file does not exist, invalid YAML (parse error), or
            empty files.
    """
    if not p.exists():
        raise ConfigError(f"Config file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    if data is None:
        raise ConfigError(f"YAML file is empty: {p}")
    return data


# -------------------------------
# Merge logic
# -------------------------------


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge two dicts with "overlay wins".

    Rules:
      - dict + dict -> deep merge
      - list + list -> overlay REPLACES base (not concatenated)
      - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            # Replace lists and scalars entirely
            result[k] = v
    return result


# -------------------------------
# Defaults discovery
# -------------------------------


def _find_defaults_root(start_dir: Path) -> Path | None:
    """Walk upward from start_dir looking for defaults/org.yaml.

    Returns the 'defaults' directory or None if not found.
    """
    for parent in [start_dir] + list(start_dir.parents):
        candidate = parent / "defaults" / "org.yaml"
        if candidate.exists():
            return parent / "defaults"
    return None


# -------------------------------
# Environment overrides
# -------------------------------


def _environment_layer(environ: Mapping[str, str]) -> dict[str, Any]:
    """Build an overlay dict from MINOSSYNC_* variables that are set."""
    layer: dict[str, Any] = {}
    for var, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(var)
        if value is None or value == "":
            continue
        if section is None:
            layer[key] = value
        else:
            layer.setdefault(section, {})[key] = value
    return layer


# -------------------------------
# Path resolution
# -------------------------------


def _resolve_known_paths(cfg: dict[str, Any], config_dir: Path) -> None:
    """Resolve relative feed.path against the config file directory.

    Modifies cfg in place.
    """
    feed = cfg.get("feed")
    if not isinstance(feed, dict):
        return
    raw_path = feed.get("path")
    if isinstance(raw_path, str) and raw_path:
        p = Path(raw_path)
        if not p.is_absolute():
            feed["path"] = str((config_dir / p).resolve())


def _dump_yaml(data: dict[str, Any]) -> list[str]:
    yaml_str = yaml.dump(data, default_flow_style=False, sort_keys=False)
    return [line for line in yaml_str.split("\n") if line.strip()]


# -------------------------------
# Public API
# -------------------------------


def resolve_dry_run(cfg: dict[str, Any]) -> bool:
    """Interpret the merged dry_run value (bool or env-style string)."""
    value = cfg.get("dry_run", False)
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def load_effective_config(
    config_path: Path,
    *,
    overrides: dict[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
    verbose: bool = False,
    debug: bool = False,
) -> dict[str, Any]:
    """Load and merge the effective configuration for a sync run.

    Steps
      1) Start from DEFAULT_CONFIG.
      2) Find defaults root by scanning upwards for 'defaults/org.yaml'
         and merge it if present.
      3) Merge the config file.
      4) Merge MINOSSYNC_* environment variables (after loading .env).
      5) Merge CLI overrides.
      6) Resolve known relative paths against the config file directory.

    Args:
        config_path: Path to the YAML config file.
        overrides: Nested dict of CLI overrides (None values are ignored).
        environ: Environment mapping; defaults to os.environ after
            load_dotenv(). Tests pass a plain dict.
        verbose: If True, log each merged layer.
        debug: If True, log the final merged configuration.

    Returns:
        A merged configuration dict ready for downstream processors.

    Raises:
        ConfigError: If the config file is missing, unparsable, empty or not
            a mapping.

    """
    logger = get_global_logger()

    config_path = config_path.resolve()
    config_dir = config_path.parent
    logger.verbose("CONFIG", f"Loading config: {config_path}")

    config_obj = _load_yaml_file(config_path)
    if not isinstance(config_obj, dict):
        raise ConfigError(f"Top-level YAML must be a mapping (dict): {config_path}")

    merged: dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)
    layers_merged = 1

    defaults_root = _find_defaults_root(config_dir)
    if defaults_root:
        org_defaults_path = defaults_root / "org.yaml"
        logger.verbose("CONFIG", f"Loading: {org_defaults_path}")
        org_defaults = _load_yaml_file(org_defaults_path)
        if isinstance(org_defaults, dict):
            merged = _deep_merge_dicts(merged, org_defaults)
            layers_merged += 1

    merged = _deep_merge_dicts(merged, config_obj)
    layers_merged += 1

    if environ is None:
        load_dotenv()
        environ = os.environ
    env_layer = _environment_layer(environ)
    if env_layer:
        logger.verbose(
            "CONFIG",
            f"Applying environment overrides: {', '.join(sorted(_flatten_keys(env_layer)))}",
        )
        merged = _deep_merge_dicts(merged, env_layer)
        layers_merged += 1

    cli_layer = _drop_none(overrides or {})
    if cli_layer:
        logger.verbose(
            "CONFIG",
            f"Applying CLI overrides: {', '.join(sorted(_flatten_keys(cli_layer)))}",
        )
        merged = _deep_merge_dicts(merged, cli_layer)
        layers_merged += 1

    if verbose:
        logger.verbose("CONFIG", f"Deep merged {layers_merged} layer(s)")
    if debug:
        logger.debug("CONFIG", "--- Final Merged Configuration ---")
        for line in _dump_yaml(merged):
            logger.debug("CONFIG", line)

    _resolve_known_paths(merged, config_dir)
    return merged


def _drop_none(d: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for k, v in d.items():
        if isinstance(v, dict):
            nested = _drop_none(v)
            if nested:
                out[k] = nested
        elif v is not None:
            out[k] = v
    return out


def _flatten_keys(d: dict[str, Any], prefix: str = "") -> list[str]:
    keys: list[str] = []
    for k, v in d.items():
        if isinstance(v, dict):
            keys.extend(_flatten_keys(v, f"{prefix}{k}."))
        else:
            keys.append(f"{prefix}{k}")
    return keys
