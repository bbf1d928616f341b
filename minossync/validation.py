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

"""Config validation module.

This module checks a config file without making network calls, so that
scheduled jobs can be verified in CI before they run against a tenant.

Validation Checks:

- YAML syntax is valid and the top level is a mapping
- apiVersion is supported (defaults to the current version when absent)
- Feed source exists and its source-specific configuration is valid
- policy.id is present (warning only; preview does not need it)
- policy.platform is supported
- selection values are within range

Example:
    Validate a config and handle results:
        ```python
        from pathlib import Path
        from minossync.validation import validate_config

        result = validate_config(Path("configs/macos.yaml"))
        if result.status == "valid":
            print("Config is valid")
        else:
            for error in result.errors:
                print(f"Error: {error}")
        ```

"""

from __future__ import annotations

from pathlib import Path

from minossync.config import API_VERSION, load_effective_config
from minossync.discovery import get_source
from minossync.exceptions import ConfigError
from minossync.logging import get_global_logger
from minossync.policy import SelectionPolicy, odata_type_for
from minossync.results import ValidationResult

__all__ = ["validate_config"]


def validate_config(
    config_path: Path, *, environ: dict[str, str] | None = None
) -> ValidationResult:
    """Validate a config file without contacting the feed or Graph.

    The effective configuration is validated, so environment overrides and
    org defaults are taken into account.

    Args:
        config_path: Path to the YAML config file.
        environ: Environment mapping (defaults to os.environ).

    Returns:
        ValidationResult with status "valid" or "invalid".

    """
    logger = get_global_logger()
    errors: list[str] = []
    warnings: list[str] = []

    logger.verbose("VALIDATION", f"Validating config: {config_path}")

    try:
        config = load_effective_config(config_path, environ=environ)
    except ConfigError as err:
        return ValidationResult(
            status="invalid",
            errors=[str(err)],
            warnings=warnings,
            config_path=str(config_path),
        )

    api_version = config.get("apiVersion")
    if api_version != API_VERSION:
        errors.append(
            f"Unsupported apiVersion: {api_version!r} (expected {API_VERSION!r})"
        )

    feed = config.get("feed")
    if not isinstance(feed, dict):
        errors.append("feed must be a dictionary")
    else:
        try:
            source = get_source(str(feed.get("source")))
        except ConfigError as err:
            errors.append(str(err))
        else:
            errors.extend(source.validate_config(feed))

    policy = config.get("policy")
    if not isinstance(policy, dict):
        errors.append("policy must be a dictionary")
    else:
        policy_id = policy.get("id")
        if not policy_id:
            warnings.append("policy.id is not set; only 'preview' will work")
        elif not isinstance(policy_id, str):
            errors.append("policy.id must be a string")
        try:
            odata_type_for(str(policy.get("platform")))
        except ConfigError as err:
            errors.append(str(err))

    selection = config.get("selection")
    if selection is not None and not isinstance(selection, dict):
        errors.append("selection must be a dictionary")
    else:
        try:
            policy_obj = SelectionPolicy.from_config(selection)
            logger.verbose("VALIDATION", f"Selection: {policy_obj.describe()}")
        except ConfigError as err:
            errors.append(str(err))

    status = "valid" if not errors else "invalid"
    logger.verbose("VALIDATION", f"Status: {status}")
    return ValidationResult(
        status=status,
        errors=errors,
        warnings=warnings,
        config_path=str(config_path),
    )
