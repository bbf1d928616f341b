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

"""Core orchestration for minossync.

This module provides the high-level functions behind the CLI commands. They
wire the configuration, the release feed, the pure selection core and the
Graph client together.

Run Workflow (sync_policy):

1. Load effective configuration (defaults + org + file + env + CLI)
2. Fetch the release feed through the configured source
3. Normalize the catalog and select the target minimum version
4. Read the compliance policy's current osMinimumVersion
5. PATCH the policy if the values differ (skipped on dry run)

preview_target() runs steps 1-3 only and never touches Graph.

Design Principles:

- The selection core receives a fully-resolved SelectionPolicy; it never
  looks at config files or the environment
- Functions return frozen dataclasses for easy testing
- Error handling uses exceptions; the CLI layer formats them for display
- Collaborators (release source, Graph client) can be injected for tests

Example:
    Programmatic usage:
        ```python
        from pathlib import Path
        from minossync.core import sync_policy

        result = sync_policy(Path("configs/macos.yaml"), dry_run=True)
        print(result.previous_version, "->", result.new_version)
        ```

"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
import time
from typing import Any

from minossync.auth import CredentialManager
from minossync.config import load_effective_config, resolve_dry_run
from minossync.discovery import ReleaseSource, get_source
from minossync.exceptions import ConfigError, PolicyError
from minossync.intune import GraphClient
from minossync.logging import SilentLogger, get_global_logger, set_global_logger
from minossync.policy import SelectionPolicy, odata_type_for, should_update
from minossync.results import RunResult
from minossync.versioning import ReleaseRecord, SelectionResult, compute_target

SYNC_STEPS = 5
PREVIEW_STEPS = 3


def fetch_release_records(
    config: dict[str, Any], source: ReleaseSource | None = None
) -> list[ReleaseRecord]:
    """Fetch raw release records using the configured feed source.

    Args:
        config: Effective configuration.
        source: Optional source instance overriding feed.source.

    Raises:
        ConfigError: If the feed section is missing or the source is unknown.
        NetworkError: If the feed cannot be retrieved.
    """
    feed = config.get("feed")
    if not isinstance(feed, dict):
        raise ConfigError("Config is missing the 'feed' section")
    if source is None:
        source = get_source(str(feed.get("source", "http_json")))
    return source.fetch_releases(feed)


def select_from_config(
    config: dict[str, Any], records: list[ReleaseRecord]
) -> SelectionResult:
    """Build the SelectionPolicy from config and run the selection core."""
    logger = get_global_logger()
    policy = SelectionPolicy.from_config(config.get("selection"))
    logger.verbose("SELECT", f"Policy: {policy.describe()}")
    return compute_target(records, policy)


def preview_target(
    config_path: Path,
    *,
    overrides: dict[str, Any] | None = None,
    environ: dict[str, str] | None = None,
    source: ReleaseSource | None = None,
    verbose: bool = False,
    debug: bool = False,
) -> SelectionResult:
    """Compute the target minimum version without contacting Graph.

    Raises:
        ConfigError: On configuration problems.
        NetworkError: If the release feed cannot be fetched.
        NoVersionsForPinError: If the pinned major has no stable release.
        EmptyCatalogError: If the feed has no stable release.
    """
    logger = get_global_logger()

    logger.step(1, PREVIEW_STEPS, "Loading configuration...")
    config = load_effective_config(
        config_path, overrides=overrides, environ=environ, verbose=verbose, debug=debug
    )

    logger.step(2, PREVIEW_STEPS, "Fetching release feed...")
    records = fetch_release_records(config, source)

    logger.step(3, PREVIEW_STEPS, "Selecting target version...")
    return select_from_config(config, records)


def _policy_settings(config: dict[str, Any]) -> tuple[str, str]:
    policy = config.get("policy") or {}
    policy_id = policy.get("id")
    if not policy_id or not isinstance(policy_id, str):
        raise ConfigError("Config requires 'policy.id' (compliance policy id)")
    return policy_id, odata_type_for(str(policy.get("platform", "macos")))


def sync_policy(
    config_path: Path,
    *,
    overrides: dict[str, Any] | None = None,
    dry_run: bool | None = None,
    environ: dict[str, str] | None = None,
    source: ReleaseSource | None = None,
    graph_client: GraphClient | None = None,
    verbose: bool = False,
    debug: bool = False,
) -> RunResult:
    """Bring the compliance policy's minimum OS version up to date.

    Args:
        config_path: Path to the YAML config file.
        overrides: Nested dict of CLI overrides.
        dry_run: Force dry-run on or off. None uses the config value.
        environ: Environment mapping for config overrides (tests).
        source: Release source overriding feed.source (tests).
        graph_client: Graph client to use. Defaults to one authenticated
            with CredentialManager (INTUNE_* variables).
        verbose: If True, print verbose progress output.
        debug: If True, print debug output.

    Returns:
        RunResult describing the run. updated is False when the policy
            already matched or when running dry.

    Raises:
        ConfigError: On configuration or credential problems.
        NetworkError: If the feed or Graph cannot be reached.
        AuthError: If no access token can be obtained.
        PolicyError: If the policy is missing or of the wrong platform.
        NoVersionsForPinError: If the pinned major has no stable release.
        EmptyCatalogError: If the feed has no stable release.

    """
    logger = get_global_logger()
    started = time.monotonic()

    logger.step(1, SYNC_STEPS, "Loading configuration...")
    config = load_effective_config(
        config_path, overrides=overrides, environ=environ, verbose=verbose, debug=debug
    )
    is_dry_run = resolve_dry_run(config) if dry_run is None else dry_run
    policy_id, expected_type = _policy_settings(config)
    if is_dry_run:
        logger.verbose("CONFIG", "Dry run: the policy will not be modified")

    logger.step(2, SYNC_STEPS, "Fetching release feed...")
    records = fetch_release_records(config, source)

    logger.step(3, SYNC_STEPS, "Selecting target version...")
    selection = select_from_config(config, records)
    target = selection.target_version
    logger.verbose("SELECT", f"Latest detected version: {selection.latest_version}")
    logger.verbose("SELECT", f"Target minimum version: {target}")

    logger.step(4, SYNC_STEPS, "Reading compliance policy...")
    if graph_client is None:
        graph_client = GraphClient(CredentialManager().get_token)
    policy = graph_client.get_compliance_policy(policy_id)
    if policy.odata_type and policy.odata_type != expected_type:
        raise PolicyError(
            f"Policy {policy_id} is {policy.odata_type}, expected {expected_type}"
        )
    previous = policy.os_minimum_version

    updated = False
    if not should_update(current=previous, target=target):
        logger.step(5, SYNC_STEPS, "Policy already up to date")
    elif is_dry_run:
        logger.step(5, SYNC_STEPS, f"Dry run: would update {previous} -> {target}")
    else:
        logger.step(5, SYNC_STEPS, f"Updating policy {previous} -> {target}...")
        graph_client.update_minimum_version(policy_id, target, expected_type)
        updated = True

    return RunResult(
        success=True,
        policy_id=policy_id,
        previous_version=previous,
        new_version=target,
        updated=updated,
        duration_seconds=time.monotonic() - started,
        timestamp=datetime.now(UTC).isoformat(),
        dry_run=is_dry_run,
        latest_version=selection.latest_version,
        insufficient_history=selection.insufficient_history,
        warnings=selection.warnings,
    )


def resolve_run_context(
    config_path: Path,
    *,
    overrides: dict[str, Any] | None = None,
    dry_run: bool | None = None,
    environ: dict[str, str] | None = None,
) -> tuple[str | None, bool]:
    """Resolve the policy id and dry-run flag a sync run would use.

    Used to fill in the summary of a failed run. The configuration is loaded
    with output suppressed; if it cannot be loaded, the override values are
    returned instead.

    Returns:
        Tuple of (policy_id or None, dry_run).
    """
    fallback_id = ((overrides or {}).get("policy") or {}).get("id")
    logger = get_global_logger()
    set_global_logger(SilentLogger())
    try:
        config = load_effective_config(config_path, overrides=overrides, environ=environ)
    except ConfigError:
        return fallback_id, bool(dry_run)
    finally:
        set_global_logger(logger)

    policy_id = (config.get("policy") or {}).get("id")
    if not isinstance(policy_id, str) or not policy_id:
        policy_id = fallback_id
    is_dry_run = resolve_dry_run(config) if dry_run is None else dry_run
    return policy_id, is_dry_run


def failed_run_result(
    error: Exception,
    *,
    started: float,
    policy_id: str | None = None,
    dry_run: bool = False,
) -> RunResult:
    """Build the summary for a run that raised before completing.

    Args:
        error: The exception that ended the run.
        started: time.monotonic() value taken when the run began.
        policy_id: Policy id if known.
        dry_run: Whether the run was a dry run.
    """
    return RunResult(
        success=False,
        policy_id=policy_id,
        previous_version=None,
        new_version=None,
        updated=False,
        duration_seconds=time.monotonic() - started,
        timestamp=datetime.now(UTC).isoformat(),
        dry_run=dry_run,
        error=str(error),
    )
