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

"""Public API return types for minossync.

This module defines dataclasses for return values from public API functions:
full sync runs and config validation.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using result types:
        ```python
        from pathlib import Path
        from minossync.core import sync_policy

        result = sync_policy(Path("config.yaml"), dry_run=True)
        print(result.new_version)
        print(result.to_dict())
        ```

Note:
    Only public API return types belong in this module. Domain types
    (ReleaseRecord, ParsedVersion, SelectionResult, CompliancePolicy)
    stay with their related logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RunResult:
    """Summary of one sync run.

    Attributes:
        success: True if the run completed (including dry runs).
        policy_id: Compliance policy id, None if not reached.
        previous_version: osMinimumVersion before the run.
        new_version: Computed target version.
        updated: True if a PATCH was issued.
        duration_seconds: Wall-clock duration of the run.
        timestamp: ISO-8601 UTC time the run finished.
        dry_run: True if writes were disabled.
        latest_version: Newest stable version in the catalog.
        insufficient_history: True if the target fell back to the oldest
            available version.
        error: Error message for failed runs.
        warnings: Operator-facing notes, e.g. insufficient history.
    """

    success: bool
    policy_id: str | None
    previous_version: str | None
    new_version: str | None
    updated: bool
    duration_seconds: float
    timestamp: str
    dry_run: bool = False
    latest_version: str | None = None
    insufficient_history: bool = False
    error: str | None = None
    warnings: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON run summary with camelCase keys."""
        return {
            "success": self.success,
            "policyId": self.policy_id,
            "previousVersion": self.previous_version,
            "newVersion": self.new_version,
            "updated": self.updated,
            "durationSeconds": round(self.duration_seconds, 3),
            "timestamp": self.timestamp,
            "dryRun": self.dry_run,
            "latestVersion": self.latest_version,
            "insufficientHistory": self.insufficient_history,
            "error": self.error,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class ValidationResult:
    """Result from validating a config file.

    Attributes:
        status: Validation status ("valid" or "invalid").
        errors: List of error messages (empty if valid).
        warnings: List of warning messages.
        config_path: String path to the validated config file.
    """

    status: str
    errors: list[str]
    warnings: list[str]
    config_path: str
