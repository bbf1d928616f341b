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

"""Exception hierarchy for minossync.

This module defines a custom exception hierarchy that allows library users
to distinguish between the different ways a sync run can fail:

- ConfigError: Configuration problems (YAML parse, invalid fields, missing
  credentials)
- NetworkError: Release feed or Microsoft Graph transport/HTTP failures
- AuthError: Token acquisition failures
- PolicyError: Compliance policy missing or of an unexpected type
- SelectionError: No target version could be computed from the catalog

All exceptions inherit from MinOSSyncError, allowing users to catch every
minossync error with a single except clause if needed.

Example:
    Catching specific error types:
        ```python
        from minossync.core import sync_policy
        from minossync.exceptions import EmptyCatalogError, NetworkError

        try:
            result = sync_policy(Path("config.yaml"))
        except EmptyCatalogError as e:
            print(f"No stable releases: {e}")
        except NetworkError as e:
            print(f"Network error: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "MinOSSyncError",
    "ConfigError",
    "NetworkError",
    "AuthError",
    "PolicyError",
    "SelectionError",
    "NoVersionsForPinError",
    "EmptyCatalogError",
]


class MinOSSyncError(Exception):
    """Base exception for all minossync errors."""

    pass


class ConfigError(MinOSSyncError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - YAML parsing (syntax errors, invalid structure)
    - Missing or out-of-range configuration fields
    - Unknown release feed source or platform
    - Missing INTUNE_* credential variables
    """

    pass


class NetworkError(MinOSSyncError):
    """Raised when the release feed or the Graph API cannot be reached.

    Covers connection failures, timeouts, non-2xx responses and response
    bodies that are not valid JSON.
    """

    pass


class AuthError(MinOSSyncError):
    """Raised when an access token cannot be obtained from Entra ID."""

    pass


class PolicyError(MinOSSyncError):
    """Raised for compliance policy problems.

    - The configured policy id does not exist
    - The policy's @odata.type does not match the configured platform
    """

    pass


class SelectionError(MinOSSyncError):
    """Base class for failures to compute a target minimum version."""

    pass


class NoVersionsForPinError(SelectionError):
    """Raised when pinning to a major version leaves no releases.

    Attributes:
        major: The pinned major version that had no stable releases.
    """

    def __init__(self, major: int) -> None:
        self.major = major
        super().__init__(
            f"No stable releases found for pinned major version {major}"
        )


class EmptyCatalogError(SelectionError):
    """Raised when no stable release survives filtering."""

    def __init__(self, message: str = "No stable releases found in catalog") -> None:
        super().__init__(message)
