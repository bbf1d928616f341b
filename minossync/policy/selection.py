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

"""Trailing-window selection policy for minossync.

A SelectionPolicy tells the version selector how far behind the newest
release the compliance minimum should trail, and at which granularity
releases are grouped.

Example:
    Build a policy from the merged configuration:

        from minossync.policy.selection import SelectionPolicy

        policy = SelectionPolicy.from_config(
            {"versions_below": 1, "pin_to_major_version": 15}
        )
        policy.groups_by_minor  # True, pinning forces minor grouping

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from minossync.exceptions import ConfigError

MIN_VERSIONS_BELOW = 1
MAX_VERSIONS_BELOW = 10
DEFAULT_VERSIONS_BELOW = 2

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


def _coerce_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ConfigError(f"selection.{name} must be a boolean, got {value!r}")


def _coerce_int(name: str, value: Any) -> int:
    # bool is an int subclass; "true" is never a valid count
    if isinstance(value, bool):
        raise ConfigError(f"selection.{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ConfigError(f"selection.{name} must be an integer, got {value!r}")


@dataclass(frozen=True)
class SelectionPolicy:
    """Configuration for choosing the minimum OS version.

    Attributes:
        versions_below: How many grouped versions behind the newest to
            target (1-10).
        use_minor_versions: Group by major.minor instead of major.
        pin_to_major_version: Restrict the catalog to one major version
            before grouping. None disables pinning.

    """

    versions_below: int = DEFAULT_VERSIONS_BELOW
    use_minor_versions: bool = False
    pin_to_major_version: int | None = None

    def __post_init__(self) -> None:
        if not MIN_VERSIONS_BELOW <= self.versions_below <= MAX_VERSIONS_BELOW:
            raise ConfigError(
                f"selection.versions_below must be between {MIN_VERSIONS_BELOW} "
                f"and {MAX_VERSIONS_BELOW}, got {self.versions_below}"
            )
        if self.pin_to_major_version is not None and self.pin_to_major_version < 1:
            raise ConfigError(
                "selection.pin_to_major_version must be a positive integer, "
                f"got {self.pin_to_major_version}"
            )

    @property
    def groups_by_minor(self) -> bool:
        """True when releases are grouped by (major, minor)."""
        return self.pin_to_major_version is not None or self.use_minor_versions

    @classmethod
    def from_config(cls, selection: dict[str, Any] | None) -> SelectionPolicy:
        """Build a validated policy from the 'selection' config section.

        Args:
            selection: Mapping with optional versions_below,
                use_minor_versions and pin_to_major_version keys. String
                values (from environment variables) are coerced.

        Returns:
            The validated policy. A pin of 0 or None disables pinning.

        Raises:
            ConfigError: If a value has the wrong type or is out of range.

        """
        selection = selection or {}
        versions_below = _coerce_int(
            "versions_below", selection.get("versions_below", DEFAULT_VERSIONS_BELOW)
        )
        use_minor = _coerce_bool(
            "use_minor_versions", selection.get("use_minor_versions", False)
        )
        raw_pin = selection.get("pin_to_major_version")
        pin = None if raw_pin is None else _coerce_int("pin_to_major_version", raw_pin)
        return cls(
            versions_below=versions_below,
            use_minor_versions=use_minor,
            pin_to_major_version=pin or None,
        )

    def describe(self) -> str:
        """Short human-readable summary for logs."""
        if self.pin_to_major_version is not None:
            mode = f"pinned to major {self.pin_to_major_version}, by minor"
        elif self.use_minor_versions:
            mode = "by minor"
        else:
            mode = "by major"
        return f"{self.versions_below} below latest ({mode})"
