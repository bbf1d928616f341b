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

"""Update decision policy for minossync.

Determines whether the compliance policy's stored minimum OS version has to
be rewritten, and which Graph schema type the write must carry.

Example:
    Check if the policy needs an update:

        from minossync.policy.updates import should_update

        should_update(current="14.7.0", target="14.7.1")  # True
        should_update(current="14.7.1", target="14.7.1")  # False

"""

from __future__ import annotations

from typing import Literal

from minossync.exceptions import ConfigError

Platform = Literal["macos", "ios"]

# @odata.type discriminators of the OS-specific compliance policy schemas
POLICY_ODATA_TYPES: dict[str, str] = {
    "macos": "#microsoft.graph.macOSCompliancePolicy",
    "ios": "#microsoft.graph.iosCompliancePolicy",
}


def odata_type_for(platform: str) -> str:
    """Return the Graph @odata.type for a configured platform name.

    Raises:
        ConfigError: If the platform is not supported.
    """
    try:
        return POLICY_ODATA_TYPES[platform.lower()]
    except (KeyError, AttributeError) as err:
        available = ", ".join(POLICY_ODATA_TYPES)
        raise ConfigError(
            f"Unknown policy platform: {platform!r}. Available: {available}"
        ) from err


def should_update(*, current: str | None, target: str) -> bool:
    """Decide whether osMinimumVersion must be rewritten.

    The comparison is plain string equality: "13.7" and "13.7.0"
    are different values and trigger an update.

    Args:
        current: Value stored on the policy (None or "" if unset).
        target: Computed full version (major.minor.patch).

    Returns:
        True if the stored value differs from the target.

    """
    if not current:
        return True
    return current != target
