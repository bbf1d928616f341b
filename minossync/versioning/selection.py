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

"""Target version selection for minossync.

Given a normalized catalog (newest first, one entry per group), the target
minimum is the entry 'versions_below' positions behind the newest. Index 0
is the newest itself, so versions_below=2 picks the third-newest group.

When the catalog is too short the oldest entry is selected and the result
is flagged with insufficient_history. That outcome is degraded but not an
error; callers decide how loudly to surface it.

Example:
    Compute a target from raw feed records:

        from minossync.policy.selection import SelectionPolicy
        from minossync.versioning.selection import compute_target

        result = compute_target(records, SelectionPolicy(versions_below=2))
        result.target_version  # '13.7.1'
        result.latest_version  # '15.1.0'

"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from minossync.exceptions import EmptyCatalogError
from minossync.logging import get_global_logger
from minossync.policy.selection import SelectionPolicy

from .catalog import normalize_catalog
from .keys import ParsedVersion, ReleaseRecord


@dataclass(frozen=True)
class SelectionResult:
    """Outcome of selecting a target minimum version.

    Attributes:
        target: The selected version.
        latest: The newest version in the catalog.
        candidates: The normalized catalog, newest first.
        insufficient_history: True when the catalog had too few entries and
            the oldest available version was selected instead.
        warnings: Operator-facing notes about the selection.

    """

    target: ParsedVersion
    latest: ParsedVersion
    candidates: tuple[ParsedVersion, ...]
    insufficient_history: bool = False
    warnings: tuple[str, ...] = ()

    @property
    def target_version(self) -> str:
        return self.target.full_version

    @property
    def latest_version(self) -> str:
        return self.latest.full_version


def select_target(
    catalog: Sequence[ParsedVersion], versions_below: int
) -> SelectionResult:
    """Pick the catalog entry 'versions_below' positions behind the newest.

    Args:
        catalog: Normalizer output, strictly descending.
        versions_below: Offset from the newest entry (validated 1-10 by
            SelectionPolicy).

    Returns:
        The selection. If len(catalog) <= versions_below, the last (oldest)
            entry is selected and insufficient_history is set.

    Raises:
        EmptyCatalogError: If the catalog is empty.

    """
    logger = get_global_logger()
    candidates = tuple(catalog)
    if not candidates:
        raise EmptyCatalogError()

    latest = candidates[0]
    n = len(candidates)
    if n <= versions_below:
        target = candidates[-1]
        message = (
            f"Only {n} distinct version(s) available but versions_below is "
            f"{versions_below}; using oldest available {target.full_version}"
        )
        return SelectionResult(
            target=target,
            latest=latest,
            candidates=candidates,
            insufficient_history=True,
            warnings=(message,),
        )

    target = candidates[versions_below]
    logger.verbose(
        "SELECT",
        f"Latest {latest.full_version}, target {target.full_version} "
        f"({versions_below} below latest)",
    )
    return SelectionResult(target=target, latest=latest, candidates=candidates)


def compute_target(
    records: Iterable[ReleaseRecord], policy: SelectionPolicy
) -> SelectionResult:
    """Normalize raw feed records and select the target version.

    Raises:
        NoVersionsForPinError: If the pinned major has no stable release.
        EmptyCatalogError: If no stable release survives filtering.
    """
    return select_target(normalize_catalog(records, policy), policy.versions_below)
