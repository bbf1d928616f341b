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

"""Release catalog normalization for minossync.

Turns the raw release feed into an ordered list of distinct stable
versions. Each stage is a pure function over tuples so it can be tested on
its own:

    filter_stable -> parse_records -> restrict_to_major (pinned only)
        -> sort_descending -> dedupe_by_group -> sort_descending

Grouping:

- By major (default): one entry per major, the highest minor.patch.
- By major.minor (use_minor_versions, or any pinned run): one entry per
  major.minor pair, the highest patch.

Example:
    Normalize feed records:

        from minossync.policy.selection import SelectionPolicy
        from minossync.versioning.catalog import normalize_catalog

        catalog = normalize_catalog(records, SelectionPolicy())
        [v.full_version for v in catalog]  # ['15.1.0', '14.7.1', '13.7.1']

"""

from __future__ import annotations

from collections.abc import Iterable

from minossync.exceptions import NoVersionsForPinError
from minossync.logging import get_global_logger
from minossync.policy.selection import SelectionPolicy

from .keys import ParsedVersion, ReleaseRecord, VERSION_PATTERN, parsed_from_record


def is_stable(record: ReleaseRecord) -> bool:
    """Return True for released, well-formed records with no pre-release marker."""
    return (
        record.released
        and VERSION_PATTERN.match(record.version) is not None
        and not record.prerelease_markers
    )


def filter_stable(records: Iterable[ReleaseRecord]) -> tuple[ReleaseRecord, ...]:
    """Keep only stable releases. Malformed versions are dropped silently."""
    logger = get_global_logger()
    kept: list[ReleaseRecord] = []
    for record in records:
        if not record.released:
            continue
        if VERSION_PATTERN.match(record.version) is None:
            logger.debug("CATALOG", f"Dropping malformed version {record.version!r}")
            continue
        markers = record.prerelease_markers
        if markers:
            logger.debug(
                "CATALOG",
                f"Dropping pre-release {record.version!r} ({', '.join(markers)})",
            )
            continue
        kept.append(record)
    return tuple(kept)


def parse_records(records: Iterable[ReleaseRecord]) -> tuple[ParsedVersion, ...]:
    """Parse stable records into ParsedVersion values."""
    parsed: list[ParsedVersion] = []
    for record in records:
        version = parsed_from_record(record)
        if version is not None:
            parsed.append(version)
    return tuple(parsed)


def restrict_to_major(
    versions: Iterable[ParsedVersion], major: int
) -> tuple[ParsedVersion, ...]:
    """Drop every version whose major differs from 'major'.

    Raises:
        NoVersionsForPinError: If nothing is left.
    """
    kept = tuple(v for v in versions if v.major == major)
    if not kept:
        raise NoVersionsForPinError(major)
    return kept


def sort_descending(versions: Iterable[ParsedVersion]) -> tuple[ParsedVersion, ...]:
    """Sort newest first by (major, minor, patch)."""
    return tuple(sorted(versions, key=lambda v: v.key, reverse=True))


def group_key(version: ParsedVersion, by_minor: bool) -> tuple[int, ...]:
    if by_minor:
        return (version.major, version.minor)
    return (version.major,)


def dedupe_by_group(
    versions: Iterable[ParsedVersion], by_minor: bool
) -> tuple[ParsedVersion, ...]:
    """Keep the largest version of each group.

    Input need not be sorted; the representative is always the member with
    the greatest (major, minor, patch).
    """
    best: dict[tuple[int, ...], ParsedVersion] = {}
    for version in versions:
        gk = group_key(version, by_minor)
        current = best.get(gk)
        if current is None or version.key > current.key:
            best[gk] = version
    return tuple(best.values())


def normalize_catalog(
    records: Iterable[ReleaseRecord], policy: SelectionPolicy
) -> tuple[ParsedVersion, ...]:
    """Run the full normalization pipeline.

    Args:
        records: Raw release records in any order.
        policy: Selection policy deciding pinning and grouping.

    Returns:
        Distinct versions, strictly descending. Empty when an unpinned feed
            holds no stable release.

    Raises:
        NoVersionsForPinError: If the policy pins a major version that has no
            stable release.

    """
    logger = get_global_logger()

    stable = filter_stable(records)
    parsed = parse_records(stable)
    logger.verbose("CATALOG", f"{len(parsed)} stable release(s) after filtering")
    if policy.pin_to_major_version is not None:
        parsed = restrict_to_major(parsed, policy.pin_to_major_version)
        logger.verbose(
            "CATALOG",
            f"{len(parsed)} release(s) for pinned major {policy.pin_to_major_version}",
        )

    ordered = sort_descending(parsed)
    unique = sort_descending(dedupe_by_group(ordered, policy.groups_by_minor))

    logger.verbose(
        "CATALOG",
        f"{len(unique)} distinct version group(s) "
        f"({'major.minor' if policy.groups_by_minor else 'major'})",
    )
    for version in unique:
        logger.debug("CATALOG", f"  {version.full_version} (build {version.build or '-'})")
    return unique
