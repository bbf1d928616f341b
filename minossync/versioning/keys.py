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

"""Release records and version parsing for minossync.

This module is format-agnostic: it does NOT download or read files.
It only turns release feed entries into records and parses their
major.minor[.patch] version strings.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Any

# Leading numeric core; anything after it (build suffixes, labels) is ignored.
VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)(?:\.(\d+))?")

# Matched case-insensitively as substrings of the raw version string.
PRERELEASE_MARKERS: tuple[str, ...] = ("beta", "rc", "preview", "seed")

UNKNOWN_RELEASE_DATE = "Unknown"

# ----------------------------
# Feed records
# ----------------------------


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


@dataclass(frozen=True)
class ReleaseRecord:
    """One entry from the upstream release feed.

    Attributes:
        version: Raw version text (e.g., "15.1", "14.7.1 (23H222)").
        build: Opaque build identifier, informational only.
        released: Whether the release is generally available.
        beta: Explicit beta flag from the feed.
        rc: Explicit release-candidate flag from the feed.
        release_date: Release date text, "Unknown" when the feed omits it.

    """

    version: str
    build: str = ""
    released: bool = False
    beta: bool = False
    rc: bool = False
    release_date: str = UNKNOWN_RELEASE_DATE

    @classmethod
    def from_feed_entry(cls, entry: dict[str, Any]) -> ReleaseRecord:
        """Build a record from a feed object.

        Expected keys are version, build, released, beta, rc and releaseDate.
        Missing flags default to False, so an entry without "released" is
        never treated as a stable release.
        """
        raw_version = entry.get("version")
        release_date = entry.get("releaseDate")
        return cls(
            version="" if raw_version is None else str(raw_version).strip(),
            build=str(entry.get("build") or ""),
            released=_as_bool(entry.get("released", False)),
            beta=_as_bool(entry.get("beta", False)),
            rc=_as_bool(entry.get("rc", False)),
            release_date=str(release_date) if release_date else UNKNOWN_RELEASE_DATE,
        )

    @property
    def prerelease_markers(self) -> tuple[str, ...]:
        """Names of the pre-release markers present on this record."""
        found: list[str] = []
        if self.beta:
            found.append("beta")
        if self.rc:
            found.append("rc")
        lowered = self.version.lower()
        for marker in PRERELEASE_MARKERS:
            if marker in lowered and marker not in found:
                found.append(marker)
        return tuple(found)


# ----------------------------
# Parsed versions
# ----------------------------


@dataclass(frozen=True)
class ParsedVersion:
    """A stable release with its version split into integers.

    Attributes:
        major: Major version number.
        minor: Minor version number.
        patch: Patch number, 0 when the version string has no third part.
        build: Build identifier carried over from the feed.
        release_date: Release date carried over from the feed.

    """

    major: int
    minor: int
    patch: int = 0
    build: str = ""
    release_date: str = UNKNOWN_RELEASE_DATE

    @property
    def full_version(self) -> str:
        """Canonical major.minor.patch string used for display and comparison."""
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def key(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)


def parse_version(text: str) -> tuple[int, int, int] | None:
    """Parse the leading major.minor[.patch] of a version string.

    Returns None when the text does not start with at least major.minor.

    Example:
        >>> parse_version("14.7.1 (23H222)")
        (14, 7, 1)
        >>> parse_version("15.1")
        (15, 1, 0)
        >>> parse_version("Sequoia") is None
        True
    """
    m = VERSION_PATTERN.match(text)
    if not m:
        return None
    patch = m.group(3)
    return int(m.group(1)), int(m.group(2)), int(patch) if patch else 0


def parsed_from_record(record: ReleaseRecord) -> ParsedVersion | None:
    """Convert a record to a ParsedVersion, or None if its version is malformed."""
    parts = parse_version(record.version)
    if parts is None:
        return None
    major, minor, patch = parts
    return ParsedVersion(
        major=major,
        minor=minor,
        patch=patch,
        build=record.build,
        release_date=record.release_date,
    )
