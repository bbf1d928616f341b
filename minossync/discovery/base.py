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

"""Release source protocol and registry for minossync.

This module defines the foundational components for fetching the release
catalog:

- ReleaseSource protocol: Interface that all sources must implement
- Source registry: Global dict mapping source names to implementations
- Registration and lookup functions: register_source() and get_source()
- extract_release_entries(): JSONPath lookup shared by all sources

Available sources:

- http_json: Fetch the release feed from an HTTP(S) endpoint
- file: Read the release feed from a local JSON file

Design Philosophy:
    - Sources are Protocol classes (structural subtyping, not inheritance)
    - Registration happens at module import time (sources self-register)
    - Each source is stateless and can be instantiated on-demand

Example:
    Implementing a custom source:
        ```python
        from typing import Any
        from minossync.discovery.base import register_source
        from minossync.versioning.keys import ReleaseRecord

        class StaticSource:
            def fetch_releases(self, feed_config: dict[str, Any]) -> list[ReleaseRecord]:
                return [ReleaseRecord("15.1", released=True)]

            def validate_config(self, feed_config: dict[str, Any]) -> list[str]:
                return []

        register_source("static", StaticSource)
        ```

"""

from __future__ import annotations

from typing import Any, Protocol

from jsonpath_ng import parse as jsonpath_parse

from minossync.exceptions import ConfigError
from minossync.logging import get_global_logger
from minossync.versioning.keys import ReleaseRecord

DEFAULT_RELEASES_PATH = "$[*]"

# -------------------------------
# Source Protocol
# -------------------------------


class ReleaseSource(Protocol):
    """Protocol for release feed sources."""

    def fetch_releases(self, feed_config: dict[str, Any]) -> list[ReleaseRecord]:
        """Fetch and convert the feed's release entries.

        Args:
            feed_config: The 'feed' section of the effective config.

        Returns:
            Release records in feed order. May be empty.

        Raises:
            ConfigError: On invalid source configuration.
            NetworkError: If the feed cannot be retrieved or decoded.

        """
        ...

    def validate_config(self, feed_config: dict[str, Any]) -> list[str]:
        """Validate source-specific configuration without I/O.

        Returns:
            List of error messages. Empty list if configuration is valid.
        """
        ...


# -------------------------------
# Source Registry
# -------------------------------

_SOURCE_REGISTRY: dict[str, type[ReleaseSource]] = {}


def register_source(name: str, source_class: type[ReleaseSource]) -> None:
    """Register a release source by name in the global registry.

    Registering the same name twice overwrites the previous registration
    (allows monkey-patching for tests).

    Args:
        name: Source name used in config under feed.source.
        source_class: Class implementing the ReleaseSource protocol.
    """
    _SOURCE_REGISTRY[name] = source_class


def get_source(name: str) -> ReleaseSource:
    """Get a new release source instance by name.

    Raises:
        ConfigError: If the source name is not registered. The message lists
            the available sources.
    """
    if name not in _SOURCE_REGISTRY:
        available = ", ".join(sorted(_SOURCE_REGISTRY))
        raise ConfigError(
            f"Unknown release feed source: {name!r}. Available: {available or '(none)'}"
        )
    return _SOURCE_REGISTRY[name]()


def available_sources() -> list[str]:
    return sorted(_SOURCE_REGISTRY)


# -------------------------------
# Shared helpers
# -------------------------------


def validate_releases_path(feed_config: dict[str, Any]) -> list[str]:
    """Check that feed.releases_path, if given, is a valid JSONPath."""
    path = feed_config.get("releases_path", DEFAULT_RELEASES_PATH)
    if not isinstance(path, str) or not path.strip():
        return ["feed.releases_path must be a non-empty string"]
    try:
        jsonpath_parse(path)
    except Exception as err:
        return [f"Invalid feed.releases_path JSONPath: {err}"]
    return []


def extract_release_entries(data: Any, releases_path: str) -> list[dict[str, Any]]:
    """Locate release objects in a decoded feed document.

    Every JSONPath match that is an object is one release; a match that is a
    list contributes its object items. Anything else is skipped.

    Args:
        data: Decoded JSON document.
        releases_path: JSONPath expression (e.g., "$[*]", "$.releases[*]",
            "$.OSVersions[*].releases").

    Returns:
        Release objects in document order.

    Raises:
        ConfigError: If the JSONPath expression cannot be parsed.

    """
    logger = get_global_logger()
    try:
        expr = jsonpath_parse(releases_path)
    except Exception as err:
        raise ConfigError(
            f"Invalid feed.releases_path JSONPath {releases_path!r}: {err}"
        ) from err

    if isinstance(data, dict) and releases_path == DEFAULT_RELEASES_PATH:
        logger.warning(
            "Feed root is an object but feed.releases_path is the default "
            f"{DEFAULT_RELEASES_PATH!r}; set it to the release list "
            "(e.g. \"$.releases[*]\")"
        )

    entries: list[dict[str, Any]] = []
    skipped = 0
    for match in expr.find(data):
        value = match.value
        if isinstance(value, dict):
            entries.append(value)
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, dict):
                    entries.append(item)
                else:
                    skipped += 1
        else:
            skipped += 1

    if skipped:
        logger.debug("FEED", f"Skipped {skipped} non-object match(es)")
    logger.verbose(
        "FEED", f"Found {len(entries)} release entries at {releases_path}"
    )
    return entries


def records_from_document(data: Any, feed_config: dict[str, Any]) -> list[ReleaseRecord]:
    """Convert a decoded feed document into release records."""
    releases_path = feed_config.get("releases_path") or DEFAULT_RELEASES_PATH
    return [
        ReleaseRecord.from_feed_entry(entry)
        for entry in extract_release_entries(data, releases_path)
    ]
