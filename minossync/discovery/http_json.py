"""
HTTP JSON release feed source for minossync.

Fetches a public OS release-tracking feed over HTTP(S) and converts the
entries located by a JSONPath expression into ReleaseRecord objects.

Supported Features:
- JSONPath navigation to the release list (jsonpath-ng)
- Custom HTTP headers with environment variable expansion
- Retries with exponential backoff on transient failures
- Configurable per-request timeout

Config Configuration:
feed:
  source: http_json
  url: "https://example.com/os/releases.json"
  releases_path: "$.releases[*]"           # Optional, default "$[*]"
  headers:                                 # Optional
    Authorization: "Bearer ${FEED_TOKEN}"
  timeout: 30                              # Optional, seconds

Expected entry shape:
    {"version": "15.1", "build": "24B83", "released": true,
     "beta": false, "rc": false, "releaseDate": "2024-10-28"}

Error Handling:
    - ConfigError: Missing feed.url, invalid JSONPath
    - NetworkError: HTTP failures, timeouts, invalid JSON response
    - Errors are chained with 'from err' for better debugging

Example:
    from minossync.discovery.http_json import HttpJsonSource

    source = HttpJsonSource()
    records = source.fetch_releases({"url": "https://example.com/releases.json"})
    print(f"{len(records)} releases")
"""

from __future__ import annotations

import json
import os
from typing import Any

import requests

from minossync.exceptions import ConfigError, NetworkError
from minossync.io import describe_http_error, make_session, request_json
from minossync.logging import get_global_logger
from minossync.versioning.keys import ReleaseRecord

from .base import records_from_document, register_source, validate_releases_path


def _expand_headers(headers: dict[str, Any]) -> dict[str, str]:
    """Expand "${VAR}" header values from the environment.

    Headers whose variable is unset are dropped with a verbose warning.
    """
    logger = get_global_logger()
    expanded: dict[str, str] = {}
    for key, value in headers.items():
        if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            env_var = value[2:-1]
            env_value = os.environ.get(env_var)
            if not env_value:
                logger.verbose(
                    "FEED", f"Warning: Environment variable {env_var} not set"
                )
            else:
                expanded[key] = env_value
        else:
            expanded[key] = str(value)
    return expanded


class HttpJsonSource:
    """Release source for JSON feeds served over HTTP(S).

    Configuration example:
        feed:
          source: http_json
          url: "https://example.com/releases.json"
          releases_path: "$[*]"
    """

    def __init__(self, session: requests.Session | None = None) -> None:
        self._session = session

    def fetch_releases(self, feed_config: dict[str, Any]) -> list[ReleaseRecord]:
        """Download the feed and convert its release entries.

        Args:
            feed_config: The 'feed' config section. Requires 'url'.

        Returns:
            Release records in feed order.

        Raises:
            ConfigError: If feed.url is missing or releases_path is invalid.
            NetworkError: If the request fails or the body is not JSON.

        """
        logger = get_global_logger()

        url = feed_config.get("url")
        if not url:
            raise ConfigError("http_json feed source requires 'feed.url' in config")

        timeout = feed_config.get("timeout", 30)
        headers = _expand_headers(feed_config.get("headers") or {})
        session = self._session or make_session()

        logger.verbose("FEED", "Source: http_json")
        logger.verbose("FEED", f"Fetching: GET {url}")
        try:
            data = request_json(session, "GET", url, headers=headers, timeout=timeout)
        except requests.exceptions.HTTPError as err:
            raise NetworkError(
                f"Release feed request failed: {describe_http_error(err)}"
            ) from err

        logger.debug("FEED", f"Feed document: {json.dumps(data)[:500]}")
        return records_from_document(data, feed_config)

    def validate_config(self, feed_config: dict[str, Any]) -> list[str]:
        """Validate http_json feed configuration without network calls."""
        errors = []

        url = feed_config.get("url")
        if url is None:
            errors.append("Missing required field: feed.url")
        elif not isinstance(url, str):
            errors.append("feed.url must be a string")
        elif not url.strip():
            errors.append("feed.url cannot be empty")
        elif not url.startswith(("http://", "https://")):
            errors.append("feed.url must start with http:// or https://")

        if "headers" in feed_config and not isinstance(feed_config["headers"], dict):
            errors.append("feed.headers must be a dictionary")

        timeout = feed_config.get("timeout", 30)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            errors.append("feed.timeout must be a positive number")

        errors.extend(validate_releases_path(feed_config))
        return errors


# Register this source when the module is imported
register_source("http_json", HttpJsonSource)
