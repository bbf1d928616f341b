"""
Local file release feed source for minossync.

Reads a previously downloaded release feed from disk. Useful for offline
previews, pinned snapshots in CI, and tests.

Config Configuration:
feed:
  source: file
  path: "feeds/macos.json"          # Relative to the config file
  releases_path: "$.releases[*]"    # Optional, default "$[*]"

Error Handling:
    - ConfigError: Missing feed.path, file not found or unreadable,
      invalid UTF-8 or JSON, invalid JSONPath
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from minossync.exceptions import ConfigError
from minossync.logging import get_global_logger
from minossync.versioning.keys import ReleaseRecord

from .base import records_from_document, register_source, validate_releases_path


class LocalFileSource:
    """Release source reading a JSON feed document from disk."""

    def fetch_releases(self, feed_config: dict[str, Any]) -> list[ReleaseRecord]:
        logger = get_global_logger()

        raw_path = feed_config.get("path")
        if not raw_path:
            raise ConfigError("file feed source requires 'feed.path' in config")

        path = Path(raw_path)
        logger.verbose("FEED", "Source: file")
        logger.verbose("FEED", f"Reading: {path}")
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as err:
            raise ConfigError(f"Release feed file not found: {path}") from err
        except json.JSONDecodeError as err:
            raise ConfigError(f"Release feed file is not valid JSON: {path}: {err}") from err
        except UnicodeDecodeError as err:
            raise ConfigError(f"Release feed file is not valid UTF-8: {path}: {err}") from err
        except OSError as err:
            raise ConfigError(f"Cannot read release feed file: {path}: {err}") from err

        return records_from_document(data, feed_config)

    def validate_config(self, feed_config: dict[str, Any]) -> list[str]:
        errors = []
        raw_path = feed_config.get("path")
        if raw_path is None:
            errors.append("Missing required field: feed.path")
        elif not isinstance(raw_path, str) or not raw_path.strip():
            errors.append("feed.path must be a non-empty string")
        errors.extend(validate_releases_path(feed_config))
        return errors


# Register this source when the module is imported
register_source("file", LocalFileSource)
