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

"""Release feed sources for minossync.

This package provides a pluggable source pattern for retrieving the raw OS
release catalog. A source only fetches and converts entries; filtering and
selection happen in minossync.versioning.

Available Sources:
    http_json : HttpJsonSource
        GET a JSON feed over HTTP(S), with retries and header expansion.
    file : LocalFileSource
        Read a JSON feed document from disk.

Example:
    Look up a source by its config name:

        from minossync.discovery import get_source

        source = get_source("http_json")
        records = source.fetch_releases(
            {"url": "https://example.com/releases.json", "releases_path": "$[*]"}
        )

"""

from . import (
    http_json,  # noqa: F401
    local_file,  # noqa: F401
)
from .base import ReleaseSource, available_sources, get_source, register_source

__all__ = ["ReleaseSource", "available_sources", "get_source", "register_source"]
