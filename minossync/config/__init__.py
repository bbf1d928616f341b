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

"""Configuration loading for minossync.

Layers, later wins: built-in defaults, defaults/org.yaml (found walking
upward from the config file), the config file, MINOSSYNC_* environment
variables, CLI overrides. Dicts deep-merge; lists and scalars replace.

Public API:

- load_effective_config: Load and merge configuration for a run
- resolve_dry_run: Interpret the merged dry_run value

Example:
    Basic usage:

        from pathlib import Path
        from minossync.config import load_effective_config

        config = load_effective_config(Path("configs/macos.yaml"))
        print(config["policy"]["id"])

"""

from .loader import API_VERSION, DEFAULT_CONFIG, load_effective_config, resolve_dry_run

__all__ = ["API_VERSION", "DEFAULT_CONFIG", "load_effective_config", "resolve_dry_run"]
