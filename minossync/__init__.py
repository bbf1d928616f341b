"""
minossync - Minimum OS version sync for Intune

A Python-based CLI tool that keeps the minimum OS version of a Microsoft
Intune compliance policy a fixed number of releases behind the newest
stable Apple OS release.

minossync provides:
  - Release discovery from a JSON feed (HTTP or local file)
  - Stable-release filtering and per-major or per-minor grouping
  - "N versions below latest" target selection with optional major pinning
  - Idempotent osMinimumVersion updates through Microsoft Graph
  - Layered YAML configuration with environment and CLI overrides
  - JSON run summaries for scheduled jobs

Quick Start
-----------
Validate a config without network calls:

    $ minossync validate configs/macos.yaml

See which version would be enforced:

    $ minossync preview configs/macos.yaml

Update the policy (or check what would change):

    $ minossync sync configs/macos.yaml --dry-run

For full CLI documentation:

    $ minossync --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    High-level orchestration functions.
config : package
    YAML configuration loading and merging.
discovery : package
    Release feed sources (http_json, file).
versioning : package
    Release records, catalog normalization and target selection.
policy : package
    Selection policy and update decision.
intune : package
    Microsoft Graph compliance policy client.
auth : package
    Client-credentials token acquisition.

Public API
----------
The primary interface is the CLI, but key functions are exported for
programmatic use:

    from minossync.core import preview_target, sync_policy
    from minossync.validation import validate_config
    from minossync.config import load_effective_config
    from minossync.versioning import compute_target
    from minossync.policy import SelectionPolicy
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "Keep Intune compliance policy minimum OS versions in sync"

# Re-export commonly used functions for convenience
from minossync.config import load_effective_config
from minossync.core import preview_target, sync_policy
from minossync.policy import SelectionPolicy, should_update
from minossync.validation import validate_config
from minossync.versioning import ReleaseRecord, SelectionResult, compute_target

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "sync_policy",
    "preview_target",
    "validate_config",
    "load_effective_config",
    "compute_target",
    "should_update",
    "SelectionPolicy",
    "SelectionResult",
    "ReleaseRecord",
]
