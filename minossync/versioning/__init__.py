"""
Release catalog parsing and minimum-version selection for minossync.

This package is the pure core of the tool: no network or file I/O. It
turns release feed entries into records, normalizes them into a catalog of
distinct stable versions, and picks the target minimum OS version.

Modules
-------
keys : module
    ReleaseRecord and ParsedVersion types, version string parsing.
catalog : module
    Stability filtering, pinning, grouping and sorting (the normalizer).
selection : module
    Picking the version N positions behind the newest (the selector).

Public API
----------
ReleaseRecord : dataclass
    One feed entry (version, build, released, beta/rc flags, release date).
ParsedVersion : dataclass
    A stable release split into major, minor and patch.
SelectionResult : dataclass
    Target and latest versions plus the insufficient-history flag.
normalize_catalog : function
    Filter, group and sort raw records into a descending catalog.
select_target : function
    Select from a normalized catalog.
compute_target : function
    normalize_catalog followed by select_target.

Grouping Modes
--------------
1. **Major** (default): one catalog entry per major version, the highest
   minor.patch of that major.
2. **Minor** (use_minor_versions): one entry per major.minor, the highest
   patch.
3. **Pinned** (pin_to_major_version): only the pinned major is kept, grouped
   by major.minor regardless of use_minor_versions.

Examples
--------
    >>> from minossync.versioning import ReleaseRecord, compute_target
    >>> from minossync.policy.selection import SelectionPolicy
    >>> records = [
    ...     ReleaseRecord("15.1", released=True),
    ...     ReleaseRecord("14.7.1", released=True),
    ...     ReleaseRecord("13.7.1", released=True),
    ...     ReleaseRecord("15.2 beta 3", released=True),
    ... ]
    >>> compute_target(records, SelectionPolicy(versions_below=2)).target_version
    '13.7.1'

Notes
-----
- Pre-release markers (beta, rc, preview, seed) exclude a record entirely
- Versions that do not start with major.minor are dropped silently
- Results are deterministic: the same input always yields the same target
"""

from .catalog import normalize_catalog
from .keys import ParsedVersion, ReleaseRecord, parse_version
from .selection import SelectionResult, compute_target, select_target

__all__ = [
    "ParsedVersion",
    "ReleaseRecord",
    "SelectionResult",
    "compute_target",
    "normalize_catalog",
    "parse_version",
    "select_target",
]
