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

"""Command-line interface for minossync.

This module provides the main CLI entry point for the minossync tool.

Commands:

    validate: Validate config syntax and values (no network calls)
    preview: Compute the target minimum version without touching Intune
    sync: Update the compliance policy's minimum OS version

Example:
    Validate a config:
        ```bash
        $ minossync validate configs/macos.yaml
        ```

    Preview the target version with a different window:
        ```bash
        $ minossync preview configs/macos.yaml --versions-below 1 --use-minor-versions
        ```

    Dry-run a sync and write the run summary:
        ```bash
        $ minossync sync configs/macos.yaml --dry-run --summary-file out/run.json
        ```

Exit Codes:

- 0: Success (also when the target fell back to the oldest available version)
- 1: Error (configuration, network, authentication, policy, or empty catalog)

Note:
    The CLI uses argparse for command parsing. Each command has its own
    handler function (cmd_<command>). Verbose mode shows full tracebacks on
    errors for debugging. Debug mode implies verbose mode.

"""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version
import json
from pathlib import Path
import sys
import time
import traceback
from typing import Any

from minossync import __version__
from minossync.core import (
    failed_run_result,
    preview_target,
    resolve_run_context,
    sync_policy,
)
from minossync.exceptions import MinOSSyncError
from minossync.logging import get_logger, set_global_logger
from minossync.results import RunResult
from minossync.validation import validate_config


def _package_version() -> str:
    try:
        return version("minossync")
    except PackageNotFoundError:
        return __version__


def _positive_int(value: str) -> int:
    ivalue = int(value)
    if ivalue <= 0:
        raise argparse.ArgumentTypeError(f"{value} is an invalid positive int value")
    return ivalue


def _selection_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Turn selection flags into a nested overrides dict (unset flags are None)."""
    return {
        "selection": {
            "versions_below": args.versions_below,
            "use_minor_versions": True if args.use_minor_versions else None,
            "pin_to_major_version": args.pin_major,
        }
    }


def _print_error(err: Exception, args: argparse.Namespace) -> None:
    print(f"Error: {err}")
    if args.verbose or getattr(args, "debug", False):
        traceback.print_exc()


def _write_summary(path: Path, result: RunResult) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(result.to_dict(), indent=2) + "\n", encoding="utf-8")
    print(f"Run summary written to: {path}")


def cmd_validate(args: argparse.Namespace) -> int:
    """Handler for 'minossync validate' command.

    Returns:
        Exit code (0 for valid config, 1 for invalid).
    """
    set_global_logger(get_logger(verbose=args.verbose, debug=False))

    config_path = Path(args.config).resolve()
    print(f"Validating config: {config_path}")
    print()

    result = validate_config(config_path)

    print("=" * 70)
    print("VALIDATION RESULTS")
    print("=" * 70)
    print(f"Config:      {result.config_path}")
    print(f"Status:      {result.status.upper()}")
    print()

    if result.warnings:
        print(f"Warnings ({len(result.warnings)}):")
        for warning in result.warnings:
            print(f"  [WARNING] {warning}")
        print()

    if result.errors:
        print(f"Errors ({len(result.errors)}):")
        for error in result.errors:
            print(f"  [X] {error}")
        print()

    print("=" * 70)

    if result.status == "valid":
        print()
        print("[SUCCESS] Config is valid!")
        return 0
    print()
    print(f"[FAILED] Config validation failed with {len(result.errors)} error(s).")
    return 1


def cmd_preview(args: argparse.Namespace) -> int:
    """Handler for 'minossync preview' command.

    Fetches the release feed and prints the version that 'sync' would set,
    without reading or writing the compliance policy.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    set_global_logger(get_logger(verbose=args.verbose, debug=args.debug))

    config_path = Path(args.config).resolve()
    print(f"Previewing target version for config: {config_path}")
    print()

    try:
        result = preview_target(
            config_path,
            overrides=_selection_overrides(args),
            verbose=args.verbose,
            debug=args.debug,
        )
    except MinOSSyncError as err:
        _print_error(err, args)
        return 1

    print("=" * 70)
    print("PREVIEW RESULTS")
    print("=" * 70)
    print(f"Latest Version:  {result.latest_version}")
    print(f"Target Version:  {result.target_version}")
    print(f"Candidates:      {', '.join(v.full_version for v in result.candidates)}")
    print("=" * 70)
    for warning in result.warnings:
        print(f"[WARNING] {warning}")
    print()
    print("[SUCCESS] Target version computed.")
    return 0


def cmd_sync(args: argparse.Namespace) -> int:
    """Handler for 'minossync sync' command.

    Computes the target minimum version and updates the compliance policy
    when it differs. With --dry-run the policy is read but not written.
    With --summary-file the JSON run summary is written on success and on
    failure.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    set_global_logger(get_logger(verbose=args.verbose, debug=args.debug))

    config_path = Path(args.config).resolve()
    summary_file = Path(args.summary_file) if args.summary_file else None
    overrides = _selection_overrides(args)
    if args.policy_id:
        overrides["policy"] = {"id": args.policy_id}

    print(f"Syncing minimum OS version for config: {config_path}")
    if args.dry_run:
        print("Dry run: no changes will be made")
    print()

    started = time.monotonic()
    dry_run = True if args.dry_run else None
    try:
        result = sync_policy(
            config_path,
            overrides=overrides,
            dry_run=dry_run,
            verbose=args.verbose,
            debug=args.debug,
        )
    except MinOSSyncError as err:
        _print_error(err, args)
        if summary_file:
            policy_id, is_dry_run = resolve_run_context(
                config_path, overrides=overrides, dry_run=dry_run
            )
            _write_summary(
                summary_file,
                failed_run_result(
                    err, started=started, policy_id=policy_id, dry_run=is_dry_run
                ),
            )
        return 1

    print("=" * 70)
    print("SYNC RESULTS")
    print("=" * 70)
    print(f"Policy ID:        {result.policy_id}")
    print(f"Latest Version:   {result.latest_version}")
    print(f"Previous Version: {result.previous_version or '(not set)'}")
    print(f"New Version:      {result.new_version}")
    print(f"Updated:          {'yes' if result.updated else 'no'}")
    print(f"Dry Run:          {'yes' if result.dry_run else 'no'}")
    print(f"Duration:         {result.duration_seconds:.2f}s")
    print("=" * 70)
    for warning in result.warnings:
        print(f"[WARNING] {warning}")

    if summary_file:
        _write_summary(summary_file, result)

    print()
    if result.updated:
        print("[SUCCESS] Compliance policy updated!")
    elif result.dry_run and result.previous_version != result.new_version:
        print("[SUCCESS] Dry run complete, policy would be updated.")
    else:
        print("[SUCCESS] Compliance policy already up to date.")
    return 0


def _add_selection_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--versions-below",
        type=int,
        choices=range(1, 11),
        metavar="N",
        default=None,
        help="Versions behind the newest to target, 1-10 (default: from config)",
    )
    parser.add_argument(
        "--use-minor-versions",
        action="store_true",
        help="Group releases by major.minor instead of major",
    )
    parser.add_argument(
        "--pin-major",
        type=_positive_int,
        default=None,
        help="Only consider releases of this major version",
    )


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minossync",
        description="Keep an Intune compliance policy's minimum OS version in sync with OS releases",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"minossync {_package_version()}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'validate' command
    parser_validate = subparsers.add_parser(
        "validate",
        help="Validate config syntax and values (no network calls)",
        description="Check a config file for syntax errors and invalid values without making network calls.",
    )
    parser_validate.add_argument("config", help="Path to the config YAML file")
    parser_validate.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show validation progress and details",
    )
    parser_validate.set_defaults(func=cmd_validate)

    # 'preview' command
    parser_preview = subparsers.add_parser(
        "preview",
        help="Compute the target minimum version without touching Intune",
        description="Fetch the release feed and print the version 'sync' would set.",
    )
    parser_preview.add_argument("config", help="Path to the config YAML file")
    _add_selection_arguments(parser_preview)
    _add_output_arguments(parser_preview)
    parser_preview.set_defaults(func=cmd_preview)

    # 'sync' command
    parser_sync = subparsers.add_parser(
        "sync",
        help="Update the compliance policy's minimum OS version",
        description="Compute the target minimum version and update the compliance policy if it differs.",
    )
    parser_sync.add_argument("config", help="Path to the config YAML file")
    parser_sync.add_argument(
        "--policy-id",
        default=None,
        help="Compliance policy id (default: policy.id from config)",
    )
    parser_sync.add_argument(
        "--dry-run",
        action="store_true",
        help="Read the policy and report the change without writing it",
    )
    parser_sync.add_argument(
        "--summary-file",
        default=None,
        help="Write the JSON run summary to this path",
    )
    _add_selection_arguments(parser_sync)
    _add_output_arguments(parser_sync)
    parser_sync.set_defaults(func=cmd_sync)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the minossync CLI.

    This function is registered as the 'minossync' console script in
    pyproject.toml.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
