"""
Pytest configuration and shared fixtures for minossync tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from minossync.logging import SilentLogger, set_global_logger
from minossync.versioning import ReleaseRecord


@pytest.fixture(autouse=True)
def reset_global_logger():
    """Restore the silent logger after tests that install their own."""
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def sample_feed_entries() -> list[dict[str, Any]]:
    """
    Provide a release feed covering three majors plus noise.

    Stable representatives: 15.1 (major 15), 14.7.1 (major 14),
    13.7.1 (major 13). Includes a beta, an unreleased entry, an RC and a
    malformed version that must all be ignored.
    """
    return [
        {"version": "15.1", "build": "24B83", "released": True, "releaseDate": "2024-10-28"},
        {"version": "15.0.1", "build": "24A348", "released": True},
        {"version": "15.0", "build": "24A335", "released": True},
        {"version": "15.2", "build": "24C5057p", "released": True, "beta": True},
        {"version": "15.2 RC", "build": "24C98", "released": True},
        {"version": "16.0", "build": "25A5279m", "released": False},
        {"version": "14.7.1", "build": "23H222", "released": True},
        {"version": "14.7", "build": "23H124", "released": True},
        {"version": "14.6.1", "build": "23G93", "released": True},
        {"version": "13.7.1", "build": "22H221", "released": True},
        {"version": "13.7", "build": "22H123", "released": True},
        {"version": "13.6.9", "build": "22G830", "released": True},
        {"version": "Sequoia", "build": "", "released": True},
    ]


@pytest.fixture
def sample_records(sample_feed_entries) -> list[ReleaseRecord]:
    """Provide sample_feed_entries converted to ReleaseRecord values."""
    return [ReleaseRecord.from_feed_entry(e) for e in sample_feed_entries]


@pytest.fixture
def sample_config_data() -> dict[str, Any]:
    """
    Provide sample config data.

    Returns a complete config structure for testing.
    """
    return {
        "apiVersion": "minossync/v1",
        "feed": {
            "source": "http_json",
            "url": "https://feeds.example.com/macos.json",
        },
        "policy": {
            "id": "00000000-1111-2222-3333-444444444444",
            "platform": "macos",
        },
        "selection": {
            "versions_below": 2,
        },
    }


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("test.yaml", {"key": "value"})
    """

    def _create(filename: str, data: dict[str, Any]) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create


@pytest.fixture
def graph_policy_response() -> dict[str, Any]:
    """Provide a Graph compliance policy body."""
    return {
        "@odata.type": "#microsoft.graph.macOSCompliancePolicy",
        "id": "00000000-1111-2222-3333-444444444444",
        "displayName": "macOS Baseline",
        "osMinimumVersion": "13.6.9",
    }
