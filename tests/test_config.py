"""
Tests for minossync.config.loader module.

Tests configuration loading and merging including:
- YAML file loading
- Layer merging (defaults -> org -> config -> env -> CLI)
- Environment variable overrides
- Path resolution
- Error handling
"""

from __future__ import annotations

import pytest

from minossync.config import DEFAULT_CONFIG, load_effective_config, resolve_dry_run
from minossync.exceptions import ConfigError


class TestConfigLoading:
    """Tests for basic configuration loading."""

    def test_load_simple_config(self, create_yaml_file, sample_config_data):
        """Test loading a config without org defaults."""
        config_path = create_yaml_file("config.yaml", sample_config_data)

        config = load_effective_config(config_path, environ={})

        assert config["apiVersion"] == "minossync/v1"
        assert config["policy"]["id"] == sample_config_data["policy"]["id"]
        assert config["feed"]["url"] == "https://feeds.example.com/macos.json"

    def test_built_in_defaults_fill_gaps(self, create_yaml_file):
        """Test that omitted sections come from the built-in defaults."""
        config_path = create_yaml_file("config.yaml", {"policy": {"id": "abc"}})

        config = load_effective_config(config_path, environ={})

        assert config["selection"]["versions_below"] == 2
        assert config["selection"]["use_minor_versions"] is False
        assert config["feed"]["source"] == "http_json"
        assert config["feed"]["releases_path"] == "$[*]"
        assert config["policy"]["platform"] == "macos"
        assert config["dry_run"] is False

    def test_defaults_are_not_mutated(self, create_yaml_file):
        """Test that merging never changes DEFAULT_CONFIG."""
        config_path = create_yaml_file(
            "config.yaml", {"selection": {"versions_below": 7}}
        )

        load_effective_config(config_path, environ={})

        assert DEFAULT_CONFIG["selection"]["versions_below"] == 2

    def test_missing_config_file_raises(self, tmp_test_dir):
        """Test that a missing config file raises ConfigError."""
        with pytest.raises(ConfigError, match="Config file not found"):
            load_effective_config(tmp_test_dir / "nonexistent.yaml", environ={})

    def test_empty_config_file_raises(self, tmp_test_dir):
        """Test that an empty YAML file raises ConfigError."""
        config_path = tmp_test_dir / "empty.yaml"
        config_path.write_text("")

        with pytest.raises(ConfigError, match="empty"):
            load_effective_config(config_path, environ={})

    def test_invalid_yaml_raises(self, tmp_test_dir):
        """Test that malformed YAML raises ConfigError."""
        config_path = tmp_test_dir / "broken.yaml"
        config_path.write_text("policy: [unclosed\n")

        with pytest.raises(ConfigError, match="Error parsing YAML"):
            load_effective_config(config_path, environ={})

    def test_non_mapping_top_level_raises(self, tmp_test_dir):
        """Test that a top-level list is rejected."""
        config_path = tmp_test_dir / "list.yaml"
        config_path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_effective_config(config_path, environ={})


class TestConfigMerging:
    """Tests for configuration merging behavior."""

    def test_org_defaults_are_merged(self, tmp_test_dir):
        """Test that defaults/org.yaml above the config is applied."""
        defaults_dir = tmp_test_dir / "defaults"
        defaults_dir.mkdir()
        (defaults_dir / "org.yaml").write_text(
            "feed:\n  url: https://feeds.example.com/org.json\n"
            "selection:\n  use_minor_versions: true\n"
        )
        configs_dir = tmp_test_dir / "configs"
        configs_dir.mkdir()
        config_path = configs_dir / "macos.yaml"
        config_path.write_text("policy:\n  id: abc\n")

        config = load_effective_config(config_path, environ={})

        assert config["feed"]["url"] == "https://feeds.example.com/org.json"
        assert config["selection"]["use_minor_versions"] is True
        assert config["policy"]["id"] == "abc"

    def test_config_overrides_org_defaults(self, tmp_test_dir):
        """Test that the config file wins over org defaults, key by key."""
        defaults_dir = tmp_test_dir / "defaults"
        defaults_dir.mkdir()
        (defaults_dir / "org.yaml").write_text(
            "selection:\n  versions_below: 3\n  use_minor_versions: true\n"
        )
        config_path = tmp_test_dir / "config.yaml"
        config_path.write_text("selection:\n  versions_below: 1\n")

        config = load_effective_config(config_path, environ={})

        assert config["selection"]["versions_below"] == 1
        assert config["selection"]["use_minor_versions"] is True

    def test_lists_are_replaced(self, tmp_test_dir):
        """Test that lists are replaced rather than concatenated."""
        defaults_dir = tmp_test_dir / "defaults"
        defaults_dir.mkdir()
        (defaults_dir / "org.yaml").write_text("tags:\n  - a\n  - b\n")
        config_path = tmp_test_dir / "config.yaml"
        config_path.write_text("tags:\n  - c\n")

        config = load_effective_config(config_path, environ={})

        assert config["tags"] == ["c"]


class TestEnvironmentOverrides:
    """Tests for MINOSSYNC_* environment variables."""

    def test_env_overrides_config(self, create_yaml_file, sample_config_data):
        """Test that environment values win over the config file."""
        config_path = create_yaml_file("config.yaml", sample_config_data)

        config = load_effective_config(
            config_path,
            environ={
                "MINOSSYNC_POLICY_ID": "from-env",
                "MINOSSYNC_VERSIONS_BELOW": "4",
                "MINOSSYNC_FEED_URL": "https://env.example.com/feed.json",
                "MINOSSYNC_DRY_RUN": "true",
            },
        )

        assert config["policy"]["id"] == "from-env"
        assert config["selection"]["versions_below"] == "4"
        assert config["feed"]["url"] == "https://env.example.com/feed.json"
        assert config["dry_run"] == "true"

    def test_empty_env_values_are_ignored(self, create_yaml_file, sample_config_data):
        """Test that empty variables do not override."""
        config_path = create_yaml_file("config.yaml", sample_config_data)

        config = load_effective_config(
            config_path, environ={"MINOSSYNC_POLICY_ID": ""}
        )

        assert config["policy"]["id"] == sample_config_data["policy"]["id"]

    def test_os_environ_used_by_default(
        self, monkeypatch, create_yaml_file, sample_config_data
    ):
        """Test that os.environ is read when no mapping is passed."""
        monkeypatch.setenv("MINOSSYNC_PLATFORM", "ios")
        config_path = create_yaml_file("config.yaml", sample_config_data)

        config = load_effective_config(config_path)

        assert config["policy"]["platform"] == "ios"


class TestCliOverrides:
    """Tests for the overrides argument."""

    def test_overrides_win_over_env(self, create_yaml_file, sample_config_data):
        """Test that CLI overrides are the last layer."""
        config_path = create_yaml_file("config.yaml", sample_config_data)

        config = load_effective_config(
            config_path,
            overrides={"selection": {"versions_below": 1}},
            environ={"MINOSSYNC_VERSIONS_BELOW": "4"},
        )

        assert config["selection"]["versions_below"] == 1

    def test_none_overrides_are_ignored(self, create_yaml_file, sample_config_data):
        """Test that unset CLI flags leave lower layers untouched."""
        config_path = create_yaml_file("config.yaml", sample_config_data)

        config = load_effective_config(
            config_path,
            overrides={
                "selection": {"versions_below": None, "use_minor_versions": None}
            },
            environ={},
        )

        assert config["selection"]["versions_below"] == 2
        assert config["selection"]["use_minor_versions"] is False


class TestPathResolution:
    """Tests for relative path resolution."""

    def test_feed_path_resolved_against_config_dir(self, tmp_test_dir):
        """Test that feed.path is relative to the config file."""
        configs_dir = tmp_test_dir / "configs"
        configs_dir.mkdir()
        config_path = configs_dir / "offline.yaml"
        config_path.write_text("feed:\n  source: file\n  path: feeds/macos.json\n")

        config = load_effective_config(config_path, environ={})

        expected = (configs_dir / "feeds" / "macos.json").resolve()
        assert config["feed"]["path"] == str(expected)

    def test_absolute_feed_path_kept(self, tmp_test_dir):
        """Test that absolute paths are not changed."""
        feed_file = (tmp_test_dir / "feed.json").resolve()
        config_path = tmp_test_dir / "config.yaml"
        config_path.write_text(f"feed:\n  source: file\n  path: '{feed_file}'\n")

        config = load_effective_config(config_path, environ={})

        assert config["feed"]["path"] == str(feed_file)


class TestResolveDryRun:
    """Tests for resolve_dry_run."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (True, True),
            (False, False),
            ("true", True),
            ("1", True),
            ("Yes", True),
            ("false", False),
            ("0", False),
            ("", False),
        ],
    )
    def test_values(self, value, expected):
        """Test booleans and environment-style strings."""
        assert resolve_dry_run({"dry_run": value}) is expected

    def test_missing_is_false(self):
        """Test that an absent key means a live run."""
        assert resolve_dry_run({}) is False
