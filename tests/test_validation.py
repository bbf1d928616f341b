"""
Tests for minossync.validation module.

Tests config validation including:
- Valid configs
- Syntax and structure errors
- Feed source checks
- Policy and selection checks
"""

from __future__ import annotations

from minossync.validation import validate_config


class TestValidateConfig:
    """Tests for validate_config."""

    def test_valid_config(self, create_yaml_file, sample_config_data):
        """Test that the sample config is valid with no warnings."""
        config_path = create_yaml_file("config.yaml", sample_config_data)

        result = validate_config(config_path, environ={})

        assert result.status == "valid"
        assert result.errors == []
        assert result.warnings == []
        assert result.config_path == str(config_path)

    def test_missing_file(self, tmp_test_dir):
        """Test that a missing file is reported, not raised."""
        result = validate_config(tmp_test_dir / "missing.yaml", environ={})

        assert result.status == "invalid"
        assert "not found" in result.errors[0]

    def test_invalid_yaml(self, tmp_test_dir):
        """Test that YAML syntax errors are reported."""
        config_path = tmp_test_dir / "broken.yaml"
        config_path.write_text("feed: {url: [\n")

        result = validate_config(config_path, environ={})

        assert result.status == "invalid"
        assert "Error parsing YAML" in result.errors[0]

    def test_unsupported_api_version(self, create_yaml_file, sample_config_data):
        """Test that an unknown apiVersion is an error."""
        sample_config_data["apiVersion"] = "minossync/v9"
        config_path = create_yaml_file("config.yaml", sample_config_data)

        result = validate_config(config_path, environ={})

        assert result.status == "invalid"
        assert any("apiVersion" in e for e in result.errors)

    def test_unknown_feed_source(self, create_yaml_file, sample_config_data):
        """Test that an unknown feed source is an error."""
        sample_config_data["feed"]["source"] = "carrier_pigeon"
        config_path = create_yaml_file("config.yaml", sample_config_data)

        result = validate_config(config_path, environ={})

        assert result.status == "invalid"
        assert any("Unknown release feed source" in e for e in result.errors)

    def test_missing_feed_url(self, create_yaml_file, sample_config_data):
        """Test that http_json requires feed.url."""
        del sample_config_data["feed"]["url"]
        config_path = create_yaml_file("config.yaml", sample_config_data)

        result = validate_config(config_path, environ={})

        assert "Missing required field: feed.url" in result.errors

    def test_feed_url_from_environment(self, create_yaml_file, sample_config_data):
        """Test that MINOSSYNC_FEED_URL satisfies the url requirement."""
        del sample_config_data["feed"]["url"]
        config_path = create_yaml_file("config.yaml", sample_config_data)

        result = validate_config(
            config_path,
            environ={"MINOSSYNC_FEED_URL": "https://feeds.example.com/env.json"},
        )

        assert result.status == "valid"

    def test_missing_policy_id_is_warning(self, create_yaml_file, sample_config_data):
        """Test that a config without policy.id is valid but warned about."""
        del sample_config_data["policy"]["id"]
        config_path = create_yaml_file("config.yaml", sample_config_data)

        result = validate_config(config_path, environ={})

        assert result.status == "valid"
        assert any("policy.id" in w for w in result.warnings)

    def test_non_string_policy_id(self, create_yaml_file, sample_config_data):
        """Test that a numeric policy id is an error."""
        sample_config_data["policy"]["id"] = 12345
        config_path = create_yaml_file("config.yaml", sample_config_data)

        result = validate_config(config_path, environ={})

        assert "policy.id must be a string" in result.errors

    def test_unknown_platform(self, create_yaml_file, sample_config_data):
        """Test that an unsupported platform is an error."""
        sample_config_data["policy"]["platform"] = "windows"
        config_path = create_yaml_file("config.yaml", sample_config_data)

        result = validate_config(config_path, environ={})

        assert any("Unknown policy platform" in e for e in result.errors)

    def test_out_of_range_versions_below(self, create_yaml_file, sample_config_data):
        """Test that versions_below outside 1-10 is an error."""
        sample_config_data["selection"]["versions_below"] = 11
        config_path = create_yaml_file("config.yaml", sample_config_data)

        result = validate_config(config_path, environ={})

        assert result.status == "invalid"
        assert any("between 1 and 10" in e for e in result.errors)

    def test_selection_not_a_mapping(self, create_yaml_file, sample_config_data):
        """Test that a scalar selection section is an error."""
        sample_config_data["selection"] = "two below"
        config_path = create_yaml_file("config.yaml", sample_config_data)

        result = validate_config(config_path, environ={})

        assert "selection must be a dictionary" in result.errors

    def test_file_source_config(self, create_yaml_file):
        """Test a valid offline config using the file source."""
        config_path = create_yaml_file(
            "config.yaml",
            {
                "apiVersion": "minossync/v1",
                "feed": {"source": "file", "path": "feeds/macos.json"},
                "policy": {"id": "abc", "platform": "ios"},
            },
        )

        result = validate_config(config_path, environ={})

        assert result.status == "valid"

    def test_multiple_errors_collected(self, create_yaml_file, sample_config_data):
        """Test that all problems are reported at once."""
        sample_config_data["policy"]["platform"] = "windows"
        sample_config_data["selection"]["versions_below"] = 0
        sample_config_data["feed"]["url"] = "not-a-url"
        config_path = create_yaml_file("config.yaml", sample_config_data)

        result = validate_config(config_path, environ={})

        assert len(result.errors) == 3
