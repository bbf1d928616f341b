"""
Tests for minossync.versioning.keys module.

Tests release records and version parsing including:
- Feed entry conversion
- Pre-release marker detection
- major.minor[.patch] parsing with suffixes
- ParsedVersion display and ordering keys
"""

from __future__ import annotations

from minossync.versioning.keys import (
    ParsedVersion,
    ReleaseRecord,
    parse_version,
    parsed_from_record,
)


class TestParseVersion:
    """Tests for parse_version."""

    def test_three_part_version(self):
        """Test parsing a full major.minor.patch version."""
        assert parse_version("14.7.1") == (14, 7, 1)

    def test_two_part_version_defaults_patch_to_zero(self):
        """Test that a missing patch becomes 0."""
        assert parse_version("15.1") == (15, 1, 0)

    def test_trailing_text_is_ignored(self):
        """Test that text after the version does not prevent parsing."""
        assert parse_version("14.7.1 (23H222)") == (14, 7, 1)
        assert parse_version("15.2 RC") == (15, 2, 0)

    def test_four_part_version_uses_first_three(self):
        """Test that only the leading three components are parsed."""
        assert parse_version("13.6.9.1") == (13, 6, 9)

    def test_malformed_versions_return_none(self):
        """Test that text without major.minor is rejected."""
        assert parse_version("Sequoia") is None
        assert parse_version("15") is None
        assert parse_version("") is None
        assert parse_version("v15.1") is None

    def test_multi_digit_components(self):
        """Test that components are compared as integers, not text."""
        assert parse_version("10.15.7") == (10, 15, 7)


class TestReleaseRecord:
    """Tests for ReleaseRecord.from_feed_entry and markers."""

    def test_from_feed_entry_reads_all_fields(self):
        """Test that every known feed key is mapped."""
        record = ReleaseRecord.from_feed_entry(
            {
                "version": "15.1",
                "build": "24B83",
                "released": True,
                "beta": False,
                "rc": False,
                "releaseDate": "2024-10-28",
            }
        )

        assert record.version == "15.1"
        assert record.build == "24B83"
        assert record.released is True
        assert record.beta is False
        assert record.rc is False
        assert record.release_date == "2024-10-28"

    def test_missing_flags_default_to_false(self):
        """Test that an entry without 'released' is not treated as released."""
        record = ReleaseRecord.from_feed_entry({"version": "15.1"})

        assert record.released is False
        assert record.beta is False
        assert record.rc is False
        assert record.build == ""

    def test_missing_release_date_is_unknown(self):
        """Test that absent release dates are reported as 'Unknown'."""
        record = ReleaseRecord.from_feed_entry({"version": "15.1", "released": True})
        assert record.release_date == "Unknown"

    def test_string_flags_are_coerced(self):
        """Test that string booleans from loosely typed feeds are understood."""
        record = ReleaseRecord.from_feed_entry(
            {"version": "15.1", "released": "true", "beta": "false"}
        )
        assert record.released is True
        assert record.beta is False

    def test_version_is_stripped(self):
        """Test that surrounding whitespace is removed from the version."""
        record = ReleaseRecord.from_feed_entry({"version": "  14.7.1 "})
        assert record.version == "14.7.1"

    def test_missing_version_becomes_empty_string(self):
        """Test that a missing version does not raise."""
        record = ReleaseRecord.from_feed_entry({"released": True})
        assert record.version == ""

    def test_flag_markers(self):
        """Test that beta and rc flags are reported as markers."""
        record = ReleaseRecord(version="15.2", released=True, beta=True, rc=True)
        assert record.prerelease_markers == ("beta", "rc")

    def test_markers_in_version_text_are_case_insensitive(self):
        """Test that markers embedded in the version text are detected."""
        assert ReleaseRecord(version="15.2 RC").prerelease_markers == ("rc",)
        assert ReleaseRecord(version="15.2 Beta 3").prerelease_markers == ("beta",)
        assert ReleaseRecord(version="26.0 Developer Preview").prerelease_markers == (
            "preview",
        )
        assert ReleaseRecord(version="10.15 Seed").prerelease_markers == ("seed",)

    def test_marker_not_duplicated(self):
        """Test that a flag and the same text marker count once."""
        record = ReleaseRecord(version="15.2 beta", beta=True)
        assert record.prerelease_markers == ("beta",)

    def test_plain_version_has_no_markers(self):
        """Test that a stable version has no markers."""
        assert ReleaseRecord(version="14.7.1", released=True).prerelease_markers == ()


class TestParsedVersion:
    """Tests for ParsedVersion and parsed_from_record."""

    def test_full_version_always_has_three_parts(self):
        """Test that full_version includes the patch even when it is 0."""
        assert ParsedVersion(major=15, minor=1).full_version == "15.1.0"
        assert ParsedVersion(major=14, minor=7, patch=1).full_version == "14.7.1"

    def test_key_orders_numerically(self):
        """Test that keys compare numerically across digit counts."""
        older = ParsedVersion(major=10, minor=9, patch=0)
        newer = ParsedVersion(major=10, minor=15, patch=0)
        assert newer.key > older.key

    def test_parsed_from_record_carries_metadata(self):
        """Test that build and release date survive parsing."""
        record = ReleaseRecord(
            version="14.7.1", build="23H222", released=True, release_date="2024-10-28"
        )

        parsed = parsed_from_record(record)

        assert parsed == ParsedVersion(
            major=14, minor=7, patch=1, build="23H222", release_date="2024-10-28"
        )

    def test_parsed_from_malformed_record_is_none(self):
        """Test that malformed versions yield None."""
        assert parsed_from_record(ReleaseRecord(version="Sonoma")) is None
