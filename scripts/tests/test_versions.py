"""Tests for versions.py — version ordering and range matching."""

import pytest

from initializr.versions import compare_versions, match_range, parse_version


class TestCompareVersions:
    def test_numeric_ordering(self):
        assert compare_versions("3.2.10", "3.2.9") == 1
        assert compare_versions("2.7.18", "3.0.0") == -1

    def test_equal(self):
        assert compare_versions("3.2.1", "3.2.1") == 0

    def test_legacy_release_equals_plain(self):
        assert compare_versions("2.7.0.RELEASE", "2.7.0") == 0

    def test_qualifier_order(self):
        assert compare_versions("3.3.0-M1", "3.3.0-M2") == -1
        assert compare_versions("3.3.0-M2", "3.3.0-RC1") == -1
        assert compare_versions("3.3.0-RC1", "3.3.0-SNAPSHOT") == -1
        assert compare_versions("3.3.0-SNAPSHOT", "3.3.0") == -1
        assert compare_versions("2.4.0-BUILD-SNAPSHOT", "2.4.0") == -1

    def test_invalid_version(self):
        with pytest.raises(ValueError):
            parse_version("latest")


class TestMatchRange:
    def test_no_range(self):
        assert match_range("3.2.1", None)

    def test_lower_bound_only(self):
        assert match_range("3.2.1", "3.0.0")
        assert not match_range("2.7.18", "3.0.0")

    def test_inclusive_and_exclusive_bounds(self):
        assert match_range("3.0.0", "[3.0.0,3.3.0-M1)")
        assert match_range("3.2.1", "[3.0.0,3.3.0-M1)")
        assert not match_range("3.3.0-M1", "[3.0.0,3.3.0-M1)")
        assert not match_range("3.0.0", "(3.0.0,3.3.0]")
        assert match_range("3.3.0", "(3.0.0,3.3.0]")

    def test_open_upper_bound(self):
        assert match_range("4.0.0", "[3.0.0,)")
