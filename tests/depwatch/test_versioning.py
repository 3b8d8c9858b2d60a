"""Tests for declared-vs-latest version comparison."""

from __future__ import annotations

import pytest

from depwatch.engines.dependency_resolver.versioning import base_release, is_outdated


class TestBaseRelease:
    @pytest.mark.parametrize(
        "spec, expected",
        [
            ("1.0.0", ((1, 0, 0), False)),
            ("^1.2.3", ((1, 2, 3), False)),
            ("~6.4", ((6, 4), False)),
            (">=2.1 <3", ((2, 1), False)),
            ("v7.1.0", ((7, 1, 0), False)),
            ("6.4.*", ((6, 4), True)),
            ("1.x", ((1,), True)),
            ("^1.0.0-beta.2", ((1, 0, 0), False)),
            ("^5.4|^6.0", ((5, 4), False)),
            ("^5.4 || ^6.0", ((5, 4), False)),
        ],
    )
    def test_parse(self, spec, expected):
        assert base_release(spec) == expected

    @pytest.mark.parametrize("spec", ["*", "latest", "dev-main", "", "next"])
    def test_no_numeric_base(self, spec):
        assert base_release(spec) is None


class TestIsOutdated:
    def test_pinned_older(self):
        assert is_outdated("1.0.0", "2.0.0")

    def test_pinned_equal(self):
        assert not is_outdated("2.0.0", "2.0.0")

    def test_caret_range_equal_base(self):
        assert not is_outdated("^2.0.0", "2.0.0")

    def test_caret_range_satisfied_still_reported(self):
        # Range satisfaction is not evaluated: the base release is compared.
        assert is_outdated("^1.0.0", "1.5.0")

    def test_missing_components_padded(self):
        assert not is_outdated("1.0", "1.0.0")
        assert not is_outdated("^6.4", "v6.4.0")

    def test_wildcard_pins_prefix_only(self):
        assert not is_outdated("6.4.*", "6.4.9")
        assert not is_outdated("1.x", "1.5.0")
        assert is_outdated("6.4.*", "7.0.0")

    def test_declared_newer_than_latest(self):
        assert is_outdated("3.0.0", "2.9.0")

    def test_unversioned_declaration_never_outdated(self):
        assert not is_outdated("*", "9.9.9")
        assert not is_outdated("dev-main", "1.0.0")

    def test_unversioned_latest_never_outdated(self):
        assert not is_outdated("1.0.0", "unknown")
