"""
Unit tests for version fragments in resource paths.
"""

import pytest

from assetserver.resources.versioning import (
    find_version,
    inject_version,
    is_versioned,
    remove_version,
)


class TestInjectVersion:
    """Tests for inject_version."""

    def test_before_extension(self):
        """Test the token goes right before the extension."""
        assert inject_version("app.js", 1699999999000) == "app-ver-1699999999000.js"

    def test_nested_path(self):
        """Test directories are left alone."""
        assert inject_version("css/site.css", 7) == "css/site-ver-7.css"

    def test_last_dot_wins(self):
        """Test multi-dot names get the token before the final extension."""
        assert inject_version("jquery.min.js", 5) == "jquery.min-ver-5.js"

    def test_no_extension_appends(self):
        """Test extension-less paths get the token appended."""
        assert inject_version("data", 42) == "data-ver-42"

    def test_zero_timestamp(self):
        """Test resources with unknown mtime still get a token."""
        assert inject_version("lib.js", 0) == "lib-ver-0.js"


class TestRemoveVersion:
    """Tests for remove_version."""

    @pytest.mark.parametrize("versioned,expected", [
        ("app-ver-1699999999000.js", "app.js"),
        ("css/site-ver-7.css", "css/site.css"),
        ("jquery.min-ver-5.js", "jquery.min.js"),
        ("data-ver-42", "data"),
    ])
    def test_strips_token(self, versioned, expected):
        """Test the token is removed and the rest is untouched."""
        assert remove_version(versioned) == expected

    @pytest.mark.parametrize("path", [
        "app.js",
        "css/site.css",
        "data",
        "server-version.js",   # "-ver" without digits
        "app-ver-.js",         # no digits
        "app-ver-12a.js",      # digits not followed by "." or end
    ])
    def test_unversioned_unchanged(self, path):
        """Test paths without a token come back unchanged."""
        assert remove_version(path) == path

    def test_removes_only_matched_span(self):
        """Test only the first token's span is removed."""
        path = "a-ver-1.b-ver-2.js"
        assert remove_version(path) == "a.b-ver-2.js"

    def test_round_trip(self):
        """Test remove_version undoes inject_version."""
        for path in ["app.js", "css/site.css", "data", "jquery.min.js"]:
            assert remove_version(inject_version(path, 1699999999000)) == path


class TestFindVersion:
    """Tests for find_version / is_versioned."""

    def test_span_excludes_dot(self):
        """Test the span stops before the extension dot."""
        assert find_version("app-ver-42.js") == (3, 10)

    def test_span_at_end(self):
        """Test extension-less tokens run to the end of the path."""
        assert find_version("data-ver-42") == (4, 11)

    def test_none_when_absent(self):
        """Test None for unversioned paths."""
        assert find_version("app.js") is None

    def test_is_versioned(self):
        """Test the boolean helper."""
        assert is_versioned("app-ver-1.js")
        assert not is_versioned("app.js")
