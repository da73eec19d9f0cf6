"""
Unit tests for resource locations and resolvers.
"""

import errno
import os

import pytest

from assetserver.resources.location import (
    DirectoryResolver,
    PackageResolver,
    ResourceError,
    ResourceLocation,
    WebjarsResolver,
    split_resource_path,
)

from conftest import MTIME_MS


class BrokenNode:
    """Package traversable whose storage fails on every lookup."""

    name = "broken"

    def joinpath(self, *parts):
        return self

    def is_file(self):
        raise OSError(errno.EIO, "I/O error")

    def is_dir(self):
        return True

    def iterdir(self):
        raise OSError(errno.EIO, "I/O error")


class TestSplitResourcePath:
    """Tests for split_resource_path."""

    def test_normalizes_separators(self):
        """Test empty and "." segments are dropped."""
        assert split_resource_path("/css//./site.css") == ["css", "site.css"]

    def test_empty(self):
        """Test the empty path has no segments."""
        assert split_resource_path("") == []

    @pytest.mark.parametrize("path", [
        "../secret",
        "css/../../secret",
        "..\\secret",
        "a\x00b",
    ])
    def test_rejects_escapes(self, path):
        """Test traversal attempts give None."""
        assert split_resource_path(path) is None


class TestResourceLocation:
    """Tests for ResourceLocation."""

    def test_for_path(self, public_dir):
        """Test a filesystem location reports name, mtime and content."""
        location = ResourceLocation.for_path(public_dir / "app.js")

        assert location.filename == "app.js"
        assert location.uri.startswith("file://")
        assert location.last_modified() == MTIME_MS
        with location.open() as stream:
            assert stream.read() == b"console.log('hi');"

    def test_vanished_file(self, public_dir):
        """Test a file deleted after resolving raises ResourceError."""
        target = public_dir / "app.js"
        location = ResourceLocation.for_path(target)
        target.unlink()

        with pytest.raises(ResourceError) as exc_info:
            location.last_modified()
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

        with pytest.raises(ResourceError):
            location.open()


class TestDirectoryResolver:
    """Tests for DirectoryResolver."""

    def test_resolve(self, public_dir):
        """Test existing files resolve."""
        resolver = DirectoryResolver(public_dir)
        location = resolver.resolve("css/site.css")

        assert location is not None
        assert location.filename == "site.css"

    @pytest.mark.parametrize("path", ["missing.js", "css", "", "../public/app.js"])
    def test_unresolvable(self, public_dir, path):
        """Test missing files, directories and escapes give None."""
        assert DirectoryResolver(public_dir).resolve(path) is None

    def test_symlink_outside_root(self, public_dir, tmp_path):
        """Test symlinks leaving the root are not followed."""
        secret = tmp_path / "secret.txt"
        secret.write_text("secret")
        link = public_dir / "leak.txt"
        try:
            os.symlink(secret, link)
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported")

        assert DirectoryResolver(public_dir).resolve("leak.txt") is None

    def test_missing_root(self, tmp_path):
        """Test a missing directory is rejected up front."""
        with pytest.raises(ValueError):
            DirectoryResolver(tmp_path / "nope")

    def test_overlong_name_is_missing(self, public_dir):
        """Test a name too long for the filesystem resolves to None."""
        assert DirectoryResolver(public_dir).resolve("a" * 300 + ".js") is None

    def test_symlink_loop(self, public_dir):
        """Test a symlink loop fails resolution with the cause chained."""
        try:
            os.symlink(public_dir / "loop2", public_dir / "loop1")
            os.symlink(public_dir / "loop1", public_dir / "loop2")
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported")

        with pytest.raises(ResourceError) as exc_info:
            DirectoryResolver(public_dir).resolve("loop1/x.js")
        assert isinstance(exc_info.value.__cause__, (OSError, RuntimeError))

    def test_storage_failure(self, public_dir, monkeypatch):
        """Test stat errors other than "missing" are not reported as not found."""
        def failing_stat(self, *args, **kwargs):
            raise PermissionError(errno.EACCES, "Permission denied", str(self))

        resolver = DirectoryResolver(public_dir)
        monkeypatch.setattr(type(public_dir), "stat", failing_stat)

        with pytest.raises(ResourceError) as exc_info:
            resolver.resolve("app.js")
        assert isinstance(exc_info.value.__cause__, PermissionError)


class TestPackageResolver:
    """Tests for PackageResolver."""

    def test_resolve(self, resource_package):
        """Test package data resolves under the base directory."""
        location = PackageResolver(resource_package).resolve("js/lib.js")

        assert location is not None
        assert location.filename == "lib.js"
        with location.open() as stream:
            assert stream.read() == b"export default 1;"

    def test_missing(self, resource_package):
        """Test missing package data gives None."""
        resolver = PackageResolver(resource_package)
        assert resolver.resolve("js/missing.js") is None
        assert resolver.resolve("js") is None
        assert resolver.resolve("../__init__.py") is None

    def test_custom_base(self, resource_package):
        """Test a different base directory."""
        resolver = PackageResolver(resource_package, base="webjars")
        assert resolver.resolve("jquery/3.6.0/jquery.min.js") is not None

    def test_storage_failure(self, resource_package, monkeypatch):
        """Test a failing package store raises ResourceError instead of giving None."""
        resolver = PackageResolver(resource_package)
        monkeypatch.setattr(resolver, "root", lambda: BrokenNode())

        with pytest.raises(ResourceError) as exc_info:
            resolver.resolve("js/lib.js")
        assert isinstance(exc_info.value.__cause__, OSError)
        assert "package://fakeassets/public/js/lib.js" in str(exc_info.value)


class TestWebjarsResolver:
    """Tests for WebjarsResolver."""

    def test_versions_newest_first(self, resource_package):
        """Test versions sort numerically, newest first."""
        assert WebjarsResolver(resource_package).versions("jquery") == ["3.10.1", "3.6.0"]

    def test_versions_unknown_library(self, resource_package):
        """Test unknown libraries have no versions."""
        assert WebjarsResolver(resource_package).versions("react") == []

    def test_explicit_version(self, resource_package):
        """Test a versioned path resolves exactly."""
        location = WebjarsResolver(resource_package).resolve("jquery/3.6.0/jquery.min.js")
        with location.open() as stream:
            assert stream.read() == b"/* jquery 3.6.0 */"

    def test_version_agnostic(self, resource_package):
        """Test a path without version gets the newest one."""
        location = WebjarsResolver(resource_package).resolve("jquery/jquery.min.js")
        with location.open() as stream:
            assert stream.read() == b"/* jquery 3.10.1 */"

    def test_version_agnostic_missing(self, resource_package):
        """Test files in no version directory give None."""
        resolver = WebjarsResolver(resource_package)
        assert resolver.resolve("jquery/jquery.js") is None
        assert resolver.resolve("jquery") is None

    def test_listing_failure(self, resource_package, monkeypatch):
        """Test a bundle that cannot be listed raises instead of finding nothing."""
        resolver = WebjarsResolver(resource_package)
        monkeypatch.setattr(resolver._bundle, "root", lambda: BrokenNode())

        with pytest.raises(ResourceError) as exc_info:
            resolver.versions("jquery")
        assert isinstance(exc_info.value.__cause__, OSError)
