"""
=============================================================================
RESOURCE LOCATIONS AND RESOLVERS
=============================================================================

A resolver turns a logical resource path ("css/site.css") into a
ResourceLocation: something we can ask for a last-modified timestamp and
open as a byte stream. The handler never knows which store it talks to.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    RESOLVERS                                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   DirectoryResolver("./public")                                     │
    │       css/site.css → ./public/css/site.css                          │
    │                                                                      │
    │   PackageResolver("myapp", base="public")                           │
    │       css/site.css → <myapp package>/public/css/site.css            │
    │                                                                      │
    │   WebjarsResolver("myapp.vendor")                                   │
    │       jquery/jquery.min.js                                          │
    │         → <myapp.vendor>/webjars/jquery/3.7.1/jquery.min.js         │
    │                                                                      │
    │   Not found → None (the handler answers 404)                        │
    │   Store failure → ResourceError (the application answers 500)       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Resolvers are plain classes satisfying the ResourceResolver protocol; a
test can pass any object with a resolve() method.

=============================================================================
SECURITY
=============================================================================

Paths containing ".." segments never resolve, and DirectoryResolver
re-checks that the final, symlink-resolved path is still inside its root:

    full_path = (root / user_input).resolve()
    full_path.relative_to(root)  # Raises if outside root!

=============================================================================
"""

import errno
import logging
import stat
from dataclasses import dataclass, field
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any, BinaryIO, Callable, List, Optional, Protocol, Tuple, Union


logger = logging.getLogger(__name__)


class ResourceError(Exception):
    """
    A resource could not be looked up or read.

    Raised when the store fails while resolving a path, or when a
    metadata read or stream open fails. Carries the location when one
    was resolved, and maps to a 500 response.
    The underlying exception is chained as __cause__.
    """

    status_code = 500

    def __init__(self, message: str, location: Optional["ResourceLocation"] = None):
        super().__init__(message)
        self.location = location


@dataclass(frozen=True)
class ResourceLocation:
    """
    Resolved handle to the bytes behind a resource path.

    Attributes:
        uri:      Identity of the resource (file URI or package URI).
                  Used in logs and error messages.
        filename: Base name, used for MIME lookup and downloads.
        opener:   Returns a new binary stream.
        modified: Returns the last-modified time in milliseconds,
                  0 when the store cannot tell.

    A location is owned by one request and not cached.
    """

    uri: str
    filename: str
    opener: Callable[[], BinaryIO] = field(repr=False, compare=False)
    modified: Callable[[], int] = field(repr=False, compare=False)

    @classmethod
    def for_path(cls, path: Path) -> "ResourceLocation":
        """Location backed by a filesystem path."""
        return cls(
            uri=path.as_uri(),
            filename=path.name,
            opener=lambda: path.open("rb"),
            modified=lambda: path.stat().st_mtime_ns // 1_000_000,
        )

    def last_modified(self) -> int:
        """
        Last-modified timestamp in milliseconds since epoch.

        Raises:
            ResourceError: if the store fails to report it.
        """
        try:
            return int(self.modified())
        except OSError as e:
            raise ResourceError(
                f"Failed to read last modified property for {self.uri}", self
            ) from e

    def open(self) -> BinaryIO:
        """
        Open the resource for reading. The caller owns the stream.

        Raises:
            ResourceError: if the stream cannot be opened.
        """
        try:
            return self.opener()
        except OSError as e:
            raise ResourceError(f"Failed to open resource {self.uri}", self) from e


class ResourceResolver(Protocol):
    """Anything that maps a resource path to a location, or None."""

    def resolve(self, path: str) -> Optional[ResourceLocation]:
        ...


# =============================================================================
# PATH HELPERS
# =============================================================================

def split_resource_path(path: str) -> Optional[List[str]]:
    """
    Split a resource path into safe segments.

    Empty and "." segments are dropped. Returns None if any segment is
    ".." or contains a backslash or NUL, i.e. the path tries to leave
    the store it is resolved against.

    Examples:
        >>> split_resource_path("/css//site.css")
        ['css', 'site.css']
        >>> split_resource_path("../secret") is None
        True
    """
    parts = []
    for part in path.split("/"):
        if part in ("", "."):
            continue
        if part == ".." or "\\" in part or "\x00" in part:
            return None
        parts.append(part)
    return parts


def _traversable_location(node: Any, uri: str) -> ResourceLocation:
    # Regular installs give a pathlib.Path; zipped ones do not expose mtime
    if isinstance(node, Path):
        return ResourceLocation.for_path(node)
    return ResourceLocation(
        uri=uri,
        filename=node.name,
        opener=lambda: node.open("rb"),
        modified=lambda: 0,
    )


# Errors that mean "no such resource" rather than a failing store
_MISSING_ERRNOS = (errno.ENOENT, errno.ENOTDIR, errno.ENAMETOOLONG)


def _is_regular_file(path: Path) -> bool:
    """
    True if path is a regular file, False if nothing usable is there.

    Any other OSError (permissions, I/O, symlink loops) propagates.
    """
    try:
        mode = path.stat().st_mode
    except OSError as e:
        if e.errno in _MISSING_ERRNOS:
            return False
        raise
    return stat.S_ISREG(mode)


def _is_file(node: Any) -> bool:
    if isinstance(node, Path):
        return _is_regular_file(node)
    return node.is_file()


# =============================================================================
# RESOLVERS
# =============================================================================

class DirectoryResolver:
    """
    Resolves resources against a filesystem directory.

    Args:
        root: Directory to serve from. Must exist.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()
        if not self.root.is_dir():
            raise ValueError(f"Resource directory does not exist: {root}")

    def resolve(self, path: str) -> Optional[ResourceLocation]:
        parts = split_resource_path(path)
        if not parts:
            return None

        try:
            full_path = self.root.joinpath(*parts).resolve()
            try:
                full_path.relative_to(self.root)
            except ValueError:
                # Symlink pointing outside the root
                logger.warning(f"Path escapes resource root: {path}")
                return None

            if not _is_regular_file(full_path):
                return None
        except (OSError, RuntimeError) as e:
            # RuntimeError: symlink loop, before Python 3.13
            raise ResourceError(f"Failed to resolve resource {path} in {self.root}") from e

        return ResourceLocation.for_path(full_path)

    def __repr__(self) -> str:
        return f"DirectoryResolver({str(self.root)!r})"


class PackageResolver:
    """
    Resolves resources bundled inside an importable package.

    The Python counterpart of serving from the classpath: assets ship as
    package data and are found through importlib.resources, wherever the
    package is installed.

    Args:
        package: Dotted package name, e.g. "myapp".
        base: Directory inside the package, e.g. "public".
    """

    def __init__(self, package: str, base: str = "public"):
        self.package = package
        self.base = base.strip("/")

    def root(self) -> Any:
        root = importlib_resources.files(self.package)
        if self.base:
            root = root.joinpath(*self.base.split("/"))
        return root

    def _uri(self, parts: List[str]) -> str:
        return f"package://{self.package}/" + "/".join([self.base, *parts]).lstrip("/")

    def resolve(self, path: str) -> Optional[ResourceLocation]:
        parts = split_resource_path(path)
        if not parts:
            return None

        uri = self._uri(parts)
        node = self.root().joinpath(*parts)
        try:
            if not _is_file(node):
                return None
        except OSError as e:
            raise ResourceError(f"Failed to resolve resource {uri}") from e
        return _traversable_location(node, uri)

    def __repr__(self) -> str:
        return f"PackageResolver({self.package!r}, base={self.base!r})"


class WebjarsResolver:
    """
    Resolves third-party web libraries bundled as package data.

    Layout inside the package:

        webjars/
        └── jquery/
            └── 3.7.1/
                └── jquery.min.js

    Both "jquery/3.7.1/jquery.min.js" and the version-agnostic
    "jquery/jquery.min.js" resolve. Without a version, the newest
    installed version directory of the library is used, so templates
    don't need touching when a library is upgraded.
    """

    def __init__(self, package: str, base: str = "webjars"):
        self._bundle = PackageResolver(package, base)

    @property
    def package(self) -> str:
        return self._bundle.package

    @property
    def base(self) -> str:
        return self._bundle.base

    def resolve(self, path: str) -> Optional[ResourceLocation]:
        location = self._bundle.resolve(path)
        if location is not None:
            return location

        parts = split_resource_path(path)
        if not parts or len(parts) < 2:
            return None

        library, rest = parts[0], parts[1:]
        for version in self.versions(library):
            location = self._bundle.resolve("/".join([library, version, *rest]))
            if location is not None:
                logger.debug(f"Resolved webjar {path} to version {version}")
                return location
        return None

    def versions(self, library: str) -> List[str]:
        """
        Installed versions of a library, newest first.

        Raises:
            ResourceError: the bundle could not be listed.
        """
        library_dir = self._bundle.root().joinpath(library)
        try:
            if not library_dir.is_dir():
                return []
            names = [child.name for child in library_dir.iterdir() if child.is_dir()]
        except OSError as e:
            raise ResourceError(
                f"Failed to list versions of {library} in package://{self.package}/{self.base}"
            ) from e
        return sorted(names, key=_version_key, reverse=True)

    def __repr__(self) -> str:
        return f"WebjarsResolver({self.package!r}, base={self.base!r})"


def _version_key(version: str) -> Tuple:
    """Sort key for "3.10.2"-style versions; non-numeric parts sort as text."""
    key = []
    for piece in version.replace("-", ".").split("."):
        key.append((0, int(piece), "") if piece.isdigit() else (1, 0, piece))
    return tuple(key)
