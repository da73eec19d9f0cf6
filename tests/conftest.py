"""
pytest configuration and fixtures.
"""

import errno
import io
import os
from typing import Callable, Dict, Generator, List, Optional

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from assetserver.http import HTTPRequest, HttpCacheToolkit
from assetserver.handlers import ResourceHandler, RouteContext
from assetserver.resources import ResourceError, ResourceLocation


# Tue, 14 Nov 2023 22:13:19 GMT
MTIME_MS = 1699999999000


class TrackingStream(io.BytesIO):
    """BytesIO that remembers whether it was closed."""

    def __init__(self, data: bytes):
        super().__init__(data)
        self.was_closed = False

    def close(self):
        self.was_closed = True
        super().close()


class InMemoryResolver:
    """
    Resolver fake backed by a dict.

    Records every stream it opens so tests can check that 304 responses
    never open one and that every opened stream gets closed.
    """

    def __init__(self, files: Optional[Dict[str, bytes]] = None, modified: int = MTIME_MS):
        self.files = dict(files or {})
        self.modified = modified
        self.opened: List[TrackingStream] = []
        self.resolved: List[str] = []
        self.fail_resolve = False
        self.fail_metadata = False
        self.fail_open = False

    def resolve(self, path: str) -> Optional[ResourceLocation]:
        self.resolved.append(path)
        if self.fail_resolve:
            raise ResourceError(f"Failed to resolve resource {path}") from OSError(errno.EIO, "I/O error")
        if path not in self.files:
            return None
        return ResourceLocation(
            uri=f"memory:///{path}",
            filename=path.rsplit("/", 1)[-1],
            opener=self._opener(path),
            modified=self._modified,
        )

    def _opener(self, path: str) -> Callable[[], TrackingStream]:
        def opener():
            if self.fail_open:
                raise PermissionError(f"Permission denied: {path}")
            stream = TrackingStream(self.files[path])
            self.opened.append(stream)
            return stream
        return opener

    def _modified(self) -> int:
        if self.fail_metadata:
            raise OSError("I/O error reading metadata")
        return self.modified

    def __repr__(self) -> str:
        return "InMemoryResolver()"


def make_request(
    path: str = "/",
    method: str = "GET",
    headers: Optional[Dict[str, str]] = None,
    path_params: Optional[Dict[str, str]] = None,
) -> HTTPRequest:
    """Build a request with lowercase header names, as from_environ does."""
    return HTTPRequest(
        method=method,
        path=path,
        headers={k.lower(): v for k, v in (headers or {}).items()},
        path_params=dict(path_params or {}),
        client_address=("127.0.0.1", 54321),
    )


def make_environ(path: str = "/", method: str = "GET", query: str = "", **headers) -> dict:
    """
    Minimal WSGI environ. Keyword headers use environ spelling:
    make_environ("/x", HTTP_IF_NONE_MATCH='"1"').
    """
    environ = {
        "REQUEST_METHOD": method,
        "PATH_INFO": path.encode("utf-8").decode("latin-1"),
        "QUERY_STRING": query,
        "SERVER_PROTOCOL": "HTTP/1.1",
        "REMOTE_ADDR": "127.0.0.1",
        "wsgi.input": io.BytesIO(b""),
    }
    environ.update(headers)
    return environ


class StartResponse:
    """Captures what a WSGI app passes to start_response."""

    def __init__(self):
        self.status: Optional[str] = None
        self.headers: List = []

    def __call__(self, status, headers, exc_info=None):
        self.status = status
        self.headers = headers

    def header(self, name: str) -> Optional[str]:
        for key, value in self.headers:
            if key.lower() == name.lower():
                return value
        return None


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def memory_resolver() -> InMemoryResolver:
    """Resolver with a script, a stylesheet, an extension-less file and a binary blob."""
    return InMemoryResolver({
        "app.js": b"console.log('hi');",
        "css/site.css": b"body { color: red; }",
        "data": b"raw data",
        "archive.bin": b"\x00\x01\x02",
    })


@pytest.fixture
def handler(memory_resolver: InMemoryResolver) -> ResourceHandler:
    """Handler mounted at /public over the in-memory resolver."""
    return ResourceHandler("/public", memory_resolver, cache_toolkit=HttpCacheToolkit(max_age=60))


@pytest.fixture
def context_for() -> Callable[..., RouteContext]:
    """Factory: context_for("/public/app.js", headers={...})."""
    def factory(path: str, method: str = "GET", headers: Optional[Dict[str, str]] = None) -> RouteContext:
        return RouteContext(make_request(path, method=method, headers=headers))
    return factory


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    """
    A public directory on disk:

        public/
        ├── app.js
        ├── css/site.css
        ├── data
        └── archive.bin

    Every file's mtime is MTIME_MS.
    """
    root = tmp_path / "public"
    files = {
        "app.js": b"console.log('hi');",
        "css/site.css": b"body { color: red; }",
        "data": b"raw data",
        "archive.bin": b"\x00\x01\x02",
    }
    for name, content in files.items():
        target = root / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        os.utime(target, ns=(MTIME_MS * 1_000_000, MTIME_MS * 1_000_000))
    return root


@pytest.fixture
def resource_package(tmp_path: Path, monkeypatch) -> Generator[str, None, None]:
    """
    An importable package with bundled resources:

        fakeassets/
        ├── __init__.py
        ├── public/js/lib.js
        └── webjars/
            └── jquery/
                ├── 3.6.0/jquery.min.js
                ├── 3.10.1/jquery.min.js
                └── 3.10.1/README   (only in the newest)
    """
    package = tmp_path / "pkgroot" / "fakeassets"
    files = {
        "__init__.py": b"",
        "public/js/lib.js": b"export default 1;",
        "webjars/jquery/3.6.0/jquery.min.js": b"/* jquery 3.6.0 */",
        "webjars/jquery/3.10.1/jquery.min.js": b"/* jquery 3.10.1 */",
        "webjars/jquery/3.10.1/README": b"readme",
    }
    for name, content in files.items():
        target = package / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)

    monkeypatch.syspath_prepend(str(tmp_path / "pkgroot"))
    yield "fakeassets"
    sys.modules.pop("fakeassets", None)
