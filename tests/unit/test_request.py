"""
Unit tests for building requests from a WSGI environ.
"""

from assetserver.http.request import HTTPRequest

from conftest import make_environ


class TestFromEnviron:
    """Tests for HTTPRequest.from_environ."""

    def test_basic_fields(self):
        """Test method, path, version and client address."""
        environ = make_environ("/public/app.js", method="get", REMOTE_PORT="5555")
        request = HTTPRequest.from_environ(environ)

        assert request.method == "GET"
        assert request.path == "/public/app.js"
        assert request.version == "HTTP/1.1"
        assert request.client_address == ("127.0.0.1", 5555)

    def test_headers_lowercased(self):
        """Test HTTP_* keys become lowercase dashed header names."""
        environ = make_environ(
            "/",
            HTTP_IF_NONE_MATCH='"1"',
            HTTP_USER_AGENT="pytest",
            CONTENT_TYPE="text/plain",
        )
        request = HTTPRequest.from_environ(environ)

        assert request.headers["if-none-match"] == '"1"'
        assert request.headers["content-type"] == "text/plain"
        assert request.get_header("If-None-Match") == '"1"'
        assert request.user_agent == "pytest"

    def test_query_params(self):
        """Test query parameter parsing."""
        request = HTTPRequest.from_environ(make_environ("/", query="v=1&v=2&empty="))

        assert request.query_params["v"] == ["1", "2"]
        assert request.get_query("v") == "1"
        assert request.get_query("empty") == ""
        assert request.get_query("missing") is None
        assert request.get_query("missing", "default") == "default"

    def test_utf8_path(self):
        """Test non-ASCII paths survive the latin-1 round trip."""
        request = HTTPRequest.from_environ(make_environ("/public/café.css"))
        assert request.path == "/public/café.css"

    def test_empty_path(self):
        """Test a missing PATH_INFO means the root."""
        environ = make_environ()
        environ["PATH_INFO"] = ""
        assert HTTPRequest.from_environ(environ).path == "/"

    def test_bad_remote_port(self):
        """Test a junk REMOTE_PORT does not break parsing."""
        request = HTTPRequest.from_environ(make_environ("/", REMOTE_PORT="abc"))
        assert request.client_address == ("127.0.0.1", 0)


class TestRequestHelpers:
    """Tests for HTTPRequest helpers."""

    def test_is_head(self):
        """Test HEAD detection."""
        assert HTTPRequest(method="HEAD", path="/").is_head
        assert not HTTPRequest(method="GET", path="/").is_head

    def test_get_header_default(self):
        """Test missing headers return the default."""
        request = HTTPRequest(method="GET", path="/")
        assert request.get_header("If-Modified-Since") == ""
        assert request.get_header("X-Missing", "none") == "none"
