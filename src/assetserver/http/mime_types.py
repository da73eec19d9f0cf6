"""
=============================================================================
MIME TYPE RESOLUTION
=============================================================================

Maps resource filenames to Content-Type values.

A resource handler needs two answers from this module:

    ┌────────────────────────────────────────────────────────────────────┐
    │  content_type_for("app.js")   → "text/javascript; charset=utf-8"   │
    │  content_type_for("blob.xyz") → None                               │
    └────────────────────────────────────────────────────────────────────┘

A known type means the resource is streamed inline. An unknown type
(None) means the handler falls back to a file download, and the download
path picks application/octet-stream via get_content_type().

=============================================================================
"""

from pathlib import PurePosixPath
from typing import Dict, Optional, Union


# =============================================================================
# MIME TYPE DATABASE
# =============================================================================
#
# Maps file extensions (lowercase, with dot) to MIME types.
# Covers what typically lives under /public and /webjars.
#
# =============================================================================

MIME_TYPES = {
    # -------------------------------------------------------------------------
    # TEXT TYPES
    # -------------------------------------------------------------------------
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",      # Modern standard (was application/javascript)
    ".mjs": "text/javascript",     # ES modules
    ".json": "application/json",
    ".map": "application/json",    # Source maps
    ".xml": "application/xml",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",

    # -------------------------------------------------------------------------
    # IMAGE TYPES
    # -------------------------------------------------------------------------
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",       # SVG is XML, hence +xml
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".bmp": "image/bmp",

    # -------------------------------------------------------------------------
    # FONT TYPES
    # -------------------------------------------------------------------------
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".eot": "application/vnd.ms-fontobject",

    # -------------------------------------------------------------------------
    # MEDIA TYPES
    # -------------------------------------------------------------------------
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".mp4": "video/mp4",
    ".webm": "video/webm",

    # -------------------------------------------------------------------------
    # DOCUMENTS / ARCHIVES / OTHER
    # -------------------------------------------------------------------------
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".gz": "application/gzip",
    ".wasm": "application/wasm",
}

# Default MIME type for downloads of unknown files
DEFAULT_MIME_TYPE = "application/octet-stream"

# application/* types that are really text and get a charset
_TEXT_APPLICATION_TYPES = {
    "application/json",
    "application/xml",
    "application/javascript",
    "image/svg+xml",
}

PathLike = Union[str, PurePosixPath]


def _extension(filename: PathLike) -> str:
    return PurePosixPath(str(filename)).suffix.lower()  # .PNG → .png


def _normalize_extension(extension: str) -> str:
    """Lowercase extension with a leading dot: css, .css and .CSS give .css"""
    if not extension.startswith("."):
        extension = "." + extension
    return extension.lower()


def is_text_type(mime_type: str) -> bool:
    """
    Check if a MIME type represents text content.

    Examples:
        >>> is_text_type("text/css")
        True
        >>> is_text_type("application/json")
        True
        >>> is_text_type("image/png")
        False
    """
    return mime_type.startswith("text/") or mime_type in _TEXT_APPLICATION_TYPES


class MimeTypes:
    """
    Extension → MIME type registry.

    Handlers receive an instance so applications can add their own
    mappings without touching the module-level table:

        mime_types = MimeTypes()
        mime_types.register(".webmanifest", "application/manifest+json")
        handler = file_resources("./public", mime_types=mime_types)
    """

    def __init__(self, mapping: Optional[Dict[str, str]] = None, charset: str = "utf-8"):
        self._types: Dict[str, str] = dict(MIME_TYPES)
        if mapping:
            for extension, mime_type in mapping.items():
                self.register(extension, mime_type)
        self.charset = charset

    def register(self, extension: str, mime_type: str) -> "MimeTypes":
        """
        Add or override a mapping.

        Args:
            extension: Extension with or without the leading dot.
            mime_type: MIME type without parameters.

        Returns:
            Self for method chaining
        """
        self._types[_normalize_extension(extension)] = mime_type
        return self

    def get_mime_type(self, filename: PathLike) -> Optional[str]:
        """Bare MIME type for a filename, or None when the extension is unknown."""
        return self._types.get(_extension(filename))

    def content_type_for(self, filename: PathLike) -> Optional[str]:
        """
        Content-Type header value for a filename.

        Text types carry the charset parameter. Returns None when the
        extension is unknown or missing; callers decide the fallback.

        Examples:
            >>> MimeTypes().content_type_for("site.css")
            'text/css; charset=utf-8'
            >>> MimeTypes().content_type_for("logo.png")
            'image/png'
            >>> MimeTypes().content_type_for("LICENSE") is None
            True
        """
        mime_type = self.get_mime_type(filename)
        if mime_type is None:
            return None
        if is_text_type(mime_type):
            return f"{mime_type}; charset={self.charset}"
        return mime_type

    def __contains__(self, extension: str) -> bool:
        return _normalize_extension(extension) in self._types


_default = MimeTypes()


def content_type_for(filename: PathLike) -> Optional[str]:
    """Content-Type from the default registry, None when unknown."""
    return _default.content_type_for(filename)


def get_mime_type(filename: PathLike, default: Optional[str] = None) -> str:
    """
    Get the MIME type for a file based on its extension.

    Args:
        filename: File path or name with extension
        default: MIME type to use when the extension is unknown.
                 application/octet-stream if not specified.

    Examples:
        >>> get_mime_type("style.css")
        'text/css'
        >>> get_mime_type("unknown.xyz")
        'application/octet-stream'
    """
    return _default.get_mime_type(filename) or default or DEFAULT_MIME_TYPE


def get_content_type(filename: PathLike) -> str:
    """
    Content-Type header value for a file, never empty.

    Used for download responses where some type must be sent.
    """
    return _default.content_type_for(filename) or DEFAULT_MIME_TYPE
