"""
=============================================================================
VERSION FRAGMENTS
=============================================================================

Cache-busting without a manifest: the resource's last-modified timestamp
is spliced into its URL, and stripped again when the request comes back.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    VERSIONED RESOURCE URLS                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   inject_version("css/site.css", 1699999999000)                     │
    │       → "css/site-ver-1699999999000.css"                            │
    │                  ────────┬────────                                   │
    │                          └── version token, inserted before the     │
    │                              last "." of the path                   │
    │                                                                      │
    │   inject_version("data", 42)          → "data-ver-42"               │
    │                                                                      │
    │   remove_version("css/site-ver-1699999999000.css")                  │
    │       → "css/site.css"                                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

When the file changes, its timestamp changes, the URL changes, and every
browser fetches the new copy. Unchanged files keep their URL and can be
cached for as long as you like.

The token is recognised by VERSION_PATTERN: "-ver-" and digits, followed
either by "." (the start of the extension) or by the end of the path
(extension-less resources). The "." is only looked at, never consumed,
so removal leaves it in place.

=============================================================================
"""

import re
from typing import Optional, Tuple


VERSION_PATTERN = re.compile(r"-ver-[0-9]+(?=\.|\Z)")

VERSION_PREFIX = "-ver-"


def find_version(path: str) -> Optional[Tuple[int, int]]:
    """
    Locate the first version token in a path.

    Returns:
        (start, end) span of the token, excluding the following ".",
        or None when the path carries no token.

    Example:
        >>> find_version("app-ver-42.js")
        (3, 10)
    """
    match = VERSION_PATTERN.search(path)
    if match is None:
        return None
    return match.span()


def remove_version(path: str) -> str:
    """
    Strip the version token from a path.

    Only the matched span is removed. A path that happens to repeat the
    token text elsewhere keeps the other occurrence. Paths without a token
    come back unchanged.

    Examples:
        >>> remove_version("app-ver-1699999999000.js")
        'app.js'
        >>> remove_version("app.js")
        'app.js'
    """
    span = find_version(path)
    if span is None:
        return path
    start, end = span
    return path[:start] + path[end:]


def inject_version(path: str, last_modified: int) -> str:
    """
    Insert a version token derived from last_modified into a path.

    The token goes immediately before the last "." of the path; paths
    without a "." get it appended.

    Args:
        path: Logical resource path.
        last_modified: Resource timestamp (milliseconds since epoch).

    Returns:
        The versioned path. The input is not modified.
    """
    token = f"{VERSION_PREFIX}{last_modified}"
    extension_at = path.rfind(".")
    if extension_at == -1:
        return path + token
    return path[:extension_at] + token + path[extension_at:]


def is_versioned(path: str) -> bool:
    return VERSION_PATTERN.search(path) is not None
