"""
Resource stores and version fragments.

    versioning.py   inject_version / remove_version for cache-busting URLs
    location.py     ResourceLocation, ResourceError and the resolvers
"""

from .versioning import VERSION_PATTERN, find_version, inject_version, remove_version, is_versioned
from .location import (
    DirectoryResolver,
    PackageResolver,
    ResourceError,
    ResourceLocation,
    ResourceResolver,
    WebjarsResolver,
    split_resource_path,
)

__all__ = [
    "VERSION_PATTERN",
    "find_version",
    "inject_version",
    "remove_version",
    "is_versioned",
    "DirectoryResolver",
    "PackageResolver",
    "ResourceError",
    "ResourceLocation",
    "ResourceResolver",
    "WebjarsResolver",
    "split_resource_path",
]
