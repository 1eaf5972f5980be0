"""API Package - Thunderstore package registry client."""

from .handlers import (
    Listing,
    Package,
    PackageRegistry,
    Release,
    ThunderstoreAPI
)

__all__ = [
    "Listing",
    "Package",
    "PackageRegistry",
    "Release",
    "ThunderstoreAPI"
]
