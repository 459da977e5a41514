"""
Version information for the Aura chat client.

This file is the single source of truth for the application version.
"""

# Version components
VERSION_MAJOR = 0
VERSION_MINOR = 3
VERSION_PATCH = 0

# Full version string
__version__ = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"


def get_version() -> str:
    """Return the full version string."""
    return __version__


def get_version_tuple() -> tuple:
    """Return version as a tuple of integers."""
    return (VERSION_MAJOR, VERSION_MINOR, VERSION_PATCH)
