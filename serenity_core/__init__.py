"""SerenitySphere Core - mood experience engine and API service."""

from serenity_core.versioning import get_runtime_version

__version__ = get_runtime_version("1.2.0")
