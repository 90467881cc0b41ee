"""Filesystem access for the self-hosting pipeline."""

from .filesystem import FileSystem, LocalFileSystem, mkdir_all

__all__ = ["FileSystem", "LocalFileSystem", "mkdir_all"]
