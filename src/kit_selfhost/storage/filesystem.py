"""
Filesystem Capability
=====================

The filesystem operations the self-hosting pipeline needs, behind one object
that is passed into every component that touches disk. Tests can substitute
their own implementation.
"""

import errno
import logging
import os
import shutil
from pathlib import Path
from typing import IO

from ..core.exceptions import (
    DirectoryCreationError,
    NoExistingAncestorError,
    PathIsNotADirectoryError,
)

logger = logging.getLogger(__name__)


class FileSystem:
    """Base class for filesystem capabilities."""

    def exists(self, path: Path) -> bool:
        raise NotImplementedError

    def is_dir(self, path: Path) -> bool:
        raise NotImplementedError

    def is_file(self, path: Path) -> bool:
        raise NotImplementedError

    def is_readable(self, path: Path) -> bool:
        raise NotImplementedError

    def is_writable(self, path: Path) -> bool:
        raise NotImplementedError

    def mkdir(self, path: Path) -> None:
        """Create a single directory; raise FileExistsError if the path exists."""
        raise NotImplementedError

    def move(self, source: Path, target: Path) -> None:
        raise NotImplementedError

    def delete(self, path: Path) -> None:
        """Delete a file, or a directory recursively."""
        raise NotImplementedError

    def read_text(self, path: Path) -> str:
        raise NotImplementedError

    def write_text(self, path: Path, content: str) -> None:
        raise NotImplementedError

    def write_bytes(self, path: Path, content: bytes) -> None:
        raise NotImplementedError

    def open(self, path: Path, mode: str = "rb") -> IO:
        raise NotImplementedError

    def size(self, path: Path) -> int:
        raise NotImplementedError

    def list_dir(self, path: Path) -> list[Path]:
        raise NotImplementedError


class LocalFileSystem(FileSystem):
    """Filesystem capability backed by the local disk."""

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def is_dir(self, path: Path) -> bool:
        return Path(path).is_dir()

    def is_file(self, path: Path) -> bool:
        return Path(path).is_file()

    def is_readable(self, path: Path) -> bool:
        return os.access(path, os.R_OK)

    def is_writable(self, path: Path) -> bool:
        return os.access(path, os.W_OK)

    def mkdir(self, path: Path) -> None:
        Path(path).mkdir()

    def move(self, source: Path, target: Path) -> None:
        """
        Move a file or directory, atomically where the platform allows.

        A rename is atomic within one filesystem. Across devices the move
        falls back to copy + delete, which can leave a partial target behind
        if interrupted.
        """
        try:
            os.replace(source, target)
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise
            logger.warning(
                f"Cross-device move from {source} to {target}; falling back to a non-atomic copy"
            )
            shutil.move(str(source), str(target))

    def delete(self, path: Path) -> None:
        path = Path(path)
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()

    def read_text(self, path: Path) -> str:
        return Path(path).read_text(encoding="utf-8")

    def write_text(self, path: Path, content: str) -> None:
        Path(path).write_text(content, encoding="utf-8")

    def write_bytes(self, path: Path, content: bytes) -> None:
        Path(path).write_bytes(content)

    def open(self, path: Path, mode: str = "rb") -> IO:
        return Path(path).open(mode)

    def size(self, path: Path) -> int:
        return Path(path).stat().st_size

    def list_dir(self, path: Path) -> list[Path]:
        return sorted(Path(path).iterdir())


def mkdir_all(fs: FileSystem, path: Path) -> None:
    """
    Create a directory and any missing ancestors.

    Succeeds when the directory already exists, including when another
    process creates any part of the path while this call is running.

    Raises:
        PathIsNotADirectoryError: If the path (or an ancestor) exists as a non-directory
        NoExistingAncestorError: If no ancestor exists, not even the root
        DirectoryCreationError: If a directory cannot be created
    """
    path = Path(path)

    if fs.is_dir(path):
        return

    if fs.exists(path):
        raise PathIsNotADirectoryError(str(path))

    missing = [path]
    current = path
    while True:
        parent = current.parent
        if parent == current:
            raise NoExistingAncestorError(str(path))

        if fs.is_dir(parent):
            break

        if fs.exists(parent):
            raise PathIsNotADirectoryError(str(parent))

        missing.append(parent)
        current = parent

    for directory in reversed(missing):
        try:
            fs.mkdir(directory)
            logger.debug(f"Created directory: {directory}")
        except FileExistsError:
            # Lost a race with a concurrent creator
            if not fs.is_dir(directory):
                raise PathIsNotADirectoryError(str(directory)) from None
        except OSError as e:
            raise DirectoryCreationError(str(directory), str(e)) from e
