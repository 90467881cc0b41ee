"""
Archive Fetcher
===============

Downloads the zip of a READY kit build into a private temporary directory.
"""

import logging
import secrets
import tempfile
import time
from pathlib import Path

import requests
from tqdm import tqdm

from ..api.kit_build import KitBuild
from ..core.exceptions import (
    BuildNotReadyError,
    DownloadedArchiveInvalidError,
    DownloadHttpStatusError,
    DownloadTransportError,
    KitError,
    StorageError,
    TempDirCreationError,
    TempDirNotWritableError,
)
from ..storage.filesystem import FileSystem, LocalFileSystem, mkdir_all

logger = logging.getLogger(__name__)

ARCHIVE_FILENAME = "kit.zip"
TEMP_DIR_PREFIX = "fontawesome-kit-"


class DownloadMeter:
    """Counts the bytes of one download, drawing a tqdm bar when asked to."""

    def __init__(self, total_size: int, description: str, show_progress: bool = False):
        self.received = 0
        self.started = time.monotonic()
        self.bar = (
            tqdm(
                total=total_size or None,
                unit="B",
                unit_scale=True,
                unit_divisor=1024,
                desc=description,
            )
            if show_progress
            else None
        )

    def add(self, chunk_size: int) -> None:
        self.received += chunk_size
        if self.bar is not None:
            self.bar.update(chunk_size)

    def finish(self) -> float:
        """Close the bar and return the seconds spent downloading."""
        if self.bar is not None:
            self.bar.close()
        return time.monotonic() - self.started


def content_length(headers) -> int:
    """The Content-Length header as an int, or 0 when absent or malformed."""
    try:
        return max(int(headers.get("content-length") or 0), 0)
    except (TypeError, ValueError):
        return 0


class ArchiveFetcher:
    """
    Fetches kit build archives.

    Every fetch gets its own temp directory, so concurrent fetches of
    different builds never collide. The caller owns the returned directory
    and is responsible for deleting it.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        fs: FileSystem | None = None,
        temp_root: Path | None = None,
        timeout_seconds: int = 30,
        chunk_size: int = 8192,
        show_progress: bool = False,
    ):
        self.session = session or requests.Session()
        self.fs = fs or LocalFileSystem()
        self.temp_root = Path(temp_root) if temp_root else Path(tempfile.gettempdir())
        self.timeout_seconds = timeout_seconds
        self.chunk_size = chunk_size
        self.show_progress = show_progress

    def fetch_archive(self, build: KitBuild) -> Path:
        """
        Download a build's zip to <temp dir>/kit.zip.

        Args:
            build: A READY kit build

        Returns:
            The temp directory holding kit.zip

        Raises:
            BuildNotReadyError: If the build is not READY
            TempDirCreationError: If the temp directory cannot be created
            TempDirNotWritableError: If the temp directory is not writable
            DownloadTransportError: If the request fails
            DownloadHttpStatusError: If the response status is not 200
            DownloadedArchiveInvalidError: If the written archive is missing or empty
        """
        if not build.is_ready():
            raise BuildNotReadyError(build.build_id, build.status.value)

        temp_dir = self._create_temp_dir()

        try:
            archive_path = temp_dir / ARCHIVE_FILENAME
            self._download(build.url, archive_path, build.build_id)
            self._validate_archive(archive_path)
        except KitError:
            self._discard(temp_dir)
            raise

        return temp_dir

    def _create_temp_dir(self) -> Path:
        temp_dir = self.temp_root / f"{TEMP_DIR_PREFIX}{secrets.token_hex(8)}"

        try:
            mkdir_all(self.fs, self.temp_root)
            self.fs.mkdir(temp_dir)
        except (StorageError, OSError) as e:
            raise TempDirCreationError(str(temp_dir), str(e)) from e

        if not self.fs.is_writable(temp_dir):
            self._discard(temp_dir)
            raise TempDirNotWritableError(str(temp_dir))

        logger.debug(f"Created temp directory: {temp_dir}")
        return temp_dir

    def _download(self, url: str, archive_path: Path, build_id: str) -> None:
        logger.info(f"Downloading kit build {build_id} from {url}")

        try:
            response = self.session.get(url, stream=True, timeout=self.timeout_seconds)
        except requests.RequestException as e:
            raise DownloadTransportError(url, str(e)) from e

        try:
            if response.status_code != 200:
                raise DownloadHttpStatusError(url, response.status_code)

            meter = DownloadMeter(
                content_length(response.headers),
                f"Downloading {build_id}",
                show_progress=self.show_progress,
            )

            try:
                with self.fs.open(archive_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=self.chunk_size):
                        if chunk:
                            f.write(chunk)
                            meter.add(len(chunk))
            except requests.RequestException as e:
                raise DownloadTransportError(url, str(e)) from e
            except OSError as e:
                raise DownloadTransportError(url, f"could not write {archive_path}: {e}") from e
            finally:
                elapsed = meter.finish()

            logger.info(f"Download completed: {meter.received} bytes in {elapsed:.2f}s")
        finally:
            response.close()

    def _validate_archive(self, archive_path: Path) -> None:
        if not self.fs.is_file(archive_path) or self.fs.size(archive_path) == 0:
            raise DownloadedArchiveInvalidError(str(archive_path))

    def _discard(self, temp_dir: Path) -> None:
        try:
            if self.fs.exists(temp_dir):
                self.fs.delete(temp_dir)
        except OSError as e:
            logger.warning(f"Could not remove temp directory {temp_dir}: {e}")
