"""
Self-Hosting Pipeline
=====================

Turns a downloaded kit zip into a self-hostable directory:

    <base>/fontawesome-kit/<kit token>/<build id>/
      css/...                 copied from the zip
      webfonts/...            copied from the zip
      metadata/
        kit.json
        all-official-family-styles.json
        <shorthand>.json      {"icons": [...]} per family style present
      svg-objects/<shorthand>/<icon name>.json

Everything is assembled in <temp dir>/staging and moved into place as the
last step. A failure at any step aborts without rolling back staging; the
temp directory is disposable and a rerun starts from scratch.
"""

import json
import logging
import secrets
import time
import zipfile
import zlib
from collections.abc import Mapping
from pathlib import Path, PurePosixPath
from typing import Any

import requests

from ..api.auth import AccessTokenManager
from ..api.client import QueryClient
from ..api.kit_build import KitBuild, fetch_kit_metadata
from ..core.config import KitSettings
from ..core.exceptions import (
    ArchiveExtractionError,
    ArchiveUnreadableError,
    DirMoveError,
    FileWriteError,
    InvalidArgumentError,
    InvalidConfigurationError,
    InvalidTempDirError,
    KitError,
    MetadataParseError,
    MetadataUnreadableError,
    StorageError,
)
from ..core.models import KitMetadata, SelfHostingResult
from ..storage.filesystem import FileSystem, LocalFileSystem, mkdir_all
from ..styles.collection import FamilyStyleCollection
from ..styles.family_style import map_family_and_style_to_shorthand
from .fetcher import ARCHIVE_FILENAME, ArchiveFetcher
from .svg import SvgIcon

logger = logging.getLogger(__name__)

EXTRACTED_PREFIXES = ("css/", "webfonts/", "metadata/")
ASSET_DIRS = ("css", "webfonts")
ICON_METADATA_PATH = Path("metadata") / "icon-families.json"
DESTINATION_ROOT = "fontawesome-kit"


def _is_safe_name(name: Any) -> bool:
    return (
        isinstance(name, str)
        and name not in ("", ".", "..")
        and "/" not in name
        and "\\" not in name
        and "\x00" not in name
    )


def _dump_json(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


class SelfHostingPipeline:
    """
    Downloads kit builds and lays them out for self-hosting.

    Collaborators are injected so the pipeline can run against test doubles;
    from_settings() wires up the real ones.
    """

    def __init__(
        self,
        settings: KitSettings | None = None,
        fs: FileSystem | None = None,
        fetcher: ArchiveFetcher | None = None,
        query_client: QueryClient | None = None,
        token_provider: AccessTokenManager | None = None,
    ):
        self.settings = settings or KitSettings()
        self.fs = fs or LocalFileSystem()
        self.fetcher = fetcher or ArchiveFetcher(
            fs=self.fs,
            temp_root=self.settings.temp_dir,
            timeout_seconds=self.settings.download_timeout_seconds,
            chunk_size=self.settings.chunk_size,
        )
        self.query_client = query_client
        self.token_provider = token_provider

    @classmethod
    def from_settings(
        cls, settings: KitSettings, show_progress: bool = False
    ) -> "SelfHostingPipeline":
        """Build a pipeline with HTTP collaborators configured from settings."""
        if not settings.api_token:
            raise InvalidConfigurationError("FONTAWESOME_API_TOKEN is not set")

        session = create_session(settings)
        fs = LocalFileSystem()

        return cls(
            settings=settings,
            fs=fs,
            fetcher=ArchiveFetcher(
                session=session,
                fs=fs,
                temp_root=settings.temp_dir,
                timeout_seconds=settings.download_timeout_seconds,
                chunk_size=settings.chunk_size,
                show_progress=show_progress,
            ),
            query_client=QueryClient(
                settings.api_base_url, session, settings.query_timeout_seconds
            ),
            token_provider=AccessTokenManager(
                settings.api_token,
                settings.api_base_url,
                session,
                settings.query_timeout_seconds,
            ),
        )

    def destination_dir_for(
        self, build: KitBuild, destination_base_dir: Path | None = None
    ) -> Path:
        """Final self-hosting directory for a build, under the configured base by default."""
        for part in (build.kit_token, build.build_id):
            if not _is_safe_name(part):
                raise InvalidArgumentError(f"unusable path component {part!r}")

        return (
            Path(destination_base_dir or self.settings.destination_base_dir)
            / DESTINATION_ROOT
            / build.kit_token
            / build.build_id
        )

    def download_and_prepare_self_hosting(
        self,
        build: KitBuild,
        kit_metadata: KitMetadata | Mapping[str, Any] | None = None,
        overwrite: bool = True,
        destination_base_dir: Path | None = None,
    ) -> SelfHostingResult:
        """
        Fetch a READY build and publish it for self-hosting.

        With overwrite=False an existing, readable and non-empty destination
        is returned as is, without any network access.

        Args:
            build: The kit build to publish
            kit_metadata: Kit metadata; fetched from the API when omitted
            overwrite: Replace an existing destination
            destination_base_dir: Overrides the configured destination base directory

        Returns:
            SelfHostingResult describing the published directory or the failure
        """
        start_time = time.time()

        try:
            destination = self.destination_dir_for(build, destination_base_dir)
        except KitError as e:
            return SelfHostingResult.failure(e)

        if not overwrite and self._is_published(destination):
            logger.info(f"Reusing existing self-hosting directory: {destination}")
            return SelfHostingResult(
                success=True,
                path=destination,
                skipped=True,
                processing_time_ms=(time.time() - start_time) * 1000,
            )

        temp_dir = None
        failed = True

        try:
            if kit_metadata is None:
                if self.query_client is None or self.token_provider is None:
                    raise InvalidConfigurationError(
                        "kit metadata was not given and no API client is configured"
                    )
                kit_metadata = fetch_kit_metadata(
                    self.query_client, self.token_provider, build.kit_token
                )

            temp_dir = self.fetcher.fetch_archive(build)
            path = self.prepare_self_hosting(
                temp_dir, kit_metadata, destination, build_id=build.build_id, overwrite=overwrite
            )
            failed = False
        except KitError as e:
            logger.error(f"Self-hosting kit build {build.build_id} failed: {e}")
            return SelfHostingResult.failure(e, (time.time() - start_time) * 1000)
        finally:
            if temp_dir is not None and not (failed and self.settings.keep_temp_dirs):
                self._cleanup(temp_dir)

        logger.info(f"Kit build {build.build_id} published to {path}")
        return SelfHostingResult(
            success=True, path=path, processing_time_ms=(time.time() - start_time) * 1000
        )

    def prepare_self_hosting(
        self,
        temp_dir: Path,
        kit_metadata: KitMetadata | Mapping[str, Any],
        destination_dir: Path,
        build_id: str | None = None,
        overwrite: bool = True,
    ) -> Path:
        """
        Decompose a downloaded kit zip into the self-hosting layout.

        Args:
            temp_dir: Directory holding kit.zip; used as the work area
            kit_metadata: Kit token, license, version and family styles
            destination_dir: Final location of the layout
            build_id: Build id for kit.json; defaults to the destination's name
            overwrite: Replace existing content at the destination

        Returns:
            The destination directory

        Raises:
            InvalidTempDirError: If temp_dir is not a readable directory
            KitMetadataIncompleteError: If token, license or version is missing
            FamilyStylesMetadataMissingError: If the family styles are absent or malformed
            ArchiveUnreadableError: If kit.zip is missing or cannot be opened
            ArchiveExtractionError: If an entry cannot be extracted
            MetadataUnreadableError / MetadataParseError: For bad icon metadata
            DirMoveError: If assets or the staging directory cannot be moved
        """
        temp_dir = Path(temp_dir)
        destination_dir = Path(destination_dir)

        if not self.fs.is_dir(temp_dir) or not self.fs.is_readable(temp_dir):
            raise InvalidTempDirError(str(temp_dir))

        metadata = KitMetadata.from_mapping(kit_metadata)
        official_family_styles = FamilyStyleCollection.from_records(
            metadata.family_style_records()
        )

        mkdir_all(self.fs, destination_dir)

        self._extract_archive(temp_dir)

        staging_dir = temp_dir / "staging"
        self._mkdir(staging_dir / "metadata")

        icons_by_shorthand = self._write_svg_objects(temp_dir, staging_dir)

        for shorthand, icon_names in icons_by_shorthand.items():
            self._write_json(
                staging_dir / "metadata" / f"{shorthand}.json", {"icons": icon_names}
            )

        self._write_kit_metadata(
            staging_dir,
            metadata,
            official_family_styles,
            build_id or destination_dir.name,
            set(icons_by_shorthand),
        )

        self._move_assets(temp_dir, staging_dir)
        self._publish(staging_dir, destination_dir, overwrite)

        return destination_dir

    def _extract_archive(self, temp_dir: Path) -> None:
        archive_path = temp_dir / ARCHIVE_FILENAME

        if not self.fs.is_file(archive_path):
            raise ArchiveUnreadableError(str(archive_path))

        try:
            archive_file = self.fs.open(archive_path, "rb")
        except OSError as e:
            raise ArchiveUnreadableError(str(archive_path), str(e)) from e

        with archive_file:
            try:
                archive = zipfile.ZipFile(archive_file)
            except (zipfile.BadZipFile, OSError) as e:
                raise ArchiveUnreadableError(str(archive_path), str(e)) from e

            with archive:
                extracted = 0
                for entry in archive.infolist():
                    if not entry.filename.startswith(EXTRACTED_PREFIXES):
                        continue
                    self._extract_entry(archive, entry, temp_dir)
                    extracted += 1

        logger.info(f"Extracted {extracted} entries from {archive_path}")

    def _extract_entry(self, archive: zipfile.ZipFile, entry: zipfile.ZipInfo, root: Path) -> None:
        relative = PurePosixPath(entry.filename)
        if relative.is_absolute() or ".." in relative.parts:
            raise ArchiveExtractionError(entry.filename, "path escapes the extraction directory")

        target = root.joinpath(*relative.parts)

        try:
            if entry.is_dir():
                mkdir_all(self.fs, target)
                return

            mkdir_all(self.fs, target.parent)
            self.fs.write_bytes(target, archive.read(entry))
        except (StorageError, OSError, zipfile.BadZipFile, zlib.error, RuntimeError) as e:
            raise ArchiveExtractionError(entry.filename, str(e)) from e

    def _load_icon_metadata(self, temp_dir: Path) -> dict[str, Any]:
        metadata_path = temp_dir / ICON_METADATA_PATH

        if not self.fs.is_file(metadata_path):
            raise MetadataUnreadableError(str(metadata_path))

        try:
            content = self.fs.read_text(metadata_path)
        except (OSError, UnicodeDecodeError) as e:
            raise MetadataUnreadableError(str(metadata_path), str(e)) from e

        try:
            icons = json.loads(content)
        except ValueError as e:
            raise MetadataParseError(f"{ICON_METADATA_PATH} is not valid JSON: {e}") from e

        if not isinstance(icons, dict):
            raise MetadataParseError(f"{ICON_METADATA_PATH} is not an object of icons")

        return icons

    def _write_svg_objects(self, temp_dir: Path, staging_dir: Path) -> dict[str, list[str]]:
        """Write one svg object per icon per family style; return icon names by shorthand."""
        icons = self._load_icon_metadata(temp_dir)
        icons_by_shorthand: dict[str, list[str]] = {}
        svg_objects_dir = staging_dir / "svg-objects"

        for icon_name, icon in icons.items():
            if not _is_safe_name(icon_name):
                raise MetadataParseError(f"unusable icon name {icon_name!r}")

            svgs = icon.get("svgs") if isinstance(icon, dict) else None
            if not isinstance(svgs, dict):
                raise MetadataParseError(f"icon {icon_name} has no svgs object")

            for family, styles in svgs.items():
                if not isinstance(styles, dict):
                    raise MetadataParseError(f"icon {icon_name} has invalid styles for {family}")

                for style, icon_data in styles.items():
                    shorthand = map_family_and_style_to_shorthand(family, style)
                    if not _is_safe_name(shorthand):
                        raise MetadataParseError(f"unusable family style {family}/{style}")

                    svg_icon = SvgIcon.from_data(icon_data, f"{icon_name} ({shorthand})")

                    if shorthand not in icons_by_shorthand:
                        self._mkdir(svg_objects_dir / shorthand)
                        icons_by_shorthand[shorthand] = []

                    self._write_json(
                        svg_objects_dir / shorthand / f"{icon_name}.json", svg_icon.to_dict()
                    )
                    icons_by_shorthand[shorthand].append(icon_name)

        logger.info(
            f"Wrote svg objects for {len(icons)} icons in {len(icons_by_shorthand)} family styles"
        )
        return icons_by_shorthand

    def _write_kit_metadata(
        self,
        staging_dir: Path,
        metadata: KitMetadata,
        official_family_styles: FamilyStyleCollection,
        build_id: str,
        shorthands: set[str],
    ) -> None:
        included = official_family_styles.with_kit_custom_family_styles().filter_by_shorthands(
            shorthands
        )

        unknown = shorthands - included.shorthands()
        if unknown:
            logger.warning(f"Icons found for unknown family styles: {sorted(unknown)}")

        self._write_json(
            staging_dir / "metadata" / "all-official-family-styles.json",
            official_family_styles.to_json_list(),
        )
        self._write_json(
            staging_dir / "metadata" / "kit.json",
            {
                "token": metadata.token,
                "license": metadata.license,
                "fontawesome_version": metadata.version,
                "build_id": build_id,
                "included_family_styles": included.to_json_list(),
            },
        )

    def _move_assets(self, temp_dir: Path, staging_dir: Path) -> None:
        for name in ASSET_DIRS:
            source = temp_dir / name
            if not self.fs.is_dir(source):
                logger.warning(f"Kit archive has no {name}/ directory")
                continue

            try:
                self.fs.move(source, staging_dir / name)
            except OSError as e:
                raise DirMoveError(str(source), str(staging_dir / name), str(e)) from e

    def _publish(self, staging_dir: Path, destination_dir: Path, overwrite: bool) -> None:
        """
        Move the staging directory to the destination.

        Existing content is set aside first and restored if the move fails.
        """
        previous = None

        if self.fs.exists(destination_dir):
            if not overwrite and self.fs.list_dir(destination_dir):
                raise DirMoveError(
                    str(staging_dir), str(destination_dir), "destination is already populated"
                )

            previous = destination_dir.with_name(
                f"{destination_dir.name}.previous-{secrets.token_hex(4)}"
            )
            try:
                self.fs.move(destination_dir, previous)
            except OSError as e:
                raise DirMoveError(str(destination_dir), str(previous), str(e)) from e
        else:
            mkdir_all(self.fs, destination_dir.parent)

        try:
            self.fs.move(staging_dir, destination_dir)
        except OSError as e:
            if previous is not None:
                try:
                    self.fs.move(previous, destination_dir)
                except OSError:
                    logger.exception(f"Could not restore {destination_dir} from {previous}")
            raise DirMoveError(str(staging_dir), str(destination_dir), str(e)) from e

        if previous is not None:
            self._cleanup(previous)

    def _is_published(self, destination: Path) -> bool:
        # An empty directory is what an aborted run leaves behind
        return (
            self.fs.is_dir(destination)
            and self.fs.is_readable(destination)
            and len(self.fs.list_dir(destination)) > 0
        )

    def _mkdir(self, path: Path) -> None:
        mkdir_all(self.fs, path)

    def _write_json(self, path: Path, data: Any) -> None:
        try:
            self.fs.write_text(path, _dump_json(data))
        except OSError as e:
            raise FileWriteError(str(path), str(e)) from e

    def _cleanup(self, path: Path) -> None:
        try:
            if self.fs.exists(path):
                self.fs.delete(path)
                logger.debug(f"Removed {path}")
        except OSError as e:
            logger.warning(f"Could not remove {path}: {e}")


def create_session(settings: KitSettings) -> requests.Session:
    """Create HTTP session with appropriate configuration."""
    session = requests.Session()
    session.verify = settings.verify_ssl
    session.headers.update({"User-Agent": settings.user_agent})
    return session
