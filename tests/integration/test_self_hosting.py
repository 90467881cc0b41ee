"""
Self-Hosting Integration Tests
==============================

Runs the whole pipeline against a fake kit archive served by a mock session
and checks the published layout on disk.
"""

import io
import json
import zipfile
from unittest.mock import Mock

import pytest

from kit_selfhost.api.kit_build import KitBuild
from kit_selfhost.core.exceptions import (
    ArchiveExtractionError,
    ArchiveUnreadableError,
    InvalidTempDirError,
    MetadataParseError,
    MetadataUnreadableError,
)
from kit_selfhost.selfhost.fetcher import ARCHIVE_FILENAME, ArchiveFetcher
from kit_selfhost.selfhost.pipeline import SelfHostingPipeline
from kit_selfhost.storage.filesystem import LocalFileSystem

pytestmark = pytest.mark.integration


def read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def pipeline(settings, download_session):
    fs = LocalFileSystem()
    fetcher = ArchiveFetcher(session=download_session, fs=fs, temp_root=settings.temp_dir)
    return SelfHostingPipeline(settings=settings, fs=fs, fetcher=fetcher)


@pytest.fixture
def destination(settings):
    return settings.destination_base_dir / "fontawesome-kit" / "abc123" / "build-1"


class TestDownloadAndPrepare:
    """End-to-end self-hosting of a READY build."""

    def test_publishes_layout(self, pipeline, ready_build, kit_metadata, destination):
        result = pipeline.download_and_prepare_self_hosting(ready_build, kit_metadata)

        assert result.success, result.errors
        assert result.path == destination
        assert not result.skipped

        assert (destination / "css" / "all.css").is_file()
        assert (destination / "webfonts" / "fa-solid-900.woff2").is_file()
        assert not (destination / "js").exists()

        assert read_json(destination / "svg-objects" / "solid" / "icon1.json") == {
            "width": 512,
            "height": 512,
            "path": "M0 0L512 512",
        }
        assert read_json(destination / "svg-objects" / "duotone" / "icon1.json") == {
            "width": 640,
            "height": 512,
            "path": ["M1 1Z", "M2 2Z"],
        }

        assert read_json(destination / "metadata" / "solid.json") == {"icons": ["icon1"]}
        assert read_json(destination / "metadata" / "duotone.json") == {"icons": ["icon1"]}

    def test_kit_json(self, pipeline, ready_build, kit_metadata, destination):
        pipeline.download_and_prepare_self_hosting(ready_build, kit_metadata)

        kit_json = read_json(destination / "metadata" / "kit.json")

        assert kit_json["token"] == "abc123"
        assert kit_json["license"] == "pro"
        assert kit_json["fontawesome_version"] == "6.5.1"
        assert kit_json["build_id"] == "build-1"
        assert [fs["shorthand"] for fs in kit_json["included_family_styles"]] == [
            "solid",
            "duotone",
        ]

        official = read_json(destination / "metadata" / "all-official-family-styles.json")
        assert [fs["prefix"] for fs in official] == ["fas", "far", "fad", "fass"]

    def test_temp_dir_removed(self, pipeline, ready_build, kit_metadata, settings):
        pipeline.download_and_prepare_self_hosting(ready_build, kit_metadata)

        assert list(settings.temp_dir.iterdir()) == []

    def test_no_overwrite_reuses_existing_output(
        self, pipeline, ready_build, kit_metadata, destination, download_session
    ):
        """An existing destination is returned without any network access."""
        destination.mkdir(parents=True)
        (destination / "metadata").mkdir()

        result = pipeline.download_and_prepare_self_hosting(
            ready_build, kit_metadata, overwrite=False
        )

        assert result.success
        assert result.skipped
        assert result.path == destination
        download_session.get.assert_not_called()

    def test_no_overwrite_retries_empty_destination(
        self, pipeline, ready_build, kit_metadata, destination, download_session
    ):
        """An empty destination left by an aborted run is not treated as published."""
        destination.mkdir(parents=True)

        result = pipeline.download_and_prepare_self_hosting(
            ready_build, kit_metadata, overwrite=False
        )

        assert result.success
        assert not result.skipped
        assert (destination / "metadata" / "kit.json").is_file()
        download_session.get.assert_called_once()

    def test_overwrite_replaces_existing_output(
        self, pipeline, ready_build, kit_metadata, destination
    ):
        destination.mkdir(parents=True)
        (destination / "stale.txt").write_text("old")

        result = pipeline.download_and_prepare_self_hosting(ready_build, kit_metadata)

        assert result.success
        assert not (destination / "stale.txt").exists()
        assert (destination / "metadata" / "kit.json").is_file()
        assert sorted(p.name for p in destination.parent.iterdir()) == ["build-1"]

    def test_fetches_metadata_when_omitted(self, settings, download_session, ready_build):
        query_client = Mock()
        query_client.execute.return_value = {
            "me": {
                "kit": {
                    "token": "abc123",
                    "licenseSelected": "free",
                    "release": {
                        "version": "6.5.1",
                        "familyStyles": [
                            {"family": "classic", "style": "solid", "prefix": "fas"},
                            {"family": "duotone", "style": "solid", "prefix": "fad"},
                        ],
                    },
                }
            }
        }
        fs = LocalFileSystem()
        pipeline = SelfHostingPipeline(
            settings=settings,
            fs=fs,
            fetcher=ArchiveFetcher(session=download_session, fs=fs, temp_root=settings.temp_dir),
            query_client=query_client,
            token_provider=Mock(),
        )

        result = pipeline.download_and_prepare_self_hosting(ready_build)

        assert result.success, result.errors
        assert read_json(result.path / "metadata" / "kit.json")["license"] == "free"

    def test_download_failure_is_reported(
        self, pipeline, ready_build, kit_metadata, download_session, destination, response_factory
    ):
        download_session.get.return_value = response_factory(status_code=404)

        result = pipeline.download_and_prepare_self_hosting(ready_build, kit_metadata)

        assert not result.success
        assert result.error_kind == "download_http_status_error"
        assert not destination.exists()

    def test_incomplete_metadata_touches_nothing(
        self, pipeline, ready_build, kit_metadata, destination
    ):
        del kit_metadata["license"]

        result = pipeline.download_and_prepare_self_hosting(ready_build, kit_metadata)

        assert result.error_kind == "kit_metadata_incomplete"
        assert not destination.exists()

    def test_keep_temp_dirs_on_failure(
        self,
        pipeline,
        ready_build,
        kit_metadata,
        settings,
        kit_zip_factory,
        download_session,
        response_factory,
        destination,
    ):
        settings.keep_temp_dirs = True
        download_session.get.return_value = response_factory(
            content=kit_zip_factory(icon_families={"icon1": {"svgs": "broken"}})
        )

        result = pipeline.download_and_prepare_self_hosting(ready_build, kit_metadata)

        assert result.error_kind == "metadata_parse_error"
        kept = list(settings.temp_dir.iterdir())
        assert len(kept) == 1
        assert (kept[0] / ARCHIVE_FILENAME).is_file()
        assert list(destination.iterdir()) == []

    def test_destination_base_dir_override(self, pipeline, ready_build, kit_metadata, tmp_path):
        result = pipeline.download_and_prepare_self_hosting(
            ready_build, kit_metadata, destination_base_dir=tmp_path / "site"
        )

        assert result.path == tmp_path / "site" / "fontawesome-kit" / "abc123" / "build-1"
        assert (result.path / "metadata" / "kit.json").is_file()

    def test_unsafe_build_id(self, pipeline, kit_metadata):
        build = KitBuild("abc123", "../escape", "READY", "https://example.com/kit.zip")

        result = pipeline.download_and_prepare_self_hosting(build, kit_metadata)

        assert result.error_kind == "invalid_argument"


class TestPrepareSelfHosting:
    """Test the transformation step on an already downloaded archive."""

    @pytest.fixture
    def temp_dir(self, tmp_path):
        path = tmp_path / "work"
        path.mkdir()
        return path

    def write_archive(self, temp_dir, data):
        (temp_dir / ARCHIVE_FILENAME).write_bytes(data)

    def test_numeric_icon_names(self, pipeline, temp_dir, tmp_path, kit_metadata, kit_zip_factory):
        self.write_archive(
            temp_dir,
            kit_zip_factory(
                icon_families={
                    "100": {
                        "svgs": {"classic": {"solid": {"width": 512, "height": 512, "path": "M0"}}}
                    }
                }
            ),
        )

        destination = pipeline.prepare_self_hosting(
            temp_dir, kit_metadata, tmp_path / "out", build_id="build-1"
        )

        assert read_json(destination / "metadata" / "solid.json") == {"icons": ["100"]}
        assert (destination / "svg-objects" / "solid" / "100.json").is_file()

    def test_custom_icons_are_included(
        self, pipeline, temp_dir, tmp_path, kit_metadata, kit_zip_factory
    ):
        self.write_archive(
            temp_dir,
            kit_zip_factory(
                icon_families={
                    "my-logo": {
                        "svgs": {
                            "kit": {"custom": {"width": 10, "height": 10, "path": "M0"}},
                            "kit-duotone": {
                                "custom": {"width": 10, "height": 10, "path": ["M0", "M1"]}
                            },
                        }
                    }
                }
            ),
        )

        destination = pipeline.prepare_self_hosting(temp_dir, kit_metadata, tmp_path / "out")

        kit_json = read_json(destination / "metadata" / "kit.json")
        assert [fs["prefix"] for fs in kit_json["included_family_styles"]] == ["fak", "fakd"]
        assert kit_json["build_id"] == "out"
        assert (destination / "svg-objects" / "kit-duotone-custom" / "my-logo.json").is_file()

    def test_missing_asset_dirs_are_skipped(
        self, pipeline, temp_dir, tmp_path, kit_metadata, kit_zip_factory
    ):
        self.write_archive(temp_dir, kit_zip_factory(include_webfonts=False))

        destination = pipeline.prepare_self_hosting(temp_dir, kit_metadata, tmp_path / "out")

        assert (destination / "css").is_dir()
        assert not (destination / "webfonts").exists()

    def test_invalid_temp_dir(self, pipeline, tmp_path, kit_metadata):
        with pytest.raises(InvalidTempDirError):
            pipeline.prepare_self_hosting(tmp_path / "missing", kit_metadata, tmp_path / "out")

    def test_corrupt_archive(self, pipeline, temp_dir, tmp_path, kit_metadata):
        self.write_archive(temp_dir, b"not a zip file")

        with pytest.raises(ArchiveUnreadableError):
            pipeline.prepare_self_hosting(temp_dir, kit_metadata, tmp_path / "out")

    def test_archive_path_traversal(
        self, pipeline, temp_dir, tmp_path, kit_metadata, kit_zip_factory
    ):
        self.write_archive(
            temp_dir, kit_zip_factory(extra_entries={"css/../../evil.css": "body{}"})
        )

        with pytest.raises(ArchiveExtractionError):
            pipeline.prepare_self_hosting(temp_dir, kit_metadata, tmp_path / "out")

        assert not (tmp_path / "evil.css").exists()

    def test_missing_icon_metadata(self, pipeline, temp_dir, tmp_path, kit_metadata):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("css/all.css", "")
        self.write_archive(temp_dir, buffer.getvalue())

        with pytest.raises(MetadataUnreadableError):
            pipeline.prepare_self_hosting(temp_dir, kit_metadata, tmp_path / "out")

    def test_invalid_svg_data(self, pipeline, temp_dir, tmp_path, kit_metadata, kit_zip_factory):
        self.write_archive(
            temp_dir,
            kit_zip_factory(
                icon_families={"icon1": {"svgs": {"classic": {"solid": {"path": "M0"}}}}}
            ),
        )

        with pytest.raises(MetadataParseError):
            pipeline.prepare_self_hosting(temp_dir, kit_metadata, tmp_path / "out")

    def test_icons_are_listed_only_in_their_own_styles(
        self, pipeline, temp_dir, tmp_path, kit_metadata, kit_zip_factory
    ):
        """Each style manifest names only the icons that carry that style."""
        self.write_archive(
            temp_dir,
            kit_zip_factory(
                icon_families={
                    "icon1": {
                        "svgs": {"classic": {"solid": {"width": 512, "height": 512, "path": "M0"}}}
                    },
                    "icon2": {
                        "svgs": {
                            "duotone": {
                                "solid": {"width": 640, "height": 512, "path": ["M1", "M2"]}
                            }
                        }
                    },
                }
            ),
        )

        destination = pipeline.prepare_self_hosting(temp_dir, kit_metadata, tmp_path / "out")

        assert read_json(destination / "metadata" / "solid.json") == {"icons": ["icon1"]}
        assert read_json(destination / "metadata" / "duotone.json") == {"icons": ["icon2"]}
        assert not (destination / "svg-objects" / "solid" / "icon2.json").exists()
        assert not (destination / "svg-objects" / "duotone" / "icon1.json").exists()

        kit_json = read_json(destination / "metadata" / "kit.json")
        assert [fs["shorthand"] for fs in kit_json["included_family_styles"]] == [
            "solid",
            "duotone",
        ]
