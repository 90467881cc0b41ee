"""
Pytest configuration and fixtures for kit self-hosting tests.
"""

import io
import json
import zipfile
from unittest.mock import Mock

import pytest

from kit_selfhost.api.kit_build import KitBuild
from kit_selfhost.core.config import KitSettings
from kit_selfhost.core.models import BuildStatus


def make_response(status_code=200, body=None, text=None, content=b"", headers=None):
    """Create a mock requests.Response."""
    response = Mock()
    response.status_code = status_code
    if text is None:
        text = json.dumps(body) if body is not None else ""
    response.text = text
    response.headers = headers if headers is not None else {}
    response.iter_content = Mock(return_value=iter([content] if content else []))
    response.close = Mock()
    return response


def build_kit_zip(icon_families=None, include_css=True, include_webfonts=True, extra_entries=None):
    """Create the bytes of a kit zip shaped like the ones the API serves."""
    if icon_families is None:
        icon_families = sample_icon_families()

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        if include_css:
            archive.writestr("css/all.css", ".fa-solid{font-weight:900}")
            archive.writestr("css/all.min.css", ".fa-solid{font-weight:900}")
        if include_webfonts:
            archive.writestr("webfonts/fa-solid-900.woff2", b"\x00woff2")
            archive.writestr("webfonts/fa-duotone-900.woff2", b"\x00woff2")
        archive.writestr("metadata/icon-families.json", json.dumps(icon_families))
        archive.writestr("js/all.js", "// not self-hosted")
        for name, data in (extra_entries or {}).items():
            archive.writestr(name, data)

    return buffer.getvalue()


def sample_icon_families():
    return {
        "icon1": {
            "label": "Icon One",
            "svgs": {
                "classic": {
                    "solid": {"width": 512, "height": 512, "path": "M0 0L512 512"},
                },
                "duotone": {
                    "solid": {
                        "width": 640,
                        "height": 512,
                        "path": ["M1 1Z", "M2 2Z"],
                    },
                },
            },
        }
    }


@pytest.fixture
def kit_metadata():
    """Kit metadata as the self-hosting pipeline expects it."""
    return {
        "token": "abc123",
        "license": "pro",
        "version": "6.5.1",
        "family_styles": [
            {"family": "classic", "style": "solid", "prefix": "fas"},
            {"family": "classic", "style": "regular", "prefix": "far"},
            {"family": "duotone", "style": "solid", "prefix": "fad"},
            {"family": "sharp", "style": "solid", "prefix": "fass"},
        ],
    }


@pytest.fixture
def kit_zip_bytes():
    return build_kit_zip()


@pytest.fixture
def ready_build():
    return KitBuild("abc123", "build-1", BuildStatus.READY, "https://example.com/kit.zip")


@pytest.fixture
def pending_build():
    return KitBuild("abc123", "build-1", BuildStatus.PENDING, None)


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from any local .env file."""
    return KitSettings(
        _env_file=None,
        api_token="test-api-token",
        destination_base_dir=tmp_path / "uploads",
        temp_dir=tmp_path / "tmp",
    )


@pytest.fixture
def download_session(kit_zip_bytes):
    """HTTP session serving the sample kit zip."""
    session = Mock()
    session.get.return_value = make_response(
        content=kit_zip_bytes, headers={"content-length": str(len(kit_zip_bytes))}
    )
    return session


@pytest.fixture
def response_factory():
    """Factory for mock HTTP responses."""
    return make_response


@pytest.fixture
def kit_zip_factory():
    """Factory for kit zip bytes with custom contents."""
    return build_kit_zip
