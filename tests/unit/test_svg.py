"""Tests for SVG icon decoding and rendering."""

import pytest

from kit_selfhost.core.exceptions import MetadataParseError
from kit_selfhost.selfhost.svg import SvgIcon


class TestSvgIcon:
    """Test SvgIcon.from_data and serialization."""

    def test_monotone(self):
        icon = SvgIcon.from_data({"width": 512, "height": 448, "path": "M0 0Z"})

        assert not icon.is_duotone()
        assert icon.to_dict() == {"width": 512, "height": 448, "path": "M0 0Z"}

    def test_duotone_layer_order(self):
        """Duotone paths are listed secondary first."""
        icon = SvgIcon.from_data({"width": 640, "height": 512, "path": ["M1Z", "M2Z"]})

        assert icon.is_duotone()
        assert icon.secondary_path == "M1Z"
        assert icon.primary_path == "M2Z"
        assert icon.to_dict()["path"] == ["M1Z", "M2Z"]

    def test_blank_duotone_layers_are_kept(self):
        icon = SvgIcon.from_data({"width": 1, "height": 1, "path": ["", "M2Z"]})

        assert icon.is_duotone()
        assert icon.path == ["", "M2Z"]

    def test_absent_secondary_layer_is_monotone(self):
        """A null secondary layer is absent, not blank."""
        icon = SvgIcon.from_data({"width": 10, "height": 10, "path": [None, "M1Z"]})

        assert not icon.is_duotone()
        assert icon.secondary_path is None
        assert icon.to_dict() == {"width": 10, "height": 10, "path": "M1Z"}
        assert "fa-secondary" not in icon.stringify()

    def test_single_layer_list_is_kept_as_is(self):
        icon = SvgIcon.from_data({"width": 1, "height": 1, "path": ["M1Z"]})

        assert icon.secondary_path == "M1Z"
        assert icon.primary_path is None
        assert icon.to_dict()["path"] == ["M1Z"]

    @pytest.mark.parametrize(
        "data",
        [
            None,
            [512, 512, "M0Z"],
            {"width": "512", "height": 512, "path": "M0Z"},
            {"width": 512, "height": True, "path": "M0Z"},
            {"width": 512, "height": 512},
            {"width": 512, "height": 512, "path": 7},
            {"width": 512, "height": 512, "path": [1, "M0Z"]},
            {"width": 512, "height": 512, "path": []},
            {"width": 512, "height": 512, "path": [None, None]},
        ],
    )
    def test_invalid_data(self, data):
        with pytest.raises(MetadataParseError):
            SvgIcon.from_data(data, "broken")

    def test_stringify_monotone(self):
        icon = SvgIcon(16, 16, primary_path="M0 0Z")

        svg = icon.stringify("fa-icon")

        assert svg.startswith('<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 16 16"')
        assert 'class="fa-icon"' in svg
        assert 'd="M0 0Z"' in svg
        assert "fa-secondary" not in svg
        assert svg.endswith("</svg>")

    def test_stringify_duotone_escapes_attributes(self):
        icon = SvgIcon(16, 16, primary_path="M2Z", secondary_path='M1"Z')

        svg = icon.stringify('a"b')

        assert 'class="a&quot;b"' in svg
        assert 'd="M1&quot;Z"' in svg
        assert svg.index("--fa-secondary-color") < svg.index("--fa-primary-color")
