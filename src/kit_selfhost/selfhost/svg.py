"""
SVG icon data as found in a kit's icon metadata.

The "path" of an icon is either a single string (monotone) or a list of
layers in descending order, so a duotone icon is [secondary, primary]. A
duotone icon may have an empty string for either layer; that is a blank
layer, which is not the same as a monotone icon with no secondary layer.
"""

from dataclasses import dataclass
from html import escape
from typing import Any

from ..core.exceptions import MetadataParseError


@dataclass(frozen=True)
class SvgIcon:
    """View box dimensions and path layers of one icon in one family style."""

    width: int
    height: int
    primary_path: str | None = None
    secondary_path: str | None = None

    @classmethod
    def from_data(cls, icon_data: Any, name: str = "icon") -> "SvgIcon":
        """
        Decode a {width, height, path} record.

        Raises:
            MetadataParseError: If width or height is not an integer, or the
                path is neither a string nor a list
        """
        if not isinstance(icon_data, dict):
            raise MetadataParseError(f"svg data for {name} is not an object")

        width = icon_data.get("width")
        height = icon_data.get("height")
        if (
            not isinstance(width, int)
            or isinstance(width, bool)
            or not isinstance(height, int)
            or isinstance(height, bool)
        ):
            raise MetadataParseError(f"svg data for {name} lacks integer width and height")

        path_data = icon_data.get("path")

        if isinstance(path_data, str):
            return cls(width, height, primary_path=path_data)

        if isinstance(path_data, list):
            secondary = path_data[0] if len(path_data) > 0 else None
            primary = path_data[1] if len(path_data) > 1 else None

            for layer in (secondary, primary):
                if layer is not None and not isinstance(layer, str):
                    raise MetadataParseError(f"svg data for {name} has a non-string path layer")

            if secondary is None and primary is None:
                raise MetadataParseError(f"svg data for {name} has no path layers")

            # No secondary layer means monotone; "" is a blank duotone layer
            return cls(width, height, primary_path=primary, secondary_path=secondary)

        raise MetadataParseError(f"svg data for {name} has no usable path")

    def is_duotone(self) -> bool:
        return self.secondary_path is not None

    @property
    def path(self) -> str | list[str]:
        """The layers as present in the source record, secondary first."""
        if not self.is_duotone():
            return self.primary_path or ""
        if self.primary_path is None:
            return [self.secondary_path]
        return [self.secondary_path, self.primary_path]

    def to_dict(self) -> dict[str, Any]:
        """Convert to the {width, height, path} record written for self-hosting."""
        return {"width": self.width, "height": self.height, "path": self.path}

    def stringify(self, class_name: str | None = None) -> str:
        """Render this icon as an <svg> element."""
        svg = (
            f'<svg xmlns="http://www.w3.org/2000/svg" '
            f'viewBox="0 0 {int(self.width)} {int(self.height)}"'
        )

        if class_name:
            svg += f' class="{escape(class_name, quote=True)}"'

        svg += ">"

        if self.is_duotone():
            svg += (
                '<path style="fill:var(--fa-secondary-color,currentColor);'
                'opacity:var(--fa-secondary-opacity,.4)" '
                f'd="{escape(self.secondary_path, quote=True)}"/>'
            )

        if self.primary_path is not None:
            svg += (
                '<path style="fill:var(--fa-primary-color,currentColor);'
                'opacity:var(--fa-primary-opacity,1)" '
                f'd="{escape(self.primary_path, quote=True)}"/>'
            )

        return svg + "</svg>"
