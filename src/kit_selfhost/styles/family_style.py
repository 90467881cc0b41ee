"""
Family Styles
=============

Canonical naming rules for Font Awesome family styles.

A family style is a (family, style) pair such as ("sharp", "solid"). Its
shorthand names the files and directories holding its assets, so these
rules are an external contract of the self-hosted layout:

- Styles in the "classic" family are named by the style alone ("solid").
- The "duotone" family's "solid" style is plain "duotone".
- Custom icon uploads use the "kit" (monotone) and "kit-duotone" families
  with the "custom" style. Their asset files inside a kit zip are named
  "custom-icons" and "custom-icons-duotone".

None of these functions check that a family style exists in any particular
Font Awesome release.
"""

from dataclasses import dataclass


def _ucfirst(value: str) -> str:
    return value[:1].upper() + value[1:]


def map_family_and_style_to_shorthand(family: str, style: str) -> str:
    """Map a family and style to its shorthand (e.g. "sharp-solid", "solid", "duotone")."""
    if family == "classic":
        return style

    if family == "duotone" and style == "solid":
        return "duotone"

    return f"{family}-{style}"


def map_family_and_style_to_asset_file_stem(family: str, style: str) -> str:
    """Map a family and style to the stem of its asset files in a kit zip."""
    if family == "kit":
        return "custom-icons"

    if family == "kit-duotone":
        return "custom-icons-duotone"

    return map_family_and_style_to_shorthand(family, style)


def map_family_and_style_to_label(family: str, style: str) -> str:
    """Map a family and style to a human readable label (e.g. "Sharp Solid", "Brands")."""
    if family == "classic" or style == "brands":
        return _ucfirst(style)

    family_label = " ".join(_ucfirst(part) for part in family.split("-"))
    return f"{family_label} {_ucfirst(style)}"


@dataclass(frozen=True)
class FamilyStyle:
    """A Font Awesome family style and its short prefix id (e.g. "fas", "fak")."""

    family: str
    style: str
    short_prefix_id: str

    @property
    def shorthand(self) -> str:
        return map_family_and_style_to_shorthand(self.family, self.style)

    @property
    def asset_file_stem(self) -> str:
        return map_family_and_style_to_asset_file_stem(self.family, self.style)

    @property
    def label(self) -> str:
        return map_family_and_style_to_label(self.family, self.style)

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {
            "family": self.family,
            "style": self.style,
            "prefix": self.short_prefix_id,
            "shorthand": self.shorthand,
            "asset_file_stem": self.asset_file_stem,
            "label": self.label,
        }

    @classmethod
    def kit_custom(cls) -> "FamilyStyle":
        """Family style of monotone custom icon uploads."""
        return cls("kit", "custom", "fak")

    @classmethod
    def kit_duotone_custom(cls) -> "FamilyStyle":
        """Family style of duotone custom icon uploads."""
        return cls("kit-duotone", "custom", "fakd")

    def __str__(self) -> str:
        return f"{self.label} ({self.short_prefix_id})"
