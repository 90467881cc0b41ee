"""Family Style Registry
=====================

Canonical family style naming shared by API decoding and output layout.
"""

from .collection import FamilyStyleCollection
from .family_style import (
    FamilyStyle,
    map_family_and_style_to_asset_file_stem,
    map_family_and_style_to_label,
    map_family_and_style_to_shorthand,
)

__all__ = [
    "FamilyStyle",
    "FamilyStyleCollection",
    "map_family_and_style_to_asset_file_stem",
    "map_family_and_style_to_label",
    "map_family_and_style_to_shorthand",
]
