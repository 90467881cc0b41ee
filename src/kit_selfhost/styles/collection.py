"""Collection of family styles keyed by short prefix id."""

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from ..core.exceptions import FamilyStylesMetadataMissingError
from .family_style import FamilyStyle

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("family", "style", "prefix")


def is_valid_family_style_record(record: Any) -> bool:
    """Check that a record carries non-empty family, style and prefix strings."""
    if not isinstance(record, Mapping):
        return False

    for key in REQUIRED_KEYS:
        value = record.get(key)
        if not isinstance(value, str) or value == "":
            return False

    return True


class FamilyStyleCollection:
    """
    Family styles keyed by short prefix id.

    Adding a family style whose prefix is already present replaces the
    earlier entry; removing an absent prefix does nothing. Insertion order is
    kept only so that JSON exports are stable.
    """

    def __init__(self, family_styles: Iterable[FamilyStyle | Mapping[str, Any]] = ()):
        self._by_prefix: dict[str, FamilyStyle] = {}

        for family_style in family_styles:
            self.add(family_style)

    @classmethod
    def from_records(cls, records: Any) -> "FamilyStyleCollection":
        """
        Build a collection from raw API records, rejecting any malformed record.

        Raises:
            FamilyStylesMetadataMissingError: If records is not a list or any
                record lacks a non-empty family, style or prefix
        """
        if not isinstance(records, list):
            raise FamilyStylesMetadataMissingError("family styles must be a list")

        for index, record in enumerate(records):
            if not is_valid_family_style_record(record):
                raise FamilyStylesMetadataMissingError(f"invalid family style at index {index}")

        return cls(records)

    def add(self, family_style: FamilyStyle | Mapping[str, Any]) -> None:
        if isinstance(family_style, FamilyStyle):
            self._by_prefix[family_style.short_prefix_id] = family_style
            return

        if is_valid_family_style_record(family_style):
            self._by_prefix[family_style["prefix"]] = FamilyStyle(
                family_style["family"], family_style["style"], family_style["prefix"]
            )
            return

        logger.debug(f"Ignoring invalid family style record: {family_style!r}")

    def remove(self, family_style: FamilyStyle | Mapping[str, Any] | str) -> None:
        if isinstance(family_style, FamilyStyle):
            prefix = family_style.short_prefix_id
        elif isinstance(family_style, Mapping) and isinstance(family_style.get("prefix"), str):
            prefix = family_style["prefix"]
        elif isinstance(family_style, str):
            prefix = family_style
        else:
            return

        self._by_prefix.pop(prefix, None)

    def get_by_short_prefix_id(self, short_prefix_id: str) -> FamilyStyle | None:
        return self._by_prefix.get(short_prefix_id)

    def resolve_short_prefix_id(self, short_prefix_id: str) -> FamilyStyle | None:
        """Look up a prefix, answering the custom icon prefixes even when absent."""
        if short_prefix_id == "fak":
            return FamilyStyle.kit_custom()

        if short_prefix_id == "fakd":
            return FamilyStyle.kit_duotone_custom()

        return self.get_by_short_prefix_id(short_prefix_id)

    def family_styles(self) -> list[FamilyStyle]:
        return list(self._by_prefix.values())

    def shorthands(self) -> set[str]:
        return {family_style.shorthand for family_style in self._by_prefix.values()}

    def with_kit_custom_family_styles(self) -> "FamilyStyleCollection":
        """Copy of this collection extended with the two custom icon family styles."""
        extended = FamilyStyleCollection(self.family_styles())
        extended.add(FamilyStyle.kit_custom())
        extended.add(FamilyStyle.kit_duotone_custom())
        return extended

    def filter_by_shorthands(self, shorthands: Iterable[str]) -> "FamilyStyleCollection":
        wanted = set(shorthands)
        return FamilyStyleCollection(
            family_style
            for family_style in self._by_prefix.values()
            if family_style.shorthand in wanted
        )

    def to_json_list(self) -> list[dict[str, str]]:
        """Family styles as JSON-ready dictionaries, in insertion order."""
        return [family_style.to_dict() for family_style in self._by_prefix.values()]

    def __len__(self) -> int:
        return len(self._by_prefix)

    def __iter__(self) -> Iterator[FamilyStyle]:
        return iter(list(self._by_prefix.values()))

    def __contains__(self, item: object) -> bool:
        if isinstance(item, FamilyStyle):
            return self._by_prefix.get(item.short_prefix_id) == item
        return item in self._by_prefix

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FamilyStyleCollection):
            return NotImplemented
        return self._by_prefix == other._by_prefix

    def __repr__(self) -> str:
        return f"FamilyStyleCollection({sorted(self._by_prefix)})"
