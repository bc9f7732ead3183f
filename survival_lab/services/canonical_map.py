"""
Canonical field registry.

Maps the flat, extractor-specific tag namespace (EXIF IFD, IPTC IIM and XMP
keys as emitted by ExifTool) onto nine canonical authorship fields. Each field
lists its aliases in extraction priority order and carries the weight used
for survival scoring.

The table is append-only: fields and aliases may be added, never removed or
renamed, since stored results and dashboards key off the canonical name.
"""

import logging
import math
import structlog
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Iterable, Iterator, List, Optional, Tuple

from survival_lab import config
from survival_lab.core.utils import stringify_tag_value
from survival_lab.models.metadata import (
    CanonicalFieldDefinition, CanonicalValue, ContainerValue, MetadataContainer, TagAlias,
)

logger = structlog.wrap_logger(logging.getLogger(__name__))

__all__ = [
    "RegistryError",
    "RegistryWeightError",
    "CANONICAL_FIELDS",
    "CanonicalFieldRegistry",
    "REGISTRY",
    "resolve_canonical",
    "get_field_def",
    "extract_canonical_value",
    "extract_all_container_values",
    "total_weight",
]

EXIF = MetadataContainer.EXIF
IPTC = MetadataContainer.IPTC
XMP = MetadataContainer.XMP


class RegistryError(ValueError):
    """The canonical field table is malformed."""


class RegistryWeightError(RegistryError):
    """Canonical field weights do not sum to 1.0."""


def _field(canonical: str, label: str, weight: float, aliases: Iterable[Tuple[str, MetadataContainer]]) -> CanonicalFieldDefinition:
    return CanonicalFieldDefinition(
        canonical=canonical,
        label=label,
        weight=weight,
        aliases=tuple(TagAlias(raw_key=key, container=container) for key, container in aliases),
    )


CANONICAL_FIELDS: Tuple[CanonicalFieldDefinition, ...] = (
    _field("CREATOR", "Creator / Artist", 0.20, [
        ("Creator", XMP),
        ("Artist", EXIF),
        ("By-line", IPTC),
        ("IPTC:By-line", IPTC),
    ]),
    _field("COPYRIGHT", "Copyright / Rights", 0.25, [
        ("Rights", XMP),
        ("Copyright", EXIF),
        ("CopyrightNotice", IPTC),
        ("IPTC:CopyrightNotice", IPTC),
    ]),
    _field("CREDIT", "Credit Line", 0.10, [
        ("Credit", XMP),
        ("IPTC:Credit", IPTC),
    ]),
    _field("DESCRIPTION", "Description / Caption", 0.15, [
        ("Description", XMP),
        ("ImageDescription", EXIF),
        ("Caption-Abstract", IPTC),
        ("IPTC:Caption-Abstract", IPTC),
    ]),
    _field("KEYWORDS", "Keywords / Subject", 0.10, [
        ("Subject", XMP),
        ("Keywords", IPTC),
        ("IPTC:Keywords", IPTC),
    ]),
    _field("SOURCE", "Source", 0.05, [
        ("Source", XMP),
        ("IPTC:Source", IPTC),
    ]),
    _field("CREATOR_TOOL", "Creator Tool", 0.05, [
        ("CreatorTool", XMP),
        ("Software", EXIF),
    ]),
    _field("TITLE", "Title", 0.05, [
        ("Title", XMP),
        ("ObjectName", IPTC),
        ("IPTC:ObjectName", IPTC),
    ]),
    _field("USAGE_TERMS", "Usage Terms", 0.05, [
        ("UsageTerms", XMP),
        ("XMP-xmpRights:UsageTerms", XMP),
    ]),
)


def _as_tags(tags: Any) -> Mapping:
    # Anything that is not a mapping carries no tags
    return tags if isinstance(tags, Mapping) else {}


class CanonicalFieldRegistry:
    """
    Immutable, ordered table of canonical fields with a case-insensitive alias index.

    Built once at start-up; construction fails fast if the table is malformed
    so a data-entry defect can never silently skew scores.
    """

    def __init__(self, fields: Iterable[CanonicalFieldDefinition], tolerance: float = config.WEIGHT_TOLERANCE):
        self._fields: Tuple[CanonicalFieldDefinition, ...] = tuple(fields)

        by_name = {}
        alias_index = {}
        for definition in self._fields:
            if definition.canonical in by_name:
                logger.error("Duplicate canonical field", canonical=definition.canonical)
                raise RegistryError(f"Duplicate canonical field: {definition.canonical}")
            by_name[definition.canonical] = definition
            for alias in definition.aliases:
                # First declaration owns an alias
                alias_index.setdefault(alias.raw_key.lower(), definition.canonical)

        self._by_name = MappingProxyType(by_name)
        self._alias_index = MappingProxyType(alias_index)

        weight_sum = self.total_weight()
        if not math.isclose(weight_sum, 1.0, rel_tol=0.0, abs_tol=tolerance):
            logger.error("Canonical field weights do not sum to 1.0",
                         total_weight=weight_sum, tolerance=tolerance)
            raise RegistryWeightError(
                f"Canonical field weights sum to {weight_sum!r}, expected 1.0"
            )

        logger.info("Canonical field registry loaded",
                    field_count=len(self._fields),
                    alias_count=len(self._alias_index),
                    total_weight=weight_sum)

    def __iter__(self) -> Iterator[CanonicalFieldDefinition]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    @property
    def fields(self) -> Tuple[CanonicalFieldDefinition, ...]:
        return self._fields

    @property
    def canonical_names(self) -> Tuple[str, ...]:
        return tuple(definition.canonical for definition in self._fields)

    def resolve_canonical(self, raw_key: str) -> Optional[str]:
        """
        Resolve a raw extractor tag key to its canonical field name.

        Matching is exact but case-insensitive. Returns None for keys that are
        not authorship aliases.
        """
        if not isinstance(raw_key, str):
            return None
        return self._alias_index.get(raw_key.lower())

    def get_field_def(self, canonical: str) -> Optional[CanonicalFieldDefinition]:
        return self._by_name.get(canonical)

    def extract_canonical_value(self, tags: Mapping, canonical: str) -> CanonicalValue:
        """
        Return the value of a canonical field from a raw tag dictionary.

        Aliases are walked in declared priority order and the first one with
        non-empty content wins. List values are joined with ", ".
        """
        definition = self.get_field_def(canonical)
        if definition is None:
            return CanonicalValue()

        tags = _as_tags(tags)
        for alias in definition.aliases:
            value = stringify_tag_value(tags.get(alias.raw_key))
            if value:
                return CanonicalValue(value=value, source=alias)

        return CanonicalValue()

    def extract_all_container_values(self, tags: Mapping, canonical: str) -> List[ContainerValue]:
        """
        Return every alias of a canonical field that carries a non-empty value.

        Unlike extract_canonical_value this does not stop at the first hit; it
        is used to track which containers still hold the field.
        """
        definition = self.get_field_def(canonical)
        if definition is None:
            return []

        tags = _as_tags(tags)
        results = []
        for alias in definition.aliases:
            value = stringify_tag_value(tags.get(alias.raw_key))
            if value:
                results.append(ContainerValue(container=alias.container, raw_key=alias.raw_key, value=value))

        return results

    def total_weight(self) -> float:
        return sum(definition.weight for definition in self._fields)


REGISTRY = CanonicalFieldRegistry(CANONICAL_FIELDS)


def resolve_canonical(raw_key: str) -> Optional[str]:
    return REGISTRY.resolve_canonical(raw_key)


def get_field_def(canonical: str) -> Optional[CanonicalFieldDefinition]:
    return REGISTRY.get_field_def(canonical)


def extract_canonical_value(tags: Mapping, canonical: str) -> CanonicalValue:
    return REGISTRY.extract_canonical_value(tags, canonical)


def extract_all_container_values(tags: Mapping, canonical: str) -> List[ContainerValue]:
    return REGISTRY.extract_all_container_values(tags, canonical)


def total_weight() -> float:
    return REGISTRY.total_weight()
