"""
Pydantic models describing the canonical authorship fields and the raw tags
that feed them.
"""

from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from enum import Enum

__all__ = [
    "SurvivalModel",
    "MetadataContainer",
    "TagAlias",
    "CanonicalFieldDefinition",
    "CanonicalValue",
    "ContainerValue",
]


class SurvivalModel(BaseModel):
    """Immutable base model; serialises with camelCase aliases for manifests."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class MetadataContainer(str, Enum):
    """Metadata blocks an image file can carry."""
    EXIF = "EXIF"
    IPTC = "IPTC"
    XMP = "XMP"


class TagAlias(SurvivalModel):
    """A raw extractor tag key and the container it lives in."""
    raw_key: str = Field(..., description="Raw key as emitted by the extractor (e.g. 'By-line')")
    container: MetadataContainer = Field(..., description="Container the tag belongs to")


class CanonicalFieldDefinition(SurvivalModel):
    """One canonical authorship field and every tag alias that can carry it."""
    canonical: str = Field(..., description="Stable canonical name (e.g. 'CREATOR')")
    label: str = Field(..., description="Human label for dashboards")
    weight: float = Field(..., ge=0.0, le=1.0, description="Importance weight used in scoring")
    aliases: Tuple[TagAlias, ...] = Field(..., description="Aliases in extraction priority order")


class CanonicalValue(SurvivalModel):
    """Result of a priority-ordered extraction: the winning value and its alias."""
    value: Optional[str] = Field(None, description="First non-empty trimmed value")
    source: Optional[TagAlias] = Field(None, description="Alias the value was read from")


class ContainerValue(SurvivalModel):
    """A single non-empty alias hit, used for container bookkeeping."""
    container: MetadataContainer
    raw_key: str
    value: str
