"""
Pydantic models for metadata diff reports and survival classification results.
"""

from typing import Dict, List, Optional, Tuple
from pydantic import Field, computed_field
from enum import Enum

from .metadata import MetadataContainer, SurvivalModel

__all__ = [
    "FieldStatus",
    "FieldDiff",
    "ContainerRetention",
    "MetadataDiffReport",
    "SurvivalClass",
    "FieldScoreDetail",
    "ClassificationResult",
]


class FieldStatus(str, Enum):
    """State of a single canonical field after a platform round trip."""
    PRESERVED = "PRESERVED"                  # same value, same containers
    MIGRATED = "MIGRATED"                    # same value, container set changed
    TRUNCATED = "TRUNCATED"                  # scenario is a leading prefix of baseline
    ENCODING_MUTATION = "ENCODING_MUTATION"  # mojibake introduced by the platform
    MODIFIED = "MODIFIED"                    # value changed materially
    STRIPPED = "STRIPPED"                    # only the baseline carries a value
    REGENERATED = "REGENERATED"              # only the scenario carries a value
    ABSENT = "ABSENT"                        # neither side carries a value


class FieldDiff(SurvivalModel):
    """Diff result for one canonical field."""
    canonical: str = Field(..., description="Canonical field name")
    label: str = Field(..., description="Human label")
    weight: float = Field(..., description="Weight carried from the registry")
    status: FieldStatus = Field(..., description="Survival status")
    baseline_value: Optional[str] = Field(None, description="Priority value in the baseline")
    scenario_value: Optional[str] = Field(None, description="Priority value in the scenario")
    baseline_containers: Tuple[MetadataContainer, ...] = Field(default=(), description="Containers carrying a baseline value")
    scenario_containers: Tuple[MetadataContainer, ...] = Field(default=(), description="Containers carrying a scenario value")
    note: Optional[str] = Field(None, description="Explanation for the UI")

    @property
    def authored(self) -> bool:
        return self.status not in (FieldStatus.ABSENT, FieldStatus.REGENERATED)


class ContainerRetention(SurvivalModel):
    """Per-container retention of baseline alias occurrences."""
    container: MetadataContainer
    baseline_count: int = Field(..., ge=0, description="Non-empty (field, alias) pairs in the baseline")
    survived_count: int = Field(..., ge=0, description="Those pairs still non-empty in the scenario")
    retention_pct: int = Field(..., ge=0, le=100, description="Retention percentage (0-100)")


class MetadataDiffReport(SurvivalModel):
    """Full field-level diff between a baseline and a scenario tag set."""
    fields: Tuple[FieldDiff, ...] = Field(..., description="One entry per canonical field, registry order")
    container_retention: Tuple[ContainerRetention, ...] = Field(..., description="Per-container retention")
    field_survival_rate: float = Field(..., ge=0.0, le=1.0, description="(PRESERVED + MIGRATED) / authored")
    perfect_survival: bool = Field(..., description="True if every authored field is PRESERVED")

    @computed_field(alias="statusCounts")
    @property
    def status_counts(self) -> Dict[FieldStatus, int]:
        """Number of fields per status, recomputed from fields; every status is present."""
        counts = {status: 0 for status in FieldStatus}
        for field_diff in self.fields:
            counts[field_diff.status] += 1
        return counts

    @property
    def authored_fields(self) -> List[FieldDiff]:
        """Fields that carried a value in the baseline."""
        return [f for f in self.fields if f.authored]

    def get_field(self, canonical: str) -> Optional[FieldDiff]:
        for field_diff in self.fields:
            if field_diff.canonical == canonical:
                return field_diff
        return None

    def get_container(self, container: MetadataContainer) -> Optional[ContainerRetention]:
        for retention in self.container_retention:
            if retention.container == container:
                return retention
        return None


class SurvivalClass(str, Enum):
    """Overall classification of how well a platform preserved metadata."""
    PRISTINE = "PRISTINE"        # 100
    SAFE = "SAFE"                # 80-99
    DEGRADED = "DEGRADED"        # 50-79
    HOSTILE = "HOSTILE"          # 20-49
    DESTRUCTIVE = "DESTRUCTIVE"  # 0-19


class FieldScoreDetail(SurvivalModel):
    """Per-field score breakdown for drill-down views."""
    canonical: str
    label: str
    weight: float
    status: FieldStatus
    multiplier: float = Field(..., ge=0.0, le=1.0, description="Fraction of the weight awarded")
    earned: float = Field(..., ge=0.0, description="Points earned out of weight")


class ClassificationResult(SurvivalModel):
    """Weighted survival score, class and supporting detail."""
    score_v2: int = Field(..., ge=0, le=100, description="Weighted score (0-100)")
    survival_class: SurvivalClass
    field_details: Tuple[FieldScoreDetail, ...]
    container_retention: Tuple[ContainerRetention, ...]
    summary: str
