"""
Field-level survival classifier.

Reduces a MetadataDiffReport into a weighted 0-100 score (scoreV2) and a
five-tier SurvivalClass, using the canonical field weights.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import List, Sequence

from survival_lab.core.utils import round_half_up
from survival_lab.models.survival import (
    ClassificationResult, FieldScoreDetail, FieldStatus, MetadataDiffReport, SurvivalClass,
)
from .canonical_map import REGISTRY, CanonicalFieldRegistry
from .diff_engine import generate_metadata_diff

__all__ = [
    "STATUS_MULTIPLIER",
    "EXCLUDED_STATUSES",
    "SURVIVAL_CLASS_COLORS",
    "SURVIVAL_CLASS_LABELS",
    "classify_diff",
    "classify_from_tags",
    "class_from_score",
    "class_color",
    "class_label",
]

# Fraction of a field's weight awarded for each status
STATUS_MULTIPLIER = MappingProxyType({
    FieldStatus.PRESERVED: 1.0,
    FieldStatus.MIGRATED: 0.9,
    FieldStatus.TRUNCATED: 0.4,
    FieldStatus.ENCODING_MUTATION: 0.3,
    FieldStatus.MODIFIED: 0.2,
    FieldStatus.STRIPPED: 0.0,
    FieldStatus.REGENERATED: 0.0,
    FieldStatus.ABSENT: 0.0,
})

# Neither rewarded nor penalised: left out of both numerator and denominator
EXCLUDED_STATUSES = frozenset({FieldStatus.ABSENT, FieldStatus.REGENERATED})

SURVIVAL_CLASS_COLORS = MappingProxyType({
    SurvivalClass.PRISTINE: "#22c55e",
    SurvivalClass.SAFE: "#4ade80",
    SurvivalClass.DEGRADED: "#facc15",
    SurvivalClass.HOSTILE: "#f97316",
    SurvivalClass.DESTRUCTIVE: "#ef4444",
})

SURVIVAL_CLASS_LABELS = MappingProxyType({
    SurvivalClass.PRISTINE: "Pristine",
    SurvivalClass.SAFE: "Safe",
    SurvivalClass.DEGRADED: "Degraded",
    SurvivalClass.HOSTILE: "Hostile",
    SurvivalClass.DESTRUCTIVE: "Destructive",
})


def class_from_score(score: float) -> SurvivalClass:
    """Map a 0-100 score onto its class; lower bounds are inclusive."""
    if score >= 100:
        return SurvivalClass.PRISTINE
    if score >= 80:
        return SurvivalClass.SAFE
    if score >= 50:
        return SurvivalClass.DEGRADED
    if score >= 20:
        return SurvivalClass.HOSTILE
    return SurvivalClass.DESTRUCTIVE


def class_color(survival_class: SurvivalClass) -> str:
    return SURVIVAL_CLASS_COLORS[SurvivalClass(survival_class)]


def class_label(survival_class: SurvivalClass) -> str:
    return SURVIVAL_CLASS_LABELS[SurvivalClass(survival_class)]


def _labels(details: Sequence[FieldScoreDetail], status: FieldStatus) -> List[str]:
    return [detail.label for detail in details if detail.status == status]


def _build_summary(
    score: int,
    survival_class: SurvivalClass,
    report: MetadataDiffReport,
    details: Sequence[FieldScoreDetail],
) -> str:
    parts = [f"Score: {score}/100 — {class_label(survival_class)}"]

    stripped = _labels(details, FieldStatus.STRIPPED)
    corrupted = _labels(details, FieldStatus.ENCODING_MUTATION)
    truncated = _labels(details, FieldStatus.TRUNCATED)

    if stripped:
        parts.append(f"Stripped: {', '.join(stripped)}")
    if corrupted:
        parts.append(f"Encoding issues: {', '.join(corrupted)}")
    if truncated:
        parts.append(f"Truncated: {', '.join(truncated)}")

    for retention in report.container_retention:
        if retention.baseline_count > 0:
            parts.append(f"{retention.container.value}: {retention.retention_pct}% retention")

    return " | ".join(parts)


def classify_diff(report: MetadataDiffReport) -> ClassificationResult:
    """
    Compute the weighted survival score and class for a diff report.

    Each authored field contributes its weight to the denominator and
    weight * multiplier to the numerator. ABSENT and REGENERATED fields are
    excluded entirely; when every field is excluded the score is 100 since
    nothing was ever at risk.
    """
    details = []
    weight_at_risk = 0.0
    weight_earned = 0.0

    for field_diff in report.fields:
        if field_diff.status in EXCLUDED_STATUSES:
            details.append(FieldScoreDetail(
                canonical=field_diff.canonical,
                label=field_diff.label,
                weight=field_diff.weight,
                status=field_diff.status,
                multiplier=0.0,
                earned=0.0,
            ))
            continue

        multiplier = STATUS_MULTIPLIER[field_diff.status]
        earned = field_diff.weight * multiplier
        weight_at_risk += field_diff.weight
        weight_earned += earned

        details.append(FieldScoreDetail(
            canonical=field_diff.canonical,
            label=field_diff.label,
            weight=field_diff.weight,
            status=field_diff.status,
            multiplier=multiplier,
            earned=earned,
        ))

    score = round_half_up(weight_earned / weight_at_risk * 100) if weight_at_risk > 0 else 100
    survival_class = class_from_score(score)

    return ClassificationResult(
        score_v2=score,
        survival_class=survival_class,
        field_details=tuple(details),
        container_retention=report.container_retention,
        summary=_build_summary(score, survival_class, report, details),
    )


def classify_from_tags(
    baseline_tags: Mapping,
    scenario_tags: Mapping,
    registry: CanonicalFieldRegistry = REGISTRY,
) -> ClassificationResult:
    """One-shot helper: diff the two tag sets, then classify the report."""
    return classify_diff(generate_metadata_diff(baseline_tags, scenario_tags, registry))
