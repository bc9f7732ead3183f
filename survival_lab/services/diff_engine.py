"""
Metadata diff engine.

Compares the raw tag dictionaries of a baseline file and a scenario file
(the same image after a platform round trip) and assigns every canonical
field exactly one FieldStatus. Pure and deterministic: no I/O, never raises,
never mutates its inputs.
"""

from collections.abc import Mapping
from typing import Dict, List, Optional, Tuple

from survival_lab.core.utils import normalise_whitespace, round_half_up
from survival_lab.models.metadata import CanonicalFieldDefinition, ContainerValue, MetadataContainer
from survival_lab.models.survival import ContainerRetention, FieldDiff, FieldStatus, MetadataDiffReport
from .canonical_map import REGISTRY, CanonicalFieldRegistry

__all__ = [
    "MOJIBAKE_SIGNATURES",
    "find_mojibake",
    "has_encoding_mutation",
    "is_truncation",
    "generate_metadata_diff",
    "summarise_diff",
]

# Byte sequences left behind when UTF-8 text is decoded as Latin-1/cp1252
# (or cp437/cp850 for the box-drawing forms), plus the replacement character.
MOJIBAKE_SIGNATURES: Tuple[str, ...] = (
    "Â©", "Â®", "Â°", "Â·",
    "Ã©", "Ã¨", "Ã¡", "Ã³", "Ã¶", "Ã¼", "Ã¤", "Ã±", "Ã§", "ÃŸ",
    "Ã\u0084", "Ã\u0096", "Ã\u009c", "Ã‰",
    "â€™", "â€˜", "â€œ", "â€\u009d", "â€“", "â€”", "â€¦",
    "┬®", "┬⌐",
    "\ufffd",
)


def find_mojibake(value: Optional[str]) -> Tuple[str, ...]:
    """Return every known corruption signature present in value."""
    if not value:
        return ()
    return tuple(signature for signature in MOJIBAKE_SIGNATURES if signature in value)


def has_encoding_mutation(baseline: Optional[str], scenario: Optional[str]) -> bool:
    """True if the scenario carries a corruption signature the baseline does not."""
    baseline_signatures = set(find_mojibake(baseline))
    return any(signature not in baseline_signatures for signature in find_mojibake(scenario))


def is_truncation(baseline: Optional[str], scenario: Optional[str]) -> bool:
    """True if the normalised scenario is a strictly shorter leading prefix of the baseline."""
    normalised_baseline = normalise_whitespace(baseline)
    normalised_scenario = normalise_whitespace(scenario)
    if not normalised_baseline or not normalised_scenario:
        return False
    return (len(normalised_scenario) < len(normalised_baseline)
            and normalised_baseline.startswith(normalised_scenario))


def _containers(hits: List[ContainerValue]) -> Tuple[MetadataContainer, ...]:
    # Unique, in alias order
    seen = []
    for hit in hits:
        if hit.container not in seen:
            seen.append(hit.container)
    return tuple(seen)


def _join(containers: Tuple[MetadataContainer, ...]) -> str:
    return "+".join(container.value for container in containers) or "none"


def _classify_field(
    definition: CanonicalFieldDefinition,
    baseline_value: Optional[str],
    scenario_value: Optional[str],
    baseline_hits: List[ContainerValue],
    scenario_hits: List[ContainerValue],
) -> FieldDiff:
    baseline_containers = _containers(baseline_hits)
    scenario_containers = _containers(scenario_hits)

    def build(status: FieldStatus, note: Optional[str] = None) -> FieldDiff:
        return FieldDiff(
            canonical=definition.canonical,
            label=definition.label,
            weight=definition.weight,
            status=status,
            baseline_value=baseline_value,
            scenario_value=scenario_value,
            baseline_containers=baseline_containers,
            scenario_containers=scenario_containers,
            note=note,
        )

    if not baseline_value and not scenario_value:
        return build(FieldStatus.ABSENT)

    if not baseline_value:
        return build(FieldStatus.REGENERATED, "Value appeared in scenario but was not in baseline")

    if not scenario_value:
        return build(FieldStatus.STRIPPED, f'"{definition.label}" was removed by the platform')

    # Corrupted text would otherwise read as a modification
    if has_encoding_mutation(baseline_value, scenario_value):
        signatures = ", ".join(repr(s) for s in find_mojibake(scenario_value))
        return build(FieldStatus.ENCODING_MUTATION,
                     f"Encoding artefacts detected ({signatures}); possible UTF-8 to Latin-1 corruption")

    if is_truncation(baseline_value, scenario_value):
        return build(FieldStatus.TRUNCATED,
                     f"Value truncated from {len(normalise_whitespace(baseline_value))} "
                     f"to {len(normalise_whitespace(scenario_value))} characters")

    if normalise_whitespace(baseline_value).casefold() == normalise_whitespace(scenario_value).casefold():
        if set(baseline_containers) == set(scenario_containers):
            return build(FieldStatus.PRESERVED)
        return build(FieldStatus.MIGRATED,
                     f"Value preserved but moved: {_join(baseline_containers)} -> {_join(scenario_containers)}")

    return build(FieldStatus.MODIFIED, "Value changed")


def generate_metadata_diff(
    baseline_tags: Mapping,
    scenario_tags: Mapping,
    registry: CanonicalFieldRegistry = REGISTRY,
) -> MetadataDiffReport:
    """
    Generate the field-level diff report between baseline and scenario tags.

    Args:
        baseline_tags: Raw tag dictionary extracted from the original file
        scenario_tags: Raw tag dictionary extracted after the platform round trip
        registry: Canonical field table to diff against

    Returns:
        MetadataDiffReport with one FieldDiff per canonical field
    """
    fields: List[FieldDiff] = []
    baseline_counts: Dict[MetadataContainer, int] = {container: 0 for container in MetadataContainer}
    survived_counts: Dict[MetadataContainer, int] = {container: 0 for container in MetadataContainer}

    for definition in registry:
        baseline_value = registry.extract_canonical_value(baseline_tags, definition.canonical).value
        scenario_value = registry.extract_canonical_value(scenario_tags, definition.canonical).value
        baseline_hits = registry.extract_all_container_values(baseline_tags, definition.canonical)
        scenario_hits = registry.extract_all_container_values(scenario_tags, definition.canonical)

        fields.append(_classify_field(definition, baseline_value, scenario_value, baseline_hits, scenario_hits))

        # Retention is counted per (field, alias) pair
        surviving_keys = {hit.raw_key for hit in scenario_hits}
        for hit in baseline_hits:
            baseline_counts[hit.container] += 1
            if hit.raw_key in surviving_keys:
                survived_counts[hit.container] += 1

    container_retention = tuple(
        ContainerRetention(
            container=container,
            baseline_count=baseline_counts[container],
            survived_count=survived_counts[container],
            # Nothing to lose counts as full retention
            retention_pct=(round_half_up(survived_counts[container] / baseline_counts[container] * 100)
                           if baseline_counts[container] else 100),
        )
        for container in MetadataContainer
    )

    authored = [f for f in fields if f.authored]
    survived = [f for f in authored if f.status in (FieldStatus.PRESERVED, FieldStatus.MIGRATED)]

    field_survival_rate = len(survived) / len(authored) if authored else 1.0
    # False when nothing was authored, even though the rate is 1
    perfect_survival = bool(authored) and all(f.status == FieldStatus.PRESERVED for f in authored)

    return MetadataDiffReport(
        fields=tuple(fields),
        container_retention=container_retention,
        field_survival_rate=field_survival_rate,
        perfect_survival=perfect_survival,
    )


def summarise_diff(report: MetadataDiffReport) -> str:
    """Render a multi-line, human-readable summary of a diff report."""
    lines = []
    authored = report.authored_fields

    if report.perfect_survival:
        lines.append("✓ Perfect survival: all authored metadata preserved.")
    else:
        survived = report.status_counts[FieldStatus.PRESERVED] + report.status_counts[FieldStatus.MIGRATED]
        lines.append(
            f"Survival rate: {round_half_up(report.field_survival_rate * 100)}% "
            f"({survived}/{len(authored)} fields)"
        )

    for field_diff in report.fields:
        if field_diff.status == FieldStatus.STRIPPED:
            lines.append(f"✗ {field_diff.label}: STRIPPED")
        elif field_diff.status == FieldStatus.TRUNCATED:
            lines.append(f"⚠ {field_diff.label}: TRUNCATED ({field_diff.note})")
        elif field_diff.status == FieldStatus.ENCODING_MUTATION:
            lines.append(f"⚠ {field_diff.label}: ENCODING CORRUPTION")
        elif field_diff.status == FieldStatus.MODIFIED:
            lines.append(f"△ {field_diff.label}: MODIFIED")
        elif field_diff.status == FieldStatus.MIGRATED:
            lines.append(f"↻ {field_diff.label}: MIGRATED ({field_diff.note})")

    for retention in report.container_retention:
        if retention.baseline_count > 0:
            lines.append(
                f"  {retention.container.value}: {retention.retention_pct}% retention "
                f"({retention.survived_count}/{retention.baseline_count})"
            )

    return "\n".join(lines)
