from survival_lab.models.metadata import MetadataContainer
from survival_lab.models.survival import FieldStatus
from survival_lab.services.diff_engine import (
    find_mojibake, generate_metadata_diff, has_encoding_mutation, is_truncation, summarise_diff,
)

CREATOR_KEYS = {"Creator": None, "Artist": None, "By-line": None, "IPTC:By-line": None}


def test_identical_tags_are_preserved(make_tags):
    report = generate_metadata_diff(make_tags(), make_tags())
    for field_diff in report.fields:
        assert field_diff.status in (FieldStatus.PRESERVED, FieldStatus.ABSENT)
    assert report.perfect_survival is True
    assert report.field_survival_rate == 1
    assert report.get_field("SOURCE").status == FieldStatus.ABSENT
    assert report.get_field("USAGE_TERMS").status == FieldStatus.ABSENT


def test_one_entry_per_field_in_registry_order(make_tags):
    report = generate_metadata_diff(make_tags(), make_tags())
    assert [f.canonical for f in report.fields] == [
        "CREATOR", "COPYRIGHT", "CREDIT", "DESCRIPTION", "KEYWORDS",
        "SOURCE", "CREATOR_TOOL", "TITLE", "USAGE_TERMS",
    ]
    assert report.get_field("COPYRIGHT").weight == 0.25
    assert report.get_field("COPYRIGHT").label == "Copyright / Rights"


def test_creator_stripped(make_tags):
    report = generate_metadata_diff(make_tags(), make_tags(CREATOR_KEYS))
    creator = report.get_field("CREATOR")
    assert creator.status == FieldStatus.STRIPPED
    assert creator.baseline_value == "Jane Doe"
    assert creator.scenario_value is None
    assert report.perfect_survival is False


def test_copyright_stripped(make_tags):
    scenario = make_tags({"Copyright": None, "Rights": None, "CopyrightNotice": None})
    report = generate_metadata_diff(make_tags(), scenario)
    assert report.get_field("COPYRIGHT").status == FieldStatus.STRIPPED


def test_partial_container_loss_is_migrated(make_tags):
    scenario = make_tags({"Artist": None, "By-line": None})
    report = generate_metadata_diff(make_tags(), scenario)
    creator = report.get_field("CREATOR")
    assert creator.status == FieldStatus.MIGRATED
    assert creator.baseline_containers == (MetadataContainer.XMP, MetadataContainer.EXIF, MetadataContainer.IPTC)
    assert creator.scenario_containers == (MetadataContainer.XMP,)
    assert "XMP+EXIF+IPTC -> XMP" in creator.note


def test_gaining_a_container_is_migrated():
    baseline = {"Creator": "Jane Doe"}
    scenario = {"Creator": "Jane Doe", "Artist": "Jane Doe"}
    report = generate_metadata_diff(baseline, scenario)
    assert report.get_field("CREATOR").status == FieldStatus.MIGRATED
    assert report.field_survival_rate == 1
    assert report.perfect_survival is False


def test_value_moving_between_containers_is_migrated():
    report = generate_metadata_diff({"Creator": "Jane Doe"}, {"Artist": "Jane Doe"})
    assert report.get_field("CREATOR").status == FieldStatus.MIGRATED


def test_case_and_whitespace_differences_are_preserved():
    baseline = {"Title": "Sunset   Over\tMountains"}
    scenario = {"Title": "  sunset over mountains "}
    report = generate_metadata_diff(baseline, scenario)
    assert report.get_field("TITLE").status == FieldStatus.PRESERVED


def test_description_truncated(make_tags):
    long_text = "A very long description that goes on and on with details"
    short_text = "A very long description"
    baseline = make_tags({"Description": long_text, "ImageDescription": long_text, "Caption-Abstract": long_text})
    scenario = make_tags({"Description": short_text, "ImageDescription": short_text, "Caption-Abstract": short_text})
    report = generate_metadata_diff(baseline, scenario)
    description = report.get_field("DESCRIPTION")
    assert description.status == FieldStatus.TRUNCATED
    assert "56 to 23" in description.note


def test_truncation_is_case_sensitive():
    report = generate_metadata_diff(
        {"Description": "A very long description"},
        {"Description": "a very long"},
    )
    assert report.get_field("DESCRIPTION").status == FieldStatus.MODIFIED


def test_copyright_encoding_mutation(make_tags):
    mangled = "Â© 2026 Jane Doe"
    scenario = make_tags({"Rights": mangled, "Copyright": mangled, "CopyrightNotice": mangled})
    report = generate_metadata_diff(make_tags(), scenario)
    assert report.get_field("COPYRIGHT").status == FieldStatus.ENCODING_MUTATION


def test_mojibake_is_not_reported_as_modified():
    report = generate_metadata_diff(
        {"Description": "Café terrace at night"},
        {"Description": "CafÃ©"},
    )
    assert report.get_field("DESCRIPTION").status == FieldStatus.ENCODING_MUTATION


def test_corruption_already_in_baseline_is_not_a_mutation():
    report = generate_metadata_diff({"Rights": "Â© 2026 Jane Doe"}, {"Rights": "Â© 2026 Jane Doe"})
    assert report.get_field("COPYRIGHT").status == FieldStatus.PRESERVED


def test_creator_modified(make_tags):
    other = "Platform User 12345"
    scenario = make_tags({"Creator": other, "Artist": other, "By-line": other})
    report = generate_metadata_diff(make_tags(), scenario)
    assert report.get_field("CREATOR").status == FieldStatus.MODIFIED


def test_creator_tool_regenerated(make_tags):
    baseline = make_tags({"CreatorTool": None})
    scenario = make_tags({"CreatorTool": "Adobe Photoshop 25.0"})
    report = generate_metadata_diff(baseline, scenario)
    tool = report.get_field("CREATOR_TOOL")
    assert tool.status == FieldStatus.REGENERATED
    assert tool.authored is False
    assert tool not in report.authored_fields


def test_iptc_container_retention(make_tags, iptc_keys):
    scenario = make_tags({key: None for key in iptc_keys})
    report = generate_metadata_diff(make_tags(), scenario)

    iptc = report.get_container(MetadataContainer.IPTC)
    assert iptc.baseline_count == 5
    assert iptc.survived_count == 0
    assert iptc.retention_pct == 0

    xmp = report.get_container(MetadataContainer.XMP)
    assert xmp.retention_pct == 100
    assert report.get_container(MetadataContainer.EXIF).retention_pct == 100


def test_container_retention_counts_alias_pairs():
    baseline = {"By-line": "Jane", "IPTC:By-line": "Jane", "CopyrightNotice": "© Jane"}
    scenario = {"By-line": "Jane", "CopyrightNotice": "© Jane"}
    report = generate_metadata_diff(baseline, scenario)
    iptc = report.get_container(MetadataContainer.IPTC)
    assert iptc.baseline_count == 3
    assert iptc.survived_count == 2
    assert iptc.retention_pct == 67


def test_container_retention_order_and_defaults():
    report = generate_metadata_diff({"Creator": "Jane"}, {})
    assert [r.container for r in report.container_retention] == [
        MetadataContainer.EXIF, MetadataContainer.IPTC, MetadataContainer.XMP,
    ]
    exif = report.get_container(MetadataContainer.EXIF)
    assert exif.baseline_count == 0
    assert exif.retention_pct == 100
    assert report.get_container(MetadataContainer.XMP).retention_pct == 0


def test_status_counts(make_tags):
    report = generate_metadata_diff(make_tags(), make_tags(CREATOR_KEYS))
    assert set(report.status_counts) == set(FieldStatus)
    assert sum(report.status_counts.values()) == 9
    assert report.status_counts[FieldStatus.STRIPPED] == 1
    assert report.status_counts[FieldStatus.PRESERVED] == 6
    assert report.status_counts[FieldStatus.ABSENT] == 2


def test_field_survival_rate(make_tags):
    report = generate_metadata_diff(make_tags(), make_tags(CREATOR_KEYS))
    # 7 authored fields, creator lost
    assert report.field_survival_rate == 6 / 7


def test_empty_tags():
    report = generate_metadata_diff({}, {})
    assert all(f.status == FieldStatus.ABSENT for f in report.fields)
    assert report.field_survival_rate == 1
    assert report.perfect_survival is False
    assert report.authored_fields == []


def test_malformed_input_never_raises():
    report = generate_metadata_diff(None, "not a dict")
    assert report.status_counts[FieldStatus.ABSENT] == 9
    report = generate_metadata_diff({"Creator": 42, "Subject": [None, "x"]}, {"Creator": "42"})
    assert report.get_field("CREATOR").status == FieldStatus.PRESERVED
    keywords = report.get_field("KEYWORDS")
    assert keywords.status == FieldStatus.STRIPPED
    assert keywords.baseline_value == ", x"


def test_inputs_are_not_mutated(make_tags):
    baseline = make_tags()
    scenario = make_tags(CREATOR_KEYS)
    baseline_copy, scenario_copy = dict(baseline), dict(scenario)
    generate_metadata_diff(baseline, scenario)
    assert baseline == baseline_copy
    assert scenario == scenario_copy


def test_report_serialises_with_camel_case_names(make_tags):
    report = generate_metadata_diff(make_tags(), make_tags())
    payload = report.model_dump(mode="json", by_alias=True)
    assert payload["fieldSurvivalRate"] == 1
    assert payload["perfectSurvival"] is True
    assert payload["containerRetention"][0]["retentionPct"] == 100
    assert payload["statusCounts"]["PRESERVED"] == 7


def test_mojibake_helpers():
    assert find_mojibake("Â© 2026") == ("Â©",)
    assert find_mojibake("clean text") == ()
    assert find_mojibake(None) == ()
    assert has_encoding_mutation("it’s", "itâ€™s")
    assert has_encoding_mutation("Jane", "Jane \ufffd")
    assert not has_encoding_mutation("itâ€™s", "itâ€™s")


def test_is_truncation():
    assert is_truncation("Sunset over mountains", "Sunset over")
    assert is_truncation("Sunset  over mountains", "Sunset over")
    assert not is_truncation("Sunset", "Sunset")
    assert not is_truncation("Sunset", "")


def test_summarise_perfect(make_tags):
    summary = summarise_diff(generate_metadata_diff(make_tags(), make_tags()))
    assert summary.startswith("✓ Perfect survival")
    assert "XMP: 100% retention" in summary


def test_summarise_problems(make_tags):
    scenario = make_tags(dict(CREATOR_KEYS, Title="Sunset"))
    summary = summarise_diff(generate_metadata_diff(make_tags(), scenario))
    lines = summary.splitlines()
    assert lines[0] == "Survival rate: 71% (5/7 fields)"
    assert "✗ Creator / Artist: STRIPPED" in lines
    assert any(line.startswith("⚠ Title: TRUNCATED") for line in lines)


def test_status_counts_cannot_be_changed_in_place(make_tags):
    report = generate_metadata_diff(make_tags(), make_tags())
    counts = report.status_counts
    counts[FieldStatus.STRIPPED] += 5
    assert report.status_counts[FieldStatus.STRIPPED] == 0
    assert report.status_counts[FieldStatus.PRESERVED] == 7


def test_field_status_members():
    assert [status.value for status in FieldStatus] == [
        "PRESERVED", "MIGRATED", "TRUNCATED", "ENCODING_MUTATION",
        "MODIFIED", "STRIPPED", "REGENERATED", "ABSENT",
    ]
