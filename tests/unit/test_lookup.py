"""Unit tests for lookup field aliases, repository loading and resolution."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from whip_pipeline.lookup.fields import cell_text, read_field, record_from_mapping
from whip_pipeline.lookup.repository import LookupRepository, parse_lookup_json
from whip_pipeline.lookup.resolver import resolve, token_matches


def test_record_from_mapping_reads_nested_specification_aliases() -> None:
    record = record_from_mapping(
        {
            "description": "IEC pin and sleeve whip",
            "specifications": {
                "chooseReceptacle": "CS8269A",
                "cableType": "LMZC",
                "whipLength": 20,
                "description": "nested loses",
            },
        }
    )

    assert record.receptacle == "CS8269A"
    assert record.cable_type == "LMZC"
    assert record.whip_length == "20"
    assert record.description == "IEC pin and sleeve whip"


def test_read_field_ignores_key_case_and_rejects_unknown_fields() -> None:
    assert read_field({" choose RECEPTACLE ": "460C9W"}, "choose_receptacle") == "460C9W"
    assert read_field({}, "voltage") == ""
    with pytest.raises(KeyError):
        read_field({}, "not_a_field")


def test_resolve_returns_first_matching_row_with_its_index() -> None:
    table = [
        record_from_mapping({"Receptacle": "460C9W"}),
        record_from_mapping({"Receptacle": "460R9W", "Model": "CS8269A"}),
        record_from_mapping({"Receptacle": "CS8269A"}),
    ]

    resolution = resolve("cs8269a", table)

    assert resolution.found
    assert resolution.source_index == 1
    assert resolution.matched_field == "model"
    assert resolution.matched_in == "MasterBubbleUpLookup"
    assert resolution.record.receptacle == "460R9W"


def test_resolve_unknown_token_builds_flagged_default() -> None:
    resolution = resolve("ZZZNOTFOUND", [record_from_mapping({"Receptacle": "CS8269A"})])

    assert not resolution.found
    assert resolution.record.receptacle == "*ZZZNOTFOUND"
    assert resolution.matched_in == "Default (Not Found)"
    assert resolution.source_index is None
    assert resolution.error == 'Pattern "ZZZNOTFOUND" not found in MasterBubbleUpLookup data'


def test_token_matches_is_substring_and_case_insensitive() -> None:
    assert token_matches("cs8269a", "PW-CS8269A-01")
    assert not token_matches("", "CS8269A")
    assert not token_matches("CS8269", "460C9W")


def test_parse_lookup_json_accepts_component_dumps() -> None:
    records = parse_lookup_json({"components": [{"partNumber": "CS8269A"}, {"model": "460C9W"}]})

    assert [record.receptacle for record in records] == ["CS8269A", "460C9W"]
    with pytest.raises(ValueError):
        parse_lookup_json({"unexpected": 1})
    with pytest.raises(ValueError, match="item 1 is not an object"):
        parse_lookup_json(["CS8269A"])


def test_lookup_repository_loads_json_and_reports_sheets(tmp_path: Path) -> None:
    path = tmp_path / "lookup.json"
    path.write_text(
        json.dumps(
            [
                {"receptacle": "CS8269A", "sourceSheet": "Pin and Sleeve", "sourceRow": 4},
                {"receptacle": "460C9W", "sourceSheet": "NEMA"},
            ]
        ),
        encoding="utf-8",
    )

    repository = LookupRepository(path)

    assert len(repository.records) == 2
    assert repository.records[0].source_row == 4
    assert repository.sheet_names == ("Pin and Sleeve", "NEMA")


def test_lookup_repository_rejects_missing_and_unsupported_files(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        LookupRepository(tmp_path / "missing.json").records

    csv_path = tmp_path / "lookup.csv"
    csv_path.write_text("receptacle\nCS8269A\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Unsupported lookup file type"):
        LookupRepository(csv_path).records


def test_cell_text_normalises_spreadsheet_values() -> None:
    assert cell_text(None) == ""
    assert cell_text(20.0) == "20"
    assert cell_text(12.5) == "12.5"
    assert cell_text("  CS8269A ") == "CS8269A"
