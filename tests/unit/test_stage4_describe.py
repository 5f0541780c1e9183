"""Unit tests for Stage 4 expression generation."""

from __future__ import annotations

from whip_pipeline.models import ExpandedRow, ProcessingResult
from whip_pipeline.stages.stage4_describe import describe


def _row(receptacle: str = "CS8269A", line_number: int = 1) -> ExpandedRow:
    return ExpandedRow(
        line_number=line_number,
        input_pattern="CS8269A, LMZC, 20, 10, Red",
        input_occurrence=1,
        receptacle=receptacle,
        cable_type="LMZC",
        whip_length=20.0,
        tail_length=10.0,
        label_color="Red",
        found_in_lookup=True,
        matched_in="MasterBubbleUpLookup",
    )


def _result(rows: tuple[ExpandedRow, ...]) -> ProcessingResult:
    return ProcessingResult(
        input_pattern="CS8269A, LMZC, 20, 10, Red",
        is_natural_language=False,
        is_quantity_based=False,
        match_count=len(rows),
        found_in_sheets=(),
        generated_patterns=(),
        total_generated_rows=len(rows),
        rows=rows,
    )


def test_describe_row_builds_formula_and_part_numbers() -> None:
    expressions = describe(_row(line_number=12))

    assert [item.type for item in expressions] == ["auto_fill", "part_number", "drawing_number"]
    assert expressions[0].expression == (
        '=IFERROR(VLOOKUP("CS8269A",MasterBubbleUpLookup!A:Z,2,FALSE),"*CS8269A")'
    )
    assert expressions[1].expression == "PW20K-CS8269AT-D0012SAL1234"
    assert expressions[2].expression == "PWxx-CS8269AT-xxSALx(103)"


def test_describe_result_adds_pricing_expressions() -> None:
    expressions = describe(_result((_row(),)))

    by_type = {item.type: item.expression for item in expressions}
    assert by_type["base_price"] == "327.2"
    assert by_type["budgetary_text"] == (
        "Whip CS8269A 6AWG 3/4LMZC 20ft, Price to Wesco 2094.1ea"
    )


def test_describe_short_codes_use_lower_base_price() -> None:
    expressions = describe(_result((_row(receptacle="L6-20R"),)))

    assert {item.type: item.expression for item in expressions}["base_price"] == "287.2"


def test_describe_degrades_to_empty_list() -> None:
    """Malformed templates and empty results yield no expressions."""

    assert describe(_row(), row_templates=(("broken", "{missing_key}", ""),)) == []
    assert describe(_row(), row_templates=(("broken", "{line:zz}", ""),)) == []
    assert describe(_result(())) == []
