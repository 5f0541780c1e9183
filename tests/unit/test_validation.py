"""Unit tests for run invariant validation and summary counters."""

from __future__ import annotations

import dataclasses

import pytest

from whip_pipeline.models import ExpandedRow, ProcessingResult
from whip_pipeline.validation import (
    collect_receptacle_counts,
    collect_unresolved,
    validate_results,
    validate_rows,
)


def _row(line_number: int, receptacle: str = "CS8269A", found: bool = True) -> ExpandedRow:
    return ExpandedRow(
        line_number=line_number,
        input_pattern=receptacle,
        input_occurrence=1,
        receptacle=receptacle,
        cable_type="LMZC",
        whip_length=20.0,
        tail_length=10.0,
        label_color="Red",
        found_in_lookup=found,
        matched_in="MasterBubbleUpLookup" if found else "Default (Not Found)",
    )


def _result(*rows: ExpandedRow) -> ProcessingResult:
    return ProcessingResult(
        input_pattern=rows[0].input_pattern if rows else "",
        is_natural_language=False,
        is_quantity_based=False,
        match_count=len(rows),
        found_in_sheets=(),
        generated_patterns=tuple("pattern" for _ in rows),
        total_generated_rows=len(rows),
        rows=tuple(rows),
    )


def test_validate_results_accepts_sequential_rows() -> None:
    validate_results([_result(_row(1), _row(2)), _result(_row(3, "*UNKNOWNX", found=False))])


def test_validate_rows_rejects_repeated_line_numbers() -> None:
    with pytest.raises(ValueError, match="line number not greater than previous 2"):
        validate_rows([_row(1), _row(2), _row(2)])


def test_validate_results_rejects_row_count_mismatch() -> None:
    broken = dataclasses.replace(_result(_row(1)), total_generated_rows=3)

    with pytest.raises(ValueError, match="total_generated_rows=3"):
        validate_results([broken])


def test_validation_error_preview_is_truncated() -> None:
    rows = [_row(1) for _ in range(30)]

    with pytest.raises(ValueError, match=r"29 errors:(.|\n)*- \.\.\. and 4 more"):
        validate_rows(rows)


def test_collect_counts() -> None:
    rows = [_row(1), _row(2), _row(3, "*UNKNOWNX", found=False), _row(4, "*UNKNOWNX", False)]

    assert collect_receptacle_counts(rows) == {"CS8269A": 2, "*UNKNOWNX": 2}
    assert collect_unresolved(rows) == {"*UNKNOWNX": 2}
