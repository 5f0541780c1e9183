"""Unit tests for Stage 3 row expansion and equal distribution."""

from __future__ import annotations

import pytest

from whip_pipeline.config import PipelineConfig
from whip_pipeline.lookup.resolver import resolve
from whip_pipeline.models import LengthRange, LookupRecord, NaturalLanguageSpec
from whip_pipeline.stages.stage1_parse import parse
from whip_pipeline.stages.stage3_expand import (
    discretize_lengths,
    distribute,
    expand,
    expand_pattern,
    plan_distribution,
    render_pattern,
)

TABLE = (
    LookupRecord(
        receptacle="CS8269A",
        description="IEC 60309 pin and sleeve",
        cable_type="FMC",
        whip_length="25",
        tail_length="6",
        label_color="White",
        conduit_size="3/4",
    ),
)


def _spec(total: int, lengths: tuple[int, int], colors: tuple[str, ...]) -> NaturalLanguageSpec:
    return NaturalLanguageSpec(
        total_quantity=total,
        receptacle_type="CS8269A",
        conduit_type="LMZC",
        length_range=LengthRange(minimum=lengths[0], maximum=lengths[1]),
        colors=colors,
    )


def test_distribute_splits_evenly_with_remainder_first() -> None:
    quantities = distribute(860, 8)

    assert quantities == [108, 108, 108, 108, 107, 107, 107, 107]
    assert sum(quantities) == 860
    assert max(quantities) - min(quantities) <= 1
    assert distribute(10, 3) == [4, 3, 3]
    assert distribute(0, 4) == [0, 0, 0, 0]


def test_discretize_lengths_uses_step_and_keeps_explicit_lists() -> None:
    assert discretize_lengths(LengthRange(20, 30), 5) == (20, 25, 30)
    assert discretize_lengths(LengthRange(20, 32), 5) == (20, 25, 30)
    assert discretize_lengths(LengthRange(30, 50, discrete=(50, 30)), 5) == (50, 30)
    with pytest.raises(ValueError, match="must be positive"):
        discretize_lengths(LengthRange(20, 30), 0)


def test_plan_distribution_orders_lengths_outer_colors_inner() -> None:
    """Remainder units go to the first configurations in enumeration order."""

    summary = plan_distribution(_spec(7, (20, 25), ("Red", "Blue")))

    assert summary.configurations_count == 4
    assert summary.base_quantity_per_config == 1
    assert summary.remainder == 3
    assert summary.allocations == (
        (20, "Red", 2),
        (20, "Blue", 2),
        (25, "Red", 2),
        (25, "Blue", 1),
    )


def test_plan_distribution_860_over_eight_configurations() -> None:
    summary = plan_distribution(_spec(860, (20, 25), ("Red", "Blue", "Green", "Yellow")))

    quantities = [quantity for _, _, quantity in summary.allocations]
    assert summary.configurations_count == 8
    assert sum(quantities) == 860
    assert max(quantities) - min(quantities) <= 1


def test_expand_pattern_replicates_quantity_rows() -> None:
    pattern = parse("CS8269A, LMZC, 20, 10, Red !43")

    rows = expand_pattern(pattern, resolve(pattern.receptacle, TABLE), start_line=5)

    assert len(rows) == 43
    assert [row.line_number for row in rows] == list(range(5, 48))
    assert [row.input_occurrence for row in rows] == list(range(1, 44))
    stripped = {(row.receptacle, row.cable_type, row.whip_length, row.label_color) for row in rows}
    assert stripped == {("CS8269A", "LMZC", 20.0, "Red")}
    assert all(row.found_in_lookup and row.source_index == 0 for row in rows)


def test_expand_pattern_fills_missing_values_from_lookup() -> None:
    pattern = parse("CS8269A")

    (row,) = expand_pattern(pattern, resolve(pattern.receptacle, TABLE))

    assert row.cable_type == "FMC"
    assert row.whip_length == 25.0
    assert row.tail_length == 6.0
    assert row.label_color == "White"
    assert row.conduit_size == "3/4"
    assert render_pattern(row) == "CS8269A, FMC, 25, 6, White"


def test_expand_marks_unresolved_receptacles() -> None:
    pattern = parse("ZZZNOTFOUND")

    (row,) = expand(pattern, resolve(pattern.receptacle, TABLE))

    assert row.receptacle == "*ZZZNOTFOUND"
    assert not row.found_in_lookup
    assert row.matched_in == "Default (Not Found)"
    assert row.error == 'Pattern "ZZZNOTFOUND" not found in MasterBubbleUpLookup data'


def test_expand_specification_emits_total_rows_in_sequence() -> None:
    spec = _spec(9, (20, 30), ("Red",))

    rows = expand(
        spec,
        resolve(spec.receptacle_type, TABLE),
        start_line=3,
        input_pattern="Need 9 whips",
        config=PipelineConfig(length_step=5),
    )

    assert len(rows) == 9
    assert [row.line_number for row in rows] == list(range(3, 12))
    assert [row.whip_length for row in rows] == [20.0] * 3 + [25.0] * 3 + [30.0] * 3
    assert {row.cable_type for row in rows} == {"LMZC"}
    assert {row.input_pattern for row in rows} == {"Need 9 whips"}
