"""Unit tests for Stage 2 natural-language interpretation."""

from __future__ import annotations

import logging

import pytest

from whip_pipeline.config import PipelineConfig
from whip_pipeline.models import LengthRange
from whip_pipeline.stages.stage2_interpret import (
    extract_colors,
    extract_conduit,
    extract_features,
    extract_quantities,
    extract_tail_length,
    interpret,
)

ORDER_860 = "\n".join(
    [
        "Need 860 power whips total with IEC pin and sleeve receptacles.",
        "Liquid tight conduit, lengths ranging from 20' to 25'.",
        "Colors: red, blue, green, yellow.",
    ]
)


def test_interpret_reads_large_order_block() -> None:
    """Facts spread over several lines should all land on one specification."""

    spec = interpret(ORDER_860)

    assert spec.total_quantity == 860
    assert spec.receptacle_type == "CS8269A"
    assert spec.conduit_type == "LMZC"
    assert spec.length_range == LengthRange(minimum=20, maximum=25)
    assert spec.colors == ("Red", "Blue", "Green", "Yellow")
    assert spec.tail_length == 10.0


def test_interpret_reads_explicit_length_list() -> None:
    spec = interpret("Need 10 whips with lengths: 30, 40, 50. Color red.")

    assert spec.total_quantity == 10
    assert spec.length_range == LengthRange(minimum=30, maximum=50, discrete=(30, 40, 50))
    assert spec.colors == ("Red",)


def test_interpret_defaults_from_config() -> None:
    config = PipelineConfig(default_whip_length=35, default_tail_length=6.0)

    spec = interpret("power whip needed", config)

    assert spec.total_quantity == 1
    assert spec.receptacle_type == ""
    assert spec.conduit_type == ""
    assert spec.length_range == LengthRange(minimum=35, maximum=35)
    assert spec.colors == ()
    assert spec.tail_length == 6.0


def test_extract_colors_only_reads_color_sentences_and_dedupes() -> None:
    assert extract_colors("Need 4 whips for the red room. Colors: blue.") == ("Blue",)
    assert extract_colors("Label colors: grey, gray, red") == ("Gray", "Red")


def test_extract_conduit_prefers_longer_alias_and_ignores_lowercase_codes() -> None:
    assert extract_conduit("liquidtight flexible metal conduit") == "LFMC"
    assert extract_conduit("flexible metal conduit") == "FMC"
    assert extract_conduit("so please ship them soon") == ""
    assert extract_conduit("run them in MC") == "MC"


def test_extract_features_and_tail_length() -> None:
    assert extract_features("IP67 bell box, 60 amp, #6 AWG, 5 wires") == (
        "IP67 bell box",
        "60A",
        "#6 AWG",
        "5 wires",
    )
    assert extract_tail_length("with 8ft tails") == 8.0
    assert extract_tail_length("tail length of 12") == 12.0
    assert extract_tail_length("no mention") is None


def test_interpret_warns_when_merged_orders_state_several_quantities(
    caplog: pytest.LogCaptureFixture,
) -> None:
    block = "Need 10 whips, colors red\nNeed 20 whips, colors blue"

    with caplog.at_level(logging.WARNING, logger="whip_pipeline.stages.stage2_interpret"):
        spec = interpret(block)

    assert spec.total_quantity == 10
    assert extract_quantities(block) == (10, 20)
    assert "several quantities [10, 20]; using 10" in caplog.text


def test_interpret_single_quantity_does_not_warn(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="whip_pipeline.stages.stage2_interpret"):
        interpret(ORDER_860)

    assert caplog.records == []
