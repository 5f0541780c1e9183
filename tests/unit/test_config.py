"""Unit tests for run configuration defaults and bounds."""

from __future__ import annotations

import pytest

from whip_pipeline.config import DEFAULT_CONFIG, PipelineConfig


def test_default_config_values() -> None:
    assert DEFAULT_CONFIG == PipelineConfig(
        length_step=5,
        default_whip_length=20,
        default_tail_length=10.0,
        lookup_source="MasterBubbleUpLookup",
        neighbor_radius=3,
    )


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"length_step": 0}, "length_step must be positive"),
        ({"default_whip_length": -1}, "default_whip_length must not be negative"),
        ({"default_tail_length": -0.5}, "default_tail_length must not be negative"),
        ({"neighbor_radius": -2}, "neighbor_radius must not be negative"),
    ],
)
def test_config_rejects_out_of_range_values(overrides: dict, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        PipelineConfig(**overrides)
