"""Run configuration shared by the pipeline stages and the CLI."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable knobs for one processing run.

    Attributes:
        length_step: Increment in feet used to discretize a natural-language
            length range into concrete whip lengths.
        default_whip_length: Whip length used when a natural-language block
            names no range.
        default_tail_length: Tail length used when a natural-language block
            names none.
        lookup_source: Label recorded in ``matched_in`` for resolved rows.
        neighbor_radius: Cells on each side of a receptacle code inspected when
            rebuilding a pattern during a workbook scan.
    """

    length_step: int = 5
    default_whip_length: int = 20
    default_tail_length: float = 10.0
    lookup_source: str = "MasterBubbleUpLookup"
    neighbor_radius: int = 3

    def __post_init__(self) -> None:
        if self.length_step <= 0:
            raise ValueError(f"length_step must be positive, got {self.length_step}")
        if self.default_whip_length < 0:
            raise ValueError(
                f"default_whip_length must not be negative, got {self.default_whip_length}"
            )
        if self.default_tail_length < 0:
            raise ValueError(
                f"default_tail_length must not be negative, got {self.default_tail_length}"
            )
        if self.neighbor_radius < 0:
            raise ValueError(f"neighbor_radius must not be negative, got {self.neighbor_radius}")


DEFAULT_CONFIG = PipelineConfig()
