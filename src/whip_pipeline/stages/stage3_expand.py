"""Stage 3: Expand resolved patterns into one row per ordered whip.

Delimited patterns are replicated ``quantity`` times. Natural-language
specifications are spread evenly over every length x color configuration; the
first ``total % configurations`` configurations (lengths outer, colors inner)
each take one extra unit so the emitted row count always equals the requested
total.
"""

from __future__ import annotations

from whip_pipeline.config import DEFAULT_CONFIG, PipelineConfig
from whip_pipeline.models import (
    DistributionSummary,
    ExpandedRow,
    LengthRange,
    NaturalLanguageSpec,
    ParsedPattern,
    Resolution,
)
from whip_pipeline.stages.stage1_parse import format_length, parse_number


def distribute(total: int, configurations: int) -> list[int]:
    """Split ``total`` units over ``configurations`` slots as evenly as possible.

    Args:
        total: Units to distribute; negative values are treated as zero.
        configurations: Slot count, bounded below by one.

    Returns:
        Per-slot quantities whose sum equals ``max(total, 0)`` and whose
        max-min spread is at most one. Earlier slots receive the remainder.
    """

    total = max(total, 0)
    configurations = max(configurations, 1)
    base, remainder = divmod(total, configurations)
    return [base + (1 if idx < remainder else 0) for idx in range(configurations)]


def discretize_lengths(length_range: LengthRange, step: int) -> tuple[int, ...]:
    """Turn a length range into concrete whip lengths.

    Args:
        length_range: Range or explicit lengths from Stage 2.
        step: Increment in feet between generated lengths.

    Returns:
        Explicit lengths when given, otherwise ``minimum, minimum+step, ...``
        up to and including ``maximum`` when it falls on the grid.

    Raises:
        ValueError: If ``step`` is not positive.
    """

    if step <= 0:
        raise ValueError(f"Length step must be positive, got {step}")
    if length_range.discrete:
        return length_range.discrete
    return tuple(range(length_range.minimum, length_range.maximum + 1, step))


def plan_distribution(
    spec: NaturalLanguageSpec,
    config: PipelineConfig = DEFAULT_CONFIG,
) -> DistributionSummary:
    """Compute per-configuration quantities for a natural-language spec.

    Args:
        spec: Interpreted specification.
        config: Run configuration supplying the length step.

    Returns:
        Distribution summary with allocations in enumeration order.
    """

    lengths = discretize_lengths(spec.length_range, config.length_step)
    colors = spec.colors or ("",)
    configurations = [(length, color) for length in lengths for color in colors]
    quantities = distribute(spec.total_quantity, len(configurations))

    count = max(len(configurations), 1)
    return DistributionSummary(
        total_quantity=spec.total_quantity,
        configurations_count=count,
        base_quantity_per_config=spec.total_quantity // count,
        remainder=spec.total_quantity % count,
        lengths=lengths,
        colors=spec.colors,
        allocations=tuple(
            (length, color, quantity)
            for (length, color), quantity in zip(configurations, quantities)
        ),
    )


def _lookup_length(value: str) -> float:
    parsed = parse_number(value)
    return parsed if parsed is not None else 0.0


def _pick_length(requested: float | None, fallback: str) -> float:
    """Prefer a requested length; ``None``/``0`` fall back to the lookup value."""

    if requested:
        return requested
    return _lookup_length(fallback)


def _row_receptacle(token: str, resolution: Resolution) -> str:
    if resolution.found:
        return resolution.record.receptacle or token
    return resolution.record.receptacle


def expand_pattern(
    pattern: ParsedPattern,
    resolution: Resolution,
    start_line: int = 1,
) -> list[ExpandedRow]:
    """Replicate a delimited pattern ``quantity`` times.

    Values stated in the pattern override lookup values; the lookup fills
    whatever the pattern left unspecified.

    Args:
        pattern: Parsed delimited pattern.
        resolution: Resolver outcome for ``pattern.receptacle``.
        start_line: Line number given to the first emitted row.

    Returns:
        Identical rows apart from ``line_number`` and ``input_occurrence``.
    """

    record = resolution.record
    receptacle = _row_receptacle(pattern.receptacle, resolution)
    cable_type = pattern.conduit_type or record.cable_type
    whip_length = _pick_length(pattern.whip_length, record.whip_length)
    tail_length = _pick_length(pattern.tail_length, record.tail_length)
    label_color = pattern.label_color or record.label_color

    return [
        ExpandedRow(
            line_number=start_line + offset,
            input_pattern=pattern.raw or pattern.receptacle,
            input_occurrence=offset + 1,
            receptacle=receptacle,
            cable_type=cable_type,
            whip_length=whip_length,
            tail_length=tail_length,
            label_color=label_color,
            found_in_lookup=resolution.found,
            matched_in=resolution.matched_in,
            error=resolution.error,
            description=record.description,
            conduit_size=record.conduit_size,
            conductor_awg=record.conductor_awg,
            voltage=record.voltage,
            source_index=resolution.source_index,
        )
        for offset in range(pattern.quantity)
    ]


def expand_specification(
    spec: NaturalLanguageSpec,
    resolution: Resolution,
    input_pattern: str,
    start_line: int = 1,
    config: PipelineConfig = DEFAULT_CONFIG,
) -> list[ExpandedRow]:
    """Emit one row per unit across the equal-distribution matrix.

    Args:
        spec: Interpreted natural-language specification.
        resolution: Resolver outcome for ``spec.receptacle_type``.
        input_pattern: Source text recorded on every row.
        start_line: Line number given to the first emitted row.
        config: Run configuration supplying the length step.

    Returns:
        Exactly ``spec.total_quantity`` rows.
    """

    record = resolution.record
    receptacle = _row_receptacle(spec.receptacle_type, resolution)
    cable_type = spec.conduit_type or record.cable_type

    rows: list[ExpandedRow] = []
    for length, color, quantity in plan_distribution(spec, config).allocations:
        for _ in range(quantity):
            rows.append(
                ExpandedRow(
                    line_number=start_line + len(rows),
                    input_pattern=input_pattern,
                    input_occurrence=len(rows) + 1,
                    receptacle=receptacle,
                    cable_type=cable_type,
                    whip_length=float(length),
                    tail_length=spec.tail_length,
                    label_color=color,
                    found_in_lookup=resolution.found,
                    matched_in=resolution.matched_in,
                    error=resolution.error,
                    description=record.description,
                    conduit_size=record.conduit_size,
                    conductor_awg=record.conductor_awg,
                    voltage=record.voltage,
                    source_index=resolution.source_index,
                )
            )
    return rows


def expand(
    pattern: ParsedPattern | NaturalLanguageSpec,
    resolution: Resolution,
    start_line: int = 1,
    input_pattern: str = "",
    config: PipelineConfig = DEFAULT_CONFIG,
) -> list[ExpandedRow]:
    """Dispatch to pattern replication or equal-distribution expansion."""

    if isinstance(pattern, NaturalLanguageSpec):
        return expand_specification(
            pattern,
            resolution,
            input_pattern=input_pattern,
            start_line=start_line,
            config=config,
        )
    return expand_pattern(pattern, resolution, start_line=start_line)


def render_pattern(row: ExpandedRow) -> str:
    """Render a row back into canonical comma-delimited pattern text."""

    return ", ".join(
        [
            row.receptacle,
            row.cable_type,
            format_length(row.whip_length),
            format_length(row.tail_length),
            row.label_color,
        ]
    )
