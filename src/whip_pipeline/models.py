"""Data models used across pattern expansion pipeline stages.

This module defines explicit immutable row contracts between stages so each stage
has a narrow, testable interface and downstream code can rely on stable fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PatternInput:
    """One raw line taken from a submitted text block."""

    text: str


@dataclass(frozen=True)
class ParsedPattern:
    """Stage 1 pattern parsed from one input line.

    Positional fields that were not supplied stay ``None``. Numeric fields that
    were supplied but could not be read as numbers are stored as ``0.0`` which
    downstream code treats as "unspecified".
    """

    receptacle: str
    conduit_type: str | None = None
    whip_length: float | None = None
    tail_length: float | None = None
    label_color: str | None = None
    quantity: int = 1
    is_natural_language: bool = False
    is_quantity_based: bool = False
    raw: str = ""
    delimiter: str = "comma"


@dataclass(frozen=True)
class LookupRecord:
    """Read-only lookup table row describing one receptacle configuration.

    The typed fields are resolved from ``attributes`` through ordered key
    aliases (see :mod:`whip_pipeline.lookup.fields`). ``attributes`` keeps the
    flattened source mapping so exporters can read columns the core ignores.
    """

    receptacle: str
    description: str = ""
    cable_type: str = ""
    whip_length: str = ""
    tail_length: str = ""
    conduit_size: str = ""
    conductor_awg: str = ""
    voltage: str = ""
    label_color: str = ""
    source_sheet: str = ""
    source_row: int | None = None
    attributes: tuple[tuple[str, str], ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one receptacle token against a lookup table.

    ``source_index`` is the position of the chosen row in the table, kept so a
    reviewer can disambiguate first-match results by hand.
    """

    record: LookupRecord
    found: bool
    matched_in: str
    source_index: int | None = None
    matched_field: str = ""
    error: str | None = None


@dataclass(frozen=True)
class LengthRange:
    """Whip length span requested by a natural-language specification."""

    minimum: int
    maximum: int
    discrete: tuple[int, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class NaturalLanguageSpec:
    """Stage 2 structured reading of a free-form order description."""

    total_quantity: int
    receptacle_type: str
    conduit_type: str
    length_range: LengthRange
    colors: tuple[str, ...] = field(default_factory=tuple)
    features: tuple[str, ...] = field(default_factory=tuple)
    tail_length: float = 10.0


@dataclass(frozen=True)
class ExpandedRow:
    """Stage 3 output row; one physical whip on the order.

    Provenance fields (``found_in_lookup``, ``matched_in``, ``error`` and
    ``source_index``) are copied from the resolver unchanged.
    """

    line_number: int
    input_pattern: str
    input_occurrence: int
    receptacle: str
    cable_type: str
    whip_length: float
    tail_length: float
    label_color: str
    found_in_lookup: bool
    matched_in: str
    error: str | None = None
    description: str = ""
    conduit_size: str = ""
    conductor_awg: str = ""
    voltage: str = ""
    source_index: int | None = None


@dataclass(frozen=True)
class Expression:
    """Presentational generated expression shown next to a result."""

    type: str
    expression: str
    description: str


@dataclass(frozen=True)
class DistributionSummary:
    """Equal-distribution breakdown for a natural-language specification.

    ``allocations`` lists ``(length, color, quantity)`` in the order the
    configurations were enumerated: lengths outer, colors inner. An empty
    color string means the specification named no colors.
    """

    total_quantity: int
    configurations_count: int
    base_quantity_per_config: int
    remainder: int
    lengths: tuple[int, ...]
    colors: tuple[str, ...]
    allocations: tuple[tuple[int, str, int], ...]


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregate output for one input line or natural-language block."""

    input_pattern: str
    is_natural_language: bool
    is_quantity_based: bool
    match_count: int
    found_in_sheets: tuple[str, ...]
    generated_patterns: tuple[str, ...]
    total_generated_rows: int
    rows: tuple[ExpandedRow, ...]
    generated_expressions: tuple[Expression, ...] = field(default_factory=tuple)
    auto_fill_data: dict[str, str] | None = None
    distribution_summary: DistributionSummary | None = None
    parsed: ParsedPattern | None = None
    specification: NaturalLanguageSpec | None = None


@dataclass(frozen=True)
class SheetScan:
    """Per-sheet counters collected while scanning a workbook."""

    name: str
    total_rows: int
    patterns_found: int


@dataclass(frozen=True)
class ScanSummary:
    """Counters for a multi-sheet workbook scan."""

    total_patterns: int
    sheets_analyzed: int
    cells_scanned: int
    sheets: tuple[SheetScan, ...] = field(default_factory=tuple)
