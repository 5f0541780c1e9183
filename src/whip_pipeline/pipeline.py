"""Top-level orchestration for the staged pattern expansion pipeline."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Iterable, Sequence

from whip_pipeline.config import DEFAULT_CONFIG, PipelineConfig
from whip_pipeline.io.pdf_io import read_pdf_block
from whip_pipeline.io.workbook_io import scan_workbook
from whip_pipeline.lookup.repository import LookupRepository
from whip_pipeline.lookup.resolver import resolve
from whip_pipeline.models import (
    ExpandedRow,
    LookupRecord,
    ProcessingResult,
    Resolution,
    ScanSummary,
)
from whip_pipeline.stages.stage1_parse import (
    format_length,
    is_natural_language,
    parse,
    split_lines,
)
from whip_pipeline.stages.stage2_interpret import interpret
from whip_pipeline.stages.stage3_expand import (
    expand_pattern,
    expand_specification,
    plan_distribution,
    render_pattern,
)
from whip_pipeline.stages.stage4_describe import describe
from whip_pipeline.validation import validate_results

logger = logging.getLogger(__name__)

WORKBOOK_SUFFIXES = {".xlsx", ".xlsm"}


@dataclass(frozen=True)
class RunResult:
    """Result bundle returned by :func:`run_pipeline`.

    Attributes:
        results: One processing result per input line or prose block.
        rows: All expanded rows in line-number order.
        scan_summary: Workbook scan counters when the input was a workbook.
    """

    results: tuple[ProcessingResult, ...]
    rows: tuple[ExpandedRow, ...]
    scan_summary: ScanSummary | None = None

    @property
    def unresolved_rows(self) -> tuple[ExpandedRow, ...]:
        """Rows whose receptacle was not found in the lookup table."""

        return tuple(row for row in self.rows if not row.found_in_lookup)


def group_lines(lines: Iterable[str]) -> list[tuple[str, bool]]:
    """Group consecutive natural-language lines into single blocks.

    Args:
        lines: Stripped, non-empty input lines.

    Returns:
        ``(text, is_natural_language)`` items in input order. Delimited lines
        stay one per item; adjacent prose lines are joined with newlines.
    """

    groups: list[tuple[str, bool]] = []
    prose: list[str] = []
    for line in lines:
        if is_natural_language(line):
            prose.append(line)
            continue
        if prose:
            groups.append(("\n".join(prose), True))
            prose = []
        groups.append((line, False))
    if prose:
        groups.append(("\n".join(prose), True))
    return groups


def _auto_fill(row: ExpandedRow, resolution: Resolution) -> dict[str, str]:
    data = {
        "receptacle": row.receptacle,
        "cable_type": row.cable_type,
        "whip_length": format_length(row.whip_length),
        "tail_length": format_length(row.tail_length),
        "label_color": row.label_color,
        "conduit_size": row.conduit_size,
        "conductor_awg": row.conductor_awg,
        "voltage": row.voltage,
    }
    if resolution.found:
        data["source_sheet"] = resolution.record.source_sheet
        if resolution.record.source_row is not None:
            data["source_row"] = str(resolution.record.source_row)
    if resolution.error:
        data["error"] = resolution.error
    return data


def _build_result(
    input_pattern: str,
    rows: Sequence[ExpandedRow],
    resolution: Resolution,
    lookup_source: str,
    **extra,
) -> ProcessingResult:
    """Assemble a :class:`ProcessingResult` and attach its expressions."""

    found_in_sheets: tuple[str, ...] = ()
    if resolution.found and resolution.record.source_sheet:
        found_in_sheets = (resolution.record.source_sheet,)

    result = ProcessingResult(
        input_pattern=input_pattern,
        match_count=len(rows) if resolution.found else 0,
        found_in_sheets=found_in_sheets,
        generated_patterns=tuple(render_pattern(row) for row in rows),
        total_generated_rows=len(rows),
        rows=tuple(rows),
        auto_fill_data=_auto_fill(rows[0], resolution) if rows else None,
        **extra,
    )
    return dataclasses.replace(
        result, generated_expressions=tuple(describe(result, lookup_source=lookup_source))
    )


def process_patterns(
    lines: Iterable[str],
    table: Sequence[LookupRecord],
    config: PipelineConfig = DEFAULT_CONFIG,
    start_line: int = 1,
) -> list[ProcessingResult]:
    """Run parse, interpret, resolve, expand and describe over input lines.

    Args:
        lines: Stripped input lines (see :func:`split_lines`).
        table: Read-only lookup records.
        config: Run configuration.
        start_line: Line number for the first emitted row.

    Returns:
        One result per delimited line or prose block, in input order. Row line
        numbers continue across results.
    """

    results: list[ProcessingResult] = []
    next_line = start_line
    for text, prose in group_lines(lines):
        if prose:
            spec = interpret(text, config)
            resolution = resolve(spec.receptacle_type, table, source_label=config.lookup_source)
            rows = expand_specification(
                spec, resolution, input_pattern=text, start_line=next_line, config=config
            )
            result = _build_result(
                text,
                rows,
                resolution,
                config.lookup_source,
                is_natural_language=True,
                is_quantity_based=False,
                distribution_summary=plan_distribution(spec, config),
                specification=spec,
            )
        else:
            parsed = parse(text)
            resolution = resolve(parsed.receptacle, table, source_label=config.lookup_source)
            rows = expand_pattern(parsed, resolution, start_line=next_line)
            result = _build_result(
                text,
                rows,
                resolution,
                config.lookup_source,
                is_natural_language=False,
                is_quantity_based=parsed.is_quantity_based,
                parsed=parsed,
            )

        if not resolution.found:
            logger.warning("Unresolved receptacle in %r: %s", text, resolution.error)
        results.append(result)
        next_line += len(rows)

    return results


def process_block(
    block: str,
    table: Sequence[LookupRecord],
    config: PipelineConfig = DEFAULT_CONFIG,
) -> list[ProcessingResult]:
    """Process a newline-separated text block; an empty block yields ``[]``."""

    return process_patterns(split_lines(block), table, config)


def process_workbook(
    path: Path,
    table: Sequence[LookupRecord],
    config: PipelineConfig = DEFAULT_CONFIG,
) -> RunResult:
    """Scan a workbook and process each sheet as an independent block.

    Results are concatenated in sheet order and row numbering continues from
    one sheet to the next.

    Args:
        path: Source workbook.
        table: Read-only lookup records.
        config: Run configuration.

    Returns:
        Run bundle including the scan summary.
    """

    patterns_by_sheet, summary = scan_workbook(path, config)
    results: list[ProcessingResult] = []
    next_line = 1
    for sheet_name, patterns in patterns_by_sheet.items():
        sheet_results = process_patterns(patterns, table, config, start_line=next_line)
        logger.debug("Sheet %s produced %d results", sheet_name, len(sheet_results))
        results.extend(sheet_results)
        next_line += sum(result.total_generated_rows for result in sheet_results)

    rows = tuple(row for result in results for row in result.rows)
    return RunResult(results=tuple(results), rows=rows, scan_summary=summary)


def run_pipeline(
    input_path: Path,
    lookup_path: Path,
    config: PipelineConfig = DEFAULT_CONFIG,
    page_start: int | None = None,
    page_end: int | None = None,
) -> RunResult:
    """Execute all stages from an input file through validated rows.

    Args:
        input_path: Text, workbook (``.xlsx``) or PDF input.
        lookup_path: Lookup workbook or JSON file.
        config: Run configuration.
        page_start: 1-based first PDF page, PDF input only.
        page_end: 1-based last PDF page, PDF input only.

    Returns:
        ``RunResult`` with results, flattened rows and optional scan summary.

    Raises:
        FileNotFoundError: If the input or lookup file does not exist.
        ValueError: If the produced rows break run invariants.
    """

    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")

    table = LookupRepository(lookup_path).records
    suffix = input_path.suffix.lower()
    if suffix in WORKBOOK_SUFFIXES:
        run = process_workbook(input_path, table, config)
    else:
        if suffix == ".pdf":
            block = read_pdf_block(input_path, page_start=page_start, page_end=page_end)
        else:
            block = input_path.read_text(encoding="utf-8")
        results = process_block(block, table, config)
        run = RunResult(
            results=tuple(results),
            rows=tuple(row for result in results for row in result.rows),
        )

    validate_results(run.results)
    logger.info(
        "Processed %d patterns into %d rows (%d unresolved)",
        len(run.results),
        len(run.rows),
        len(run.unresolved_rows),
    )
    return run
