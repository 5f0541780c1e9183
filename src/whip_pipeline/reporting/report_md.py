"""Markdown report generation for pipeline run summaries."""

from __future__ import annotations

from typing import Iterable, Sequence

from whip_pipeline.models import ProcessingResult, ScanSummary
from whip_pipeline.stages.stage1_parse import format_length
from whip_pipeline.validation import collect_receptacle_counts, collect_unresolved


def _markdown_table(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    """Render a deterministic GitHub-flavored markdown table.

    Args:
        headers: Table header labels.
        rows: Table body rows as string sequences.

    Returns:
        Markdown table text.
    """

    line_header = "| " + " | ".join(headers) + " |"
    line_sep = "| " + " | ".join("---" for _ in headers) + " |"
    body = ["| " + " | ".join(row) + " |" for row in rows]
    return "\n".join([line_header, line_sep, *body])


def _one_line(text: str) -> str:
    return text.replace("\n", " / ").replace("|", "\\|")


def build_report_md(
    results: Sequence[ProcessingResult],
    scan_summary: ScanSummary | None = None,
) -> str:
    """Build the markdown report for one pipeline run.

    Args:
        results: Processing results in run order.
        scan_summary: Workbook scan counters, when the input was a workbook.

    Returns:
        Full markdown content with summary tables.
    """

    rows = [row for result in results for row in result.rows]

    receptacle_counts = collect_receptacle_counts(rows)
    receptacle_rows = [
        (receptacle, str(receptacle_counts[receptacle]))
        for receptacle in sorted(
            receptacle_counts, key=lambda item: (-receptacle_counts[item], item)
        )
    ]

    unresolved = collect_unresolved(rows)
    unresolved_rows = [
        (receptacle, str(unresolved[receptacle])) for receptacle in sorted(unresolved)
    ]

    pattern_rows = [
        (
            str(idx),
            _one_line(result.input_pattern),
            "natural" if result.is_natural_language else "delimited",
            str(result.total_generated_rows),
            "yes" if result.match_count else "no",
        )
        for idx, result in enumerate(results, start=1)
    ]

    distribution_rows = [
        (
            str(idx),
            format_length(float(length)),
            color or "-",
            str(quantity),
        )
        for idx, result in enumerate(results, start=1)
        if result.distribution_summary is not None
        for length, color, quantity in result.distribution_summary.allocations
    ]

    sections = [
        "# Whip Processing Report",
        "",
        f"Patterns processed: {len(results)}",
        f"Rows generated: {len(rows)}",
        "",
        "## Patterns",
        _markdown_table(["#", "input_pattern", "kind", "rows", "found"], pattern_rows),
        "",
        "## Rows per receptacle",
        _markdown_table(["receptacle", "row_count"], receptacle_rows),
        "",
        "## Unresolved receptacles",
        _markdown_table(["receptacle", "row_count"], unresolved_rows),
        "",
        "## Equal distributions",
        _markdown_table(["pattern", "whip_length", "label_color", "quantity"], distribution_rows),
    ]

    if scan_summary is not None:
        sheet_rows = [
            (sheet.name, str(sheet.total_rows), str(sheet.patterns_found))
            for sheet in scan_summary.sheets
        ]
        sections.extend(
            [
                "",
                "## Workbook scan",
                f"Sheets analyzed: {scan_summary.sheets_analyzed}",
                f"Cells scanned: {scan_summary.cells_scanned}",
                "",
                _markdown_table(["sheet", "rows", "patterns_found"], sheet_rows),
            ]
        )

    return "\n".join(sections) + "\n"
