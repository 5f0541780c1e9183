"""Unit tests for markdown report generation."""

from __future__ import annotations

from whip_pipeline.models import LookupRecord, ScanSummary, SheetScan
from whip_pipeline.pipeline import process_block
from whip_pipeline.reporting.report_md import build_report_md


def test_build_report_md_contains_required_sections() -> None:
    """Report output should include all required summary sections."""

    results = process_block(
        "CS8269A, LMZC, 20, 10, Red !2\nUNKNOWNX !1\nNeed 3 whips, colors: red, blue",
        [LookupRecord(receptacle="CS8269A")],
    )
    scan = ScanSummary(
        total_patterns=2,
        sheets_analyzed=1,
        cells_scanned=14,
        sheets=(SheetScan(name="Floor 1", total_rows=6, patterns_found=2),),
    )

    markdown = build_report_md(results, scan)

    assert "## Patterns" in markdown
    assert "## Rows per receptacle" in markdown
    assert "## Unresolved receptacles" in markdown
    assert "## Equal distributions" in markdown
    assert "## Workbook scan" in markdown
    assert "| *UNKNOWNX | 1 |" in markdown
    assert "| 3 | 20 | Red | 2 |" in markdown
    assert "| 3 | 20 | Blue | 1 |" in markdown
    assert "| Floor 1 | 6 | 2 |" in markdown


def test_build_report_md_without_scan_omits_scan_section() -> None:
    markdown = build_report_md([])

    assert "Rows generated: 0" in markdown
    assert "## Workbook scan" not in markdown
