"""Workbook helpers: multi-sheet pattern scans, lookup loading, Master Bubble export."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Sequence

import openpyxl
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from whip_pipeline.config import DEFAULT_CONFIG, PipelineConfig
from whip_pipeline.lookup.fields import cell_text, record_from_mapping
from whip_pipeline.models import (
    ExpandedRow,
    LookupRecord,
    ProcessingResult,
    ScanSummary,
    SheetScan,
)
from whip_pipeline.stages.stage1_parse import format_length

logger = logging.getLogger(__name__)

RECEPTACLE_CELL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(460[A-Z]\d+[A-Z]*)\b"),
    re.compile(r"\b(CS\d{4}[A-Z]?)\b"),
    re.compile(r"\b(L\d+-\d+[A-Z])\b"),
    re.compile(r"\b(\d+-\d+[A-Z])\b"),
    re.compile(r"\b([A-Z]\d+[A-Z]\d+[A-Z]*)\b"),
)
NEIGHBOR_CONDUIT_RE = re.compile(r"\b(MMC|LFMC|FMC|LMZC|SO|MC|EMT)\b", re.IGNORECASE)
NEIGHBOR_LENGTH_RE = re.compile(r"\b(\d+)['\"]?\s*(?:ft|feet|foot)?\b", re.IGNORECASE)
NEIGHBOR_COLOR_RE = re.compile(
    r"\b(red|blue|green|yellow|orange|purple|black|white|gray|grey)\b", re.IGNORECASE
)

SCAN_DEFAULT_CONDUIT = "MMC"
SCAN_DEFAULT_WHIP = "25"
SCAN_DEFAULT_TAIL = "10"
SCAN_DEFAULT_COLOR = "red"
MAX_TAIL_LENGTH = 15

MASTER_BUBBLE_HEADER = [
    "ID",
    "Order QTY",
    "Choose receptacle",
    "Select Cable/Conduit Type",
    "Whip Length (ft)",
    "Tail Length (ft)",
    "Label Color (Background/Text)",
    "building",
    "PDU",
    "Panel",
    "First Circuit",
    "Second Circuit",
    "Third Circuit",
    "Cage",
    "Cabinet Number",
    "Included Breaker",
    "Mounting bolt",
    "Conduit Size",
    "Conductor AWG",
    "Green AWG",
    "Voltage",
    "Box",
    "L1",
    "L2",
    "L3",
    "N",
    "E",
    "Drawing number",
    "Notes to Enconnex",
    "Orderable Part number",
    "base price",
    "Per foot",
    "length",
    "Bolt adder",
    "assembled price",
    "Breaker adder",
    "Price to Wesco",
    "List Price",
    "Budgetary pricing text",
    "phase type",
    "conductor count",
    "neutral",
    "current",
    "UseVoltage",
    "plate hole",
    "box",
    "Box code",
    "Box options",
    "Breaker options",
]

ORDER_ENTRY_SHEET = "Order Entry"
SUMMARY_SHEET = "Processing Summary"


def build_pattern_from_row(
    row: Sequence[Any],
    receptacle_index: int,
    receptacle: str,
    radius: int = 3,
) -> str:
    """Rebuild a delimited pattern from cells around a receptacle code.

    Nearby cells supply the conduit code, whip length (numbers above
    ``MAX_TAIL_LENGTH``), tail length (smaller numbers) and label color. Missing
    parts fall back to scan defaults.

    Args:
        row: Cell values of one sheet row.
        receptacle_index: Column index of the cell holding the code.
        receptacle: Receptacle code found in that cell.
        radius: Cells inspected on each side.

    Returns:
        Comma-delimited pattern ``receptacle,conduit,whip,tail,color``.
    """

    conduit = ""
    whip = ""
    tail = ""
    color = ""
    start = max(0, receptacle_index - radius)
    stop = min(len(row), receptacle_index + radius + 1)
    for idx in range(start, stop):
        if idx == receptacle_index:
            continue
        text = cell_text(row[idx])
        if not text:
            continue

        conduit_match = NEIGHBOR_CONDUIT_RE.search(text)
        if conduit_match and not conduit:
            conduit = conduit_match.group(1).upper()

        length_match = NEIGHBOR_LENGTH_RE.search(text)
        if length_match:
            number = int(length_match.group(1))
            if number > MAX_TAIL_LENGTH and not whip:
                whip = str(number)
            elif number <= MAX_TAIL_LENGTH and not tail:
                tail = str(number)

        color_match = NEIGHBOR_COLOR_RE.search(text)
        if color_match and not color:
            color = color_match.group(1).lower()

    return ",".join(
        [
            receptacle,
            conduit or SCAN_DEFAULT_CONDUIT,
            whip or SCAN_DEFAULT_WHIP,
            tail or SCAN_DEFAULT_TAIL,
            color or SCAN_DEFAULT_COLOR,
        ]
    )


def _cell_patterns(row: Sequence[Any], col_idx: int, text: str, radius: int) -> list[str]:
    """Find receptacle codes in one cell and turn each into a pattern."""

    codes: list[str] = []
    for regex in RECEPTACLE_CELL_PATTERNS:
        for match in regex.finditer(text):
            if match.group(1) not in codes:
                codes.append(match.group(1))

    patterns: list[str] = []
    for code in codes:
        if "," in text and text.startswith(code):
            patterns.append(text)
        else:
            patterns.append(build_pattern_from_row(row, col_idx, code, radius=radius))
    return patterns


def scan_workbook(
    path: Path,
    config: PipelineConfig = DEFAULT_CONFIG,
) -> tuple[dict[str, list[str]], ScanSummary]:
    """Scan every sheet of a workbook for receptacle patterns.

    Each text cell is counted as scanned. Cells holding a full comma pattern
    starting with a receptacle code are taken verbatim; bare codes are expanded
    from their neighbouring cells. Patterns are de-duplicated per sheet.

    Args:
        path: Workbook path.
        config: Run configuration supplying the neighbour radius.

    Returns:
        Tuple of ``(patterns_by_sheet, summary)`` with sheets in workbook order.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
    """

    if not path.exists():
        raise FileNotFoundError(f"Workbook not found: {path}")

    workbook = openpyxl.load_workbook(path, read_only=True, data_only=True)
    patterns_by_sheet: dict[str, list[str]] = {}
    sheets: list[SheetScan] = []
    cells_scanned = 0
    try:
        for worksheet in workbook.worksheets:
            found: list[str] = []
            total_rows = 0
            for row in worksheet.iter_rows(values_only=True):
                total_rows += 1
                for col_idx, value in enumerate(row):
                    if not isinstance(value, str) or not value.strip():
                        continue
                    cells_scanned += 1
                    for pattern in _cell_patterns(
                        row, col_idx, value.strip(), config.neighbor_radius
                    ):
                        if pattern not in found:
                            found.append(pattern)

            patterns_by_sheet[worksheet.title] = found
            sheets.append(
                SheetScan(name=worksheet.title, total_rows=total_rows, patterns_found=len(found))
            )
            logger.info("Sheet %s: found %d patterns", worksheet.title, len(found))
    finally:
        workbook.close()

    summary = ScanSummary(
        total_patterns=sum(sheet.patterns_found for sheet in sheets),
        sheets_analyzed=len(sheets),
        cells_scanned=cells_scanned,
        sheets=tuple(sheets),
    )
    return patterns_by_sheet, summary


def load_lookup_workbook(path: Path) -> list[LookupRecord]:
    """Read lookup records from every sheet of a workbook.

    The first non-empty row of each sheet is its header. Data rows become
    records keyed by header text; rows without any receptacle-like value are
    skipped.

    Args:
        path: Workbook path.

    Returns:
        Records in sheet order, then row order.
    """

    workbook = openpyxl.load_workbook(path, read_only=True, data_only=True)
    records: list[LookupRecord] = []
    try:
        for worksheet in workbook.worksheets:
            header: list[str] | None = None
            for row_number, row in enumerate(worksheet.iter_rows(values_only=True), start=1):
                if not any(cell_text(value) for value in row):
                    continue
                if header is None:
                    header = [cell_text(value) for value in row]
                    continue
                mapping = {
                    name: value for name, value in zip(header, row) if name and value is not None
                }
                record = record_from_mapping(
                    mapping, source_sheet=worksheet.title, source_row=row_number
                )
                if record.receptacle:
                    records.append(record)
    finally:
        workbook.close()
    return records


def _order_entry_row(row: ExpandedRow) -> list[Any]:
    values: dict[str, Any] = {
        "ID": row.line_number,
        "Order QTY": 1,
        "Choose receptacle": row.receptacle,
        "Select Cable/Conduit Type": row.cable_type,
        "Whip Length (ft)": format_length(row.whip_length),
        "Tail Length (ft)": format_length(row.tail_length),
        "Label Color (Background/Text)": row.label_color,
        "First Circuit": "1",
        "Conduit Size": row.conduit_size or "3/4",
        "Conductor AWG": row.conductor_awg or "6",
        "Green AWG": "8",
        "Voltage": row.voltage or "208",
        "Notes to Enconnex": row.error or row.description,
        "UseVoltage": row.voltage or "208",
    }
    return [values.get(column, "") for column in MASTER_BUBBLE_HEADER]


def write_master_bubble(
    results: Sequence[ProcessingResult],
    output_path: Path,
    scan_summary: ScanSummary | None = None,
) -> None:
    """Write expanded rows to a Master Bubble order-entry workbook.

    Every expanded row becomes one line with ``Order QTY`` 1. A second sheet
    records run counters.

    Args:
        results: Processing results in run order.
        output_path: Destination ``.xlsx`` path.
        scan_summary: Counters from a workbook scan, when the input was one.
    """

    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = ORDER_ENTRY_SHEET

    header_font = Font(bold=True)
    center = Alignment(horizontal="center", vertical="top", wrap_text=True)
    for col_idx, name in enumerate(MASTER_BUBBLE_HEADER, start=1):
        cell = sheet.cell(1, col_idx, value=name)
        cell.font = header_font
        cell.alignment = center
        sheet.column_dimensions[get_column_letter(col_idx)].width = max(12, len(name) + 2)

    rows = [row for result in results for row in result.rows]
    for row in rows:
        sheet.append(_order_entry_row(row))

    summary = workbook.create_sheet(SUMMARY_SHEET)
    summary.append(["Field", "Value"])
    summary["A1"].font = header_font
    summary["B1"].font = header_font
    unresolved = sum(1 for row in rows if not row.found_in_lookup)
    matched_sheets = dict.fromkeys(
        sheet_name for result in results for sheet_name in result.found_in_sheets
    )
    summary.append(["Total Patterns", len(results)])
    summary.append(["Total Rows", len(rows)])
    summary.append(["Unresolved Rows", unresolved])
    summary.append(["Source Sheets", ", ".join(matched_sheets)])
    if scan_summary is not None:
        summary.append(["Sheets Analyzed", scan_summary.sheets_analyzed])
        summary.append(["Cells Scanned", scan_summary.cells_scanned])
        summary.append(["Patterns Found", scan_summary.total_patterns])
    summary.column_dimensions["A"].width = 20
    summary.column_dimensions["B"].width = 50

    workbook.save(output_path)
    logger.info("Wrote %d order entry rows to %s", len(rows), output_path)
