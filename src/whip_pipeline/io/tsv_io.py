"""TSV writer for expanded order rows."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from whip_pipeline.models import ExpandedRow
from whip_pipeline.stages.stage1_parse import format_length

TSV_HEADER = [
    "line_number",
    "input_pattern",
    "input_occurrence",
    "receptacle",
    "cable_type",
    "whip_length",
    "tail_length",
    "label_color",
    "found_in_lookup",
    "matched_in",
    "error",
]


def _clean(value: str) -> str:
    """Keep one row per line by flattening tabs/newlines in free text."""

    return value.replace("\t", " ").replace("\r", " ").replace("\n", " | ")


def write_tsv(rows: Sequence[ExpandedRow], output_path: Path, include_header: bool = True) -> None:
    """Write expanded rows to a TSV file using the canonical column order.

    Args:
        rows: Expanded rows to serialize.
        output_path: Destination TSV file path.
        include_header: Whether to include a header row.
    """

    with output_path.open("w", encoding="utf-8") as handle:
        if include_header:
            handle.write("\t".join(TSV_HEADER))
            handle.write("\n")
        for row in rows:
            handle.write(
                "\t".join(
                    [
                        str(row.line_number),
                        _clean(row.input_pattern),
                        str(row.input_occurrence),
                        row.receptacle,
                        row.cable_type,
                        format_length(row.whip_length),
                        format_length(row.tail_length),
                        row.label_color,
                        "yes" if row.found_in_lookup else "no",
                        row.matched_in,
                        _clean(row.error or ""),
                    ]
                )
            )
            handle.write("\n")
