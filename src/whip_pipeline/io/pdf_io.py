"""PDF text source for pattern input.

Order specifications often arrive as PDF submittals. This module pulls their
text lines so the pipeline can treat them like a pasted block.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pdfplumber


def extract_text_lines(
    pdf_path: Path,
    page_start: int | None = None,
    page_end: int | None = None,
) -> Iterator[str]:
    """Yield trimmed text lines from selected pages of a PDF.

    Page boundaries are inclusive and 1-based to match human page references
    used in CLI arguments.

    Args:
        pdf_path: Path to the source PDF.
        page_start: 1-based start page, inclusive; ``None`` means first page.
        page_end: 1-based end page, inclusive; ``None`` means last page.

    Yields:
        Non-empty page text lines with leading/trailing whitespace removed.
    """

    with pdfplumber.open(pdf_path) as pdf:
        total_pages = len(pdf.pages)
        start_idx = 0 if page_start is None else max(page_start - 1, 0)
        end_idx = total_pages - 1 if page_end is None else min(page_end - 1, total_pages - 1)

        for page_idx in range(start_idx, end_idx + 1):
            text = pdf.pages[page_idx].extract_text(x_tolerance=1, y_tolerance=1)
            if not text:
                continue
            for line in text.splitlines():
                stripped = line.strip()
                if stripped:
                    yield stripped


def read_pdf_block(
    pdf_path: Path,
    page_start: int | None = None,
    page_end: int | None = None,
) -> str:
    """Join PDF text lines into one newline-separated input block."""

    return "\n".join(extract_text_lines(pdf_path, page_start=page_start, page_end=page_end))
