"""CLI entrypoint for the whip order expansion pipeline."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from whip_pipeline.config import PipelineConfig
from whip_pipeline.io.tsv_io import write_tsv
from whip_pipeline.io.workbook_io import write_master_bubble
from whip_pipeline.pipeline import WORKBOOK_SUFFIXES, RunResult, run_pipeline
from whip_pipeline.reporting.report_md import build_report_md
from whip_pipeline.validation import collect_receptacle_counts, collect_unresolved


def _format_table(headers: Sequence[str], data_rows: Sequence[Sequence[str]]) -> str:
    """Format rows as an ASCII table for terminal output.

    Args:
        headers: Table headers.
        data_rows: Row values.

    Returns:
        Monospace table string.
    """

    widths = [len(header) for header in headers]
    for row in data_rows:
        for idx, value in enumerate(row):
            widths[idx] = max(widths[idx], len(value))

    header_line = " | ".join(header.ljust(widths[idx]) for idx, header in enumerate(headers))
    separator_line = "-+-".join("-" * width for width in widths)
    body_lines = [
        " | ".join(value.ljust(widths[idx]) for idx, value in enumerate(row)) for row in data_rows
    ]
    return "\n".join([header_line, separator_line, *body_lines])


def build_arg_parser() -> argparse.ArgumentParser:
    """Construct CLI argument parser.

    Returns:
        Configured parser for the expansion command.
    """

    defaults = PipelineConfig()
    parser = argparse.ArgumentParser(
        description="Expand whip order patterns into Master Bubble order rows."
    )
    parser.add_argument(
        "--input",
        required=True,
        type=Path,
        help="Pattern source: text file, workbook (.xlsx) or PDF.",
    )
    parser.add_argument(
        "--lookup", required=True, type=Path, help="Lookup table (.xlsx or .json)."
    )
    parser.add_argument(
        "--output", required=True, type=Path, help="Destination .xlsx or .tsv output path."
    )
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Markdown report output path (default: report.md next to output).",
    )
    parser.add_argument("--page-start", type=int, default=None, help="1-based PDF start page.")
    parser.add_argument("--page-end", type=int, default=None, help="1-based PDF end page.")
    parser.add_argument(
        "--length-step",
        type=int,
        default=defaults.length_step,
        help="Feet between generated lengths for a length range.",
    )
    parser.add_argument(
        "--default-whip-length",
        type=int,
        default=defaults.default_whip_length,
        help="Whip length when a natural-language order names none.",
    )
    parser.add_argument(
        "--default-tail-length",
        type=float,
        default=defaults.default_tail_length,
        help="Tail length when a natural-language order names none.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when any receptacle is missing from the lookup table.",
    )
    parser.add_argument("--no-header", action="store_true", help="Do not write TSV header.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def _write_output(run: RunResult, output_path: Path, include_header: bool) -> None:
    if output_path.suffix.lower() in WORKBOOK_SUFFIXES:
        write_master_bubble(run.results, output_path, scan_summary=run.scan_summary)
    else:
        write_tsv(run.rows, output_path=output_path, include_header=include_header)


def _print_output_analysis(run: RunResult) -> None:
    """Print receptacle and unresolved summary tables for the run."""

    if not run.rows:
        print("No rows generated; skipping output analysis.")
        return

    counts = collect_receptacle_counts(run.rows)
    count_rows = [
        [receptacle, str(count)]
        for receptacle, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    ]
    print("\nRows per receptacle:")
    print(_format_table(["receptacle", "row_count"], count_rows))

    unresolved = collect_unresolved(run.rows)
    if unresolved:
        print(
            f"\nWARNING: {sum(unresolved.values())} rows reference receptacles "
            f"missing from the lookup: {', '.join(sorted(unresolved))}"
        )


def main(argv: Sequence[str] | None = None) -> int:
    """Run CLI workflow from arguments through artifact generation.

    Args:
        argv: Argument list; ``None`` reads ``sys.argv``.

    Returns:
        Zero exit status on success.
    """

    parser = build_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.input.exists():
        raise SystemExit(f"Input not found: {args.input}")
    if not args.lookup.exists():
        raise SystemExit(f"Lookup table not found: {args.lookup}")

    try:
        config = PipelineConfig(
            length_step=args.length_step,
            default_whip_length=args.default_whip_length,
            default_tail_length=args.default_tail_length,
        )
    except ValueError as exc:
        parser.error(str(exc))

    run = run_pipeline(
        input_path=args.input,
        lookup_path=args.lookup,
        config=config,
        page_start=args.page_start,
        page_end=args.page_end,
    )

    if args.strict and run.unresolved_rows:
        missing = ", ".join(sorted(collect_unresolved(run.rows)))
        raise SystemExit(f"Unresolved receptacles (strict mode): {missing}")

    report_path = args.report if args.report is not None else args.output.parent / "report.md"
    _write_output(run, args.output, include_header=not args.no_header)
    report_path.write_text(build_report_md(run.results, run.scan_summary), encoding="utf-8")

    print(f"Wrote {len(run.rows)} rows from {len(run.results)} patterns to {args.output}")
    print(f"Wrote report to {report_path}")
    _print_output_analysis(run)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
