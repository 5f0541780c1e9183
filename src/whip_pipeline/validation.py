"""Validation helpers for run invariants and summary counts."""

from __future__ import annotations

from collections import Counter
from typing import Sequence

from whip_pipeline.models import ExpandedRow, ProcessingResult

PREVIEW_LIMIT = 25


def _raise_if_errors(label: str, errors: list[str]) -> None:
    if errors:
        preview = "\n".join(f"- {item}" for item in errors[:PREVIEW_LIMIT])
        rest = len(errors) - min(PREVIEW_LIMIT, len(errors))
        more = f"\n- ... and {rest} more" if rest > 0 else ""
        raise ValueError(f"{label} validation failed with {len(errors)} errors:\n{preview}{more}")


def validate_rows(rows: Sequence[ExpandedRow]) -> None:
    """Validate that row line numbers are unique and strictly increasing.

    Args:
        rows: Expanded rows in emission order.

    Raises:
        ValueError: If any line number repeats or goes backwards.
    """

    errors: list[str] = []
    previous: int | None = None
    for row in rows:
        if previous is not None and row.line_number <= previous:
            errors.append(
                f"Row {row.line_number}: line number not greater than previous {previous}"
            )
        if row.whip_length < 0 or row.tail_length < 0:
            errors.append(f"Row {row.line_number}: negative length")
        previous = row.line_number

    _raise_if_errors("Row", errors)


def validate_results(results: Sequence[ProcessingResult]) -> None:
    """Validate per-result counts and the run-wide row numbering.

    Args:
        results: Processing results of one run, in order.

    Raises:
        ValueError: If row counts or distribution totals do not add up.
    """

    errors: list[str] = []
    for idx, result in enumerate(results, start=1):
        if len(result.rows) != result.total_generated_rows:
            errors.append(
                f"Result {idx}: {len(result.rows)} rows but "
                f"total_generated_rows={result.total_generated_rows}"
            )
        if len(result.generated_patterns) != len(result.rows):
            errors.append(f"Result {idx}: generated_patterns out of step with rows")

        summary = result.distribution_summary
        if summary is not None:
            allocated = sum(quantity for _, _, quantity in summary.allocations)
            if allocated != summary.total_quantity:
                errors.append(
                    f"Result {idx}: distribution allocates {allocated} "
                    f"of {summary.total_quantity}"
                )
            if len(result.rows) != summary.total_quantity:
                errors.append(
                    f"Result {idx}: {len(result.rows)} rows for "
                    f"total quantity {summary.total_quantity}"
                )

    _raise_if_errors("Result", errors)
    validate_rows([row for result in results for row in result.rows])


def collect_unresolved(rows: Sequence[ExpandedRow]) -> dict[str, int]:
    """Count unresolved rows by their flagged receptacle (``*TOKEN``).

    Args:
        rows: Expanded rows.

    Returns:
        Dictionary of flagged receptacle to row count.
    """

    counter: Counter[str] = Counter()
    for row in rows:
        if not row.found_in_lookup:
            counter[row.receptacle] += 1
    return dict(counter)


def collect_receptacle_counts(rows: Sequence[ExpandedRow]) -> dict[str, int]:
    """Count rows by receptacle."""

    return dict(Counter(row.receptacle for row in rows))

