"""Stage 4: Generate presentational expressions for rows and results.

Expressions are display/audit strings only (auto-fill formulas, part and
drawing numbers, budgetary text). Nothing here feeds back into the pipeline,
and a template that cannot be rendered yields an empty list instead of an
error.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from whip_pipeline.models import ExpandedRow, Expression, ProcessingResult
from whip_pipeline.stages.stage1_parse import format_length

logger = logging.getLogger(__name__)

Template = tuple[str, str, str]

ROW_TEMPLATES: tuple[Template, ...] = (
    (
        "auto_fill",
        '=IFERROR(VLOOKUP("{token}",{lookup_source}!A:Z,2,FALSE),"*{token}")',
        "Auto-fill formula pulling {token} specifications from {lookup_source}",
    ),
    (
        "part_number",
        "PW{whip}K-{token}T-D{line:04d}SAL1234",
        "Generated part number based on receptacle pattern",
    ),
    (
        "drawing_number",
        "PWxx-{token}T-xxSALx(103)",
        "Generated drawing number with receptacle reference",
    ),
)

RESULT_TEMPLATES: tuple[Template, ...] = (
    (
        "base_price",
        "{base_price:.1f}",
        "Calculated base price based on receptacle complexity",
    ),
    (
        "budgetary_text",
        "Whip {token} {awg}AWG {conduit_size}{cable_type} {whip}ft, "
        "Price to Wesco {distributor_price:.1f}ea",
        "Auto-generated budgetary pricing description",
    ),
)

DISTRIBUTION_TEMPLATES: tuple[Template, ...] = (
    (
        "distribution",
        "=FLOOR({total}/{configurations},1)",
        "Equal distribution: {base} per configuration, first {remainder} configuration(s) get +1",
    ),
)

LONG_CODE_PRICE = 327.2
SHORT_CODE_PRICE = 287.2
DISTRIBUTOR_MULTIPLIER = 6.4


def _row_context(row: ExpandedRow, lookup_source: str) -> dict[str, Any]:
    token = row.receptacle.lstrip("*")
    base_price = LONG_CODE_PRICE if len(token) > 6 else SHORT_CODE_PRICE
    return {
        "token": token,
        "receptacle": row.receptacle,
        "line": row.line_number,
        "whip": format_length(row.whip_length),
        "tail": format_length(row.tail_length),
        "cable_type": row.cable_type,
        "color": row.label_color,
        "awg": row.conductor_awg or "6",
        "conduit_size": row.conduit_size or "3/4",
        "lookup_source": lookup_source.replace(" ", "_"),
        "base_price": base_price,
        "distributor_price": base_price * DISTRIBUTOR_MULTIPLIER,
    }


def render_templates(templates: Sequence[Template], context: dict[str, Any]) -> list[Expression]:
    """Format templates against ``context``.

    Args:
        templates: ``(type, expression, description)`` format strings.
        context: Values available to the templates.

    Returns:
        Rendered expressions in template order.

    Raises:
        KeyError: If a template references a missing context key.
        ValueError: If a template has an invalid format spec.
        IndexError: If a template uses positional fields.
    """

    return [
        Expression(
            type=kind,
            expression=expression.format(**context),
            description=description.format(**context),
        )
        for kind, expression, description in templates
    ]


def describe(
    target: ExpandedRow | ProcessingResult,
    lookup_source: str = "MasterBubbleUpLookup",
    row_templates: Sequence[Template] = ROW_TEMPLATES,
    result_templates: Sequence[Template] = RESULT_TEMPLATES,
) -> list[Expression]:
    """Generate display expressions for a row or a whole result.

    A result is described through its first row plus result-level templates,
    and a distribution formula when it came from a natural-language block.

    Args:
        target: Row or processing result to describe.
        lookup_source: Lookup sheet name used in auto-fill formulas.
        row_templates: Templates rendered against a row.
        result_templates: Additional templates rendered for a result.

    Returns:
        Expressions, or an empty list when there is nothing to describe or a
        template fails to render.
    """

    try:
        if isinstance(target, ExpandedRow):
            return render_templates(row_templates, _row_context(target, lookup_source))

        if not target.rows:
            return []
        context = _row_context(target.rows[0], lookup_source)
        expressions = render_templates(row_templates, context)
        expressions.extend(render_templates(result_templates, context))

        summary = target.distribution_summary
        if summary is not None:
            expressions.extend(
                render_templates(
                    DISTRIBUTION_TEMPLATES,
                    {
                        "total": summary.total_quantity,
                        "configurations": summary.configurations_count,
                        "base": summary.base_quantity_per_config,
                        "remainder": summary.remainder,
                    },
                )
            )
        return expressions
    except (KeyError, IndexError, ValueError) as exc:
        logger.warning("Skipping generated expressions: malformed template (%s)", exc)
        return []
