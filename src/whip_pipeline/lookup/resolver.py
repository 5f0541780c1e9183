"""Resolve receptacle tokens against the lookup table."""

from __future__ import annotations

import logging
from typing import Sequence

from whip_pipeline.lookup.fields import match_candidates
from whip_pipeline.models import LookupRecord, Resolution

logger = logging.getLogger(__name__)

UNRESOLVED_PREFIX = "*"
NOT_FOUND_LABEL = "Default (Not Found)"


def token_matches(token: str, value: str) -> bool:
    """Case-insensitive equality or substring test used for lookup matching.

    Args:
        token: Receptacle token from the parsed pattern.
        value: Candidate field value from a lookup row.

    Returns:
        ``True`` when ``token`` equals or is contained in ``value``. Empty
        tokens never match.
    """

    needle = token.strip().upper()
    if not needle:
        return False
    haystack = value.strip().upper()
    return haystack == needle or needle in haystack


def default_record(token: str) -> LookupRecord:
    """Synthesize the placeholder record for an unresolved receptacle."""

    return LookupRecord(
        receptacle=f"{UNRESOLVED_PREFIX}{token}",
        description=f"Default entry for {token} - not found in lookup",
    )


def resolve(
    token: str,
    table: Sequence[LookupRecord],
    source_label: str = "MasterBubbleUpLookup",
) -> Resolution:
    """Find the first lookup row matching ``token``.

    Candidate fields are checked per row in a fixed order: choose-receptacle,
    receptacle, part number, model, product code. The first matching row in
    table order wins; there is no scoring between multiple matches, and the
    chosen index is returned so callers can surface it.

    Args:
        token: Receptacle token to resolve.
        table: Lookup records in source order.
        source_label: Name of the lookup source recorded as ``matched_in``.

    Returns:
        Resolution carrying the matched record, or a ``*``-prefixed default
        record with ``found=False`` and an explanatory ``error``.
    """

    token = token.strip()
    for index, record in enumerate(table):
        for field_name, value in match_candidates(record):
            if token_matches(token, value):
                logger.debug("Resolved %r to lookup row %d via %s", token, index, field_name)
                return Resolution(
                    record=record,
                    found=True,
                    matched_in=source_label,
                    source_index=index,
                    matched_field=field_name,
                )

    logger.debug("No lookup match for %r", token)
    return Resolution(
        record=default_record(token),
        found=False,
        matched_in=NOT_FOUND_LABEL,
        error=f'Pattern "{token}" not found in {source_label} data',
    )
