"""Ordered key aliases for loosely-typed lookup records.

Lookup rows arrive with arbitrary key spellings (spreadsheet headers, camelCase
JSON keys, nested ``specifications`` maps). Each logical field lists the keys it
accepts in priority order and :func:`read_field` returns the first non-empty
value.
"""

from __future__ import annotations

from typing import Any, Mapping

from whip_pipeline.models import LookupRecord

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "choose_receptacle": ("Choose receptacle", "chooseReceptacle", "choose_receptacle"),
    "receptacle": ("Receptacle", "receptacle", "receptacleType", "Receptacle Type"),
    "part_number": (
        "Part Number",
        "partNumber",
        "part_number",
        "Orderable Part number",
        "orderablePartNumber",
    ),
    "model": ("Model", "model"),
    "product_code": ("Product Code", "productCode", "product_code"),
    "description": ("Description", "description", "name"),
    "cable_type": (
        "Select Cable/Conduit Type",
        "Cable/Conduit Type",
        "cableConduitType",
        "cableType",
        "Cable Type",
        "Conduit Type",
    ),
    "whip_length": ("Whip Length (ft)", "Whip Length", "whipLength", "whip_length"),
    "tail_length": ("Tail Length (ft)", "Tail Length", "tailLength", "tail_length"),
    "conduit_size": ("Conduit Size", "conduitSize", "conduit_size"),
    "conductor_awg": ("Conductor AWG", "conductorAWG", "conductor_awg"),
    "voltage": ("Voltage", "voltage", "UseVoltage"),
    "label_color": (
        "Label Color (Background/Text)",
        "Label Color",
        "labelColor",
        "label_color",
    ),
    "source_sheet": ("sourceSheet", "source_sheet", "Source Sheet"),
    "source_row": ("sourceRow", "source_row", "Source Row"),
}

MATCH_FIELDS = ("choose_receptacle", "receptacle", "part_number", "model", "product_code")


def cell_text(value: Any) -> str:
    """Render a raw cell value as trimmed text; ``None`` becomes ``""``."""

    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def flatten_attributes(raw: Mapping[str, Any]) -> dict[str, str]:
    """Merge a nested ``specifications`` map into top-level string attributes.

    Top-level keys win over nested keys of the same spelling.

    Args:
        raw: Source mapping, e.g. a JSON object or a header/cell row.

    Returns:
        Flat mapping of key to trimmed string value.
    """

    flat: dict[str, str] = {}
    specifications = raw.get("specifications")
    if isinstance(specifications, Mapping):
        for key, value in specifications.items():
            flat[str(key)] = cell_text(value)
    for key, value in raw.items():
        if key == "specifications" and isinstance(value, Mapping):
            continue
        flat[str(key)] = cell_text(value)
    return flat


def read_field(attributes: Mapping[str, str], name: str) -> str:
    """Return the first non-empty value among the aliases of ``name``.

    Key comparison ignores case and surrounding whitespace.

    Args:
        attributes: Flattened record attributes.
        name: Logical field name from :data:`FIELD_ALIASES`.

    Returns:
        Field value, or ``""`` when no alias is present.

    Raises:
        KeyError: If ``name`` is not a known logical field.
    """

    folded = {key.strip().lower(): value for key, value in attributes.items()}
    for alias in FIELD_ALIASES[name]:
        value = folded.get(alias.lower())
        if value:
            return value
    return ""


def record_from_mapping(
    raw: Mapping[str, Any],
    source_sheet: str = "",
    source_row: int | None = None,
) -> LookupRecord:
    """Build a typed :class:`LookupRecord` from one loosely-typed row.

    The record's ``receptacle`` prefers the "Choose receptacle" column and
    falls back through the other match fields.

    Args:
        raw: Source mapping for the row.
        source_sheet: Sheet name the row came from, when known.
        source_row: 1-based spreadsheet row number, when known.

    Returns:
        Read-only lookup record.
    """

    attributes = flatten_attributes(raw)
    receptacle = ""
    for name in MATCH_FIELDS:
        receptacle = read_field(attributes, name)
        if receptacle:
            break

    if source_row is None:
        row_text = read_field(attributes, "source_row")
        source_row = int(row_text) if row_text.isdigit() else None

    return LookupRecord(
        receptacle=receptacle,
        description=read_field(attributes, "description"),
        cable_type=read_field(attributes, "cable_type"),
        whip_length=read_field(attributes, "whip_length"),
        tail_length=read_field(attributes, "tail_length"),
        conduit_size=read_field(attributes, "conduit_size"),
        conductor_awg=read_field(attributes, "conductor_awg"),
        voltage=read_field(attributes, "voltage"),
        label_color=read_field(attributes, "label_color"),
        source_sheet=source_sheet or read_field(attributes, "source_sheet"),
        source_row=source_row,
        attributes=tuple(attributes.items()),
    )


def match_candidates(record: LookupRecord) -> list[tuple[str, str]]:
    """List ``(field_name, value)`` pairs checked by the resolver, in order."""

    attributes = dict(record.attributes)
    candidates: list[tuple[str, str]] = []
    for name in MATCH_FIELDS:
        value = read_field(attributes, name)
        if not value and name == "receptacle":
            value = record.receptacle
        if value:
            candidates.append((name, value))
    return candidates
