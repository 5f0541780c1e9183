"""Repository for loading the receptacle lookup table from disk."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
import json
import logging
from pathlib import Path

from whip_pipeline.io.workbook_io import load_lookup_workbook
from whip_pipeline.lookup.fields import record_from_mapping
from whip_pipeline.models import LookupRecord

logger = logging.getLogger(__name__)


def parse_lookup_json(payload: object) -> list[LookupRecord]:
    """Convert decoded JSON lookup data into records.

    Accepts either a list of row objects or an object with a ``components`` or
    ``records`` list, which is how component dumps are usually exported.

    Args:
        payload: Decoded JSON document.

    Returns:
        Records in document order; rows without any receptacle-like field are
        kept so first-match indexes line up with the source.

    Raises:
        ValueError: If the payload does not contain a list of objects.
    """

    if isinstance(payload, dict):
        for key in ("components", "records", "rows"):
            if isinstance(payload.get(key), list):
                payload = payload[key]
                break

    if not isinstance(payload, list):
        raise ValueError("Lookup JSON must be a list of records or contain a 'components' list")

    records: list[LookupRecord] = []
    for idx, item in enumerate(payload, start=1):
        if not isinstance(item, dict):
            raise ValueError(f"Lookup JSON item {idx} is not an object")
        records.append(record_from_mapping(item))
    return records


@dataclass(frozen=True)
class LookupRepository:
    """Read-only repository exposing the lookup table for one source file.

    Supported sources are ``.xlsx``/``.xlsm`` workbooks (every sheet, first
    non-empty row as header) and ``.json`` record dumps. Records are loaded once
    per instance and never mutated.
    """

    path: Path

    @cached_property
    def records(self) -> tuple[LookupRecord, ...]:
        """Load and cache lookup records from disk.

        Returns:
            Immutable tuple of records in source order.

        Raises:
            FileNotFoundError: If the configured lookup file does not exist.
            ValueError: If the file type is not supported.
        """

        if not self.path.exists():
            raise FileNotFoundError(f"Lookup file not found: {self.path}")

        suffix = self.path.suffix.lower()
        if suffix in {".xlsx", ".xlsm"}:
            records = load_lookup_workbook(self.path)
        elif suffix == ".json":
            with self.path.open("r", encoding="utf-8") as handle:
                records = parse_lookup_json(json.load(handle))
        else:
            raise ValueError(f"Unsupported lookup file type: {self.path.suffix}")

        logger.info("Loaded %d lookup records from %s", len(records), self.path)
        return tuple(records)

    @cached_property
    def sheet_names(self) -> tuple[str, ...]:
        """Distinct source sheets in first-seen order."""

        names = (record.source_sheet for record in self.records if record.source_sheet)
        return tuple(dict.fromkeys(names))
