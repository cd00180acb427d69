# Cartola Ingest - Bank statement ingestion for SMB finance applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Header resolution for bank statements.

Bank exports do not share a common layout: columns move around and their
labels vary ("Cargos", "Cheques / Cargos", "Depósitos / Abonos", ...).
The header row is therefore matched against an ordered table of synonyms
(see ``DEFAULT_HEADER_SYNONYMS``): a logical column resolves to the first
header cell whose trimmed, lower-cased text contains one of its substrings.

Required columns
----------------
- ``date``        (label reported as "Fecha"),
- ``description`` (label reported as "Descripción"),
- at least one of ``charge`` / ``deposit`` (reported as "Cargos/Abonos").
"""

from collections.abc import Sequence
from typing import Any, Optional

from .models import DEFAULT_HEADER_SYNONYMS, ColumnMap, StatementError

_MISSING_LABELS = {
    "date": "Fecha",
    "description": "Descripción",
    "amounts": "Cargos/Abonos",
}


def normalize_header(value: Any) -> str:
    """Return the comparable form of a header cell (empty for blanks)."""
    if value is None:
        return ""
    return str(value).strip().lower()


def find_column(headers: Sequence[str], candidates: Sequence[str]) -> Optional[int]:
    """
    Return the index of the first normalized header containing a candidate.

    Args:
        headers: Header cells already passed through ``normalize_header``.
        candidates: Lower-case substrings to look for.
    """
    for idx, header in enumerate(headers):
        if header and any(c in header for c in candidates):
            return idx
    return None


def resolve_columns(
    header_row: Sequence[Any],
    synonyms: Sequence[tuple[str, Sequence[str]]] = DEFAULT_HEADER_SYNONYMS,
) -> ColumnMap:
    """
    Build a ColumnMap from the header row of a statement.

    Raises:
        StatementError: if the header is empty or if the date, description
            or both amount columns cannot be found. The message lists the
            missing columns and the raw header values.
    """
    headers = [normalize_header(h) for h in header_row or ()]
    if not any(headers):
        raise StatementError("empty header: the first row of the sheet is blank.")

    found: dict[str, Optional[int]] = {}
    for logical, candidates in synonyms:
        lowered = tuple(c.lower() for c in candidates)
        found[logical] = find_column(headers, lowered)

    missing: list[str] = []
    if found.get("date") is None:
        missing.append(_MISSING_LABELS["date"])
    if found.get("description") is None:
        missing.append(_MISSING_LABELS["description"])
    if found.get("charge") is None and found.get("deposit") is None:
        missing.append(_MISSING_LABELS["amounts"])

    if missing:
        raw = ", ".join("" if h is None else str(h) for h in header_row)
        raise StatementError(
            f"missing columns: {', '.join(missing)}. Headers found: {raw}"
        )

    return ColumnMap(
        date=found["date"],  # type: ignore[arg-type]
        description=found["description"],  # type: ignore[arg-type]
        charge=found.get("charge"),
        deposit=found.get("deposit"),
    )
