# Cartola Ingest - Bank statement ingestion for SMB finance applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Amount normalization for Chilean peso statements.

Amounts are whole currency units. In the exported text both ``.`` and ``,``
are thousands separators, never decimal separators, so ``"$1.234.567"``,
``"1,234,567"`` and ``"1234567"`` all read as 1234567.

Cells that do not contain an integer read as 0. That is not an error: the
caller decides what to do with rows where both amounts are 0.
"""

import math
import numbers
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

_STRIP_RE = re.compile(r"[$\s.,]")
_LEADING_INT_RE = re.compile(r"^[+-]?\d+")


def parse_amount(value: Any) -> int:
    """
    Convert a raw charge/deposit cell into an integer amount.

    - None / blank cells → 0.
    - Numeric cells → rounded to whole units, halves away from zero
      (NaN and infinities → 0).
    - Text cells → ``$``, whitespace, ``.`` and ``,`` removed, then the
      leading (optionally signed) run of digits is parsed; no digits → 0.
    """
    if value is None or isinstance(value, bool):
        return 0

    if isinstance(value, numbers.Real):
        number = float(value)
        if not math.isfinite(number):
            return 0
        return int(Decimal(str(number)).quantize(Decimal(1), rounding=ROUND_HALF_UP))

    cleaned = _STRIP_RE.sub("", str(value))
    match = _LEADING_INT_RE.match(cleaned)
    if match is None:
        return 0
    return int(match.group(0))
