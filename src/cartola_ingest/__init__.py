# Cartola Ingest - Bank statement ingestion for SMB finance applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Cartola Ingest
--------------

Bank statement ("cartola") ingestion for small-business finance
applications. Takes an uploaded spreadsheet whose layout is not known in
advance and returns clean, typed transactions.

Main capabilities:
- header detection for date, description, charge (cargo) and deposit
  (abono) columns,
- date normalization from native dates, spreadsheet serial numbers and
  ``DD/MM[/YY]`` text,
- Chilean peso amount normalization (``$1.234.567`` style),
- best-effort recovery: bad rows become warnings, never failures,
- caller helpers to build the records an application persists,
- TOML configuration, structlog logging and a small CLI.

Version: 0.2.0

Usage:
    python -m cartola_ingest.cli --help
"""

__version__ = "0.2.0"

from .config import AppConfig, load_app_config
from .models import ParsedTransaction, ParseResult, ParserOptions
from .parser import parse_rows, parse_statement

__all__ = [
    "AppConfig",
    "ParseResult",
    "ParsedTransaction",
    "ParserOptions",
    "load_app_config",
    "parse_rows",
    "parse_statement",
]
