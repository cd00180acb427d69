# Cartola Ingest - Bank statement ingestion for SMB finance applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for Cartola Ingest.

This module is responsible for:
- loading the application configuration from a TOML file,
- validating it and filling in defaults,
- exposing typed dataclasses used by the rest of the application.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

from .models import DEFAULT_HEADER_SYNONYMS, ParserOptions

DEFAULT_CONFIG_FILE = "cartola_config.toml"
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024
DEFAULT_ALLOWED_EXTENSIONS = (".xlsx", ".xlsm")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class UploadSettings:
    """Limits applied by callers before a file is handed to the parser."""

    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    allowed_extensions: tuple[str, ...] = DEFAULT_ALLOWED_EXTENSIONS


@dataclass(frozen=True)
class LoggingSettings:
    """structlog output options."""

    level: str = "INFO"
    json_output: bool = False


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for Cartola Ingest.

    This aggregates:
    - the parse policy (header synonyms, warning threshold, century),
    - the upload limits enforced by the CLI,
    - the logging options.
    """

    parser: ParserOptions = field(default_factory=ParserOptions)
    upload: UploadSettings = field(default_factory=UploadSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    source: Optional[Path] = None


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, Mapping):
        raise ValueError(f"Config section [{name}] must be a table.")
    return value


def _int_option(section: Mapping[str, Any], key: str, default: int, where: str) -> int:
    raw = section.get(key, default)
    if isinstance(raw, bool):
        raise ValueError(f"Invalid value for '{where}.{key}': expected an integer.")
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{where}.{key}': expected an integer."
        ) from exc


def _parse_header_synonyms(
    columns_section: Mapping[str, Any],
) -> tuple[tuple[str, tuple[str, ...]], ...]:
    """
    Merge extra header synonyms from [parser.columns] into the defaults.

    Extra synonyms are appended after the built-in ones, so the built-in
    labels keep priority.
    """
    known = {logical for logical, _ in DEFAULT_HEADER_SYNONYMS}
    for key in columns_section:
        if key not in known:
            raise ValueError(
                f"Unknown column '{key}' in [parser.columns]. "
                f"Expected one of: {', '.join(sorted(known))}."
            )

    merged = []
    for logical, defaults in DEFAULT_HEADER_SYNONYMS:
        extra = columns_section.get(logical) or []
        if isinstance(extra, str) or not all(isinstance(e, str) for e in extra):
            raise ValueError(
                f"Invalid value for 'parser.columns.{logical}': "
                "expected a list of strings."
            )
        candidates = list(defaults)
        for synonym in extra:
            normalized = synonym.strip().lower()
            if normalized and normalized not in candidates:
                candidates.append(normalized)
        merged.append((logical, tuple(candidates)))
    return tuple(merged)


def _parse_parser_options(raw: Mapping[str, Any]) -> ParserOptions:
    parser_section = _section(raw, "parser")
    columns_section = _section(parser_section, "columns")

    min_len = _int_option(
        parser_section, "min_warning_description_length", 3, "parser"
    )
    if min_len < 0:
        raise ValueError(
            "Invalid value for 'parser.min_warning_description_length': "
            "must be >= 0."
        )

    year_base = _int_option(parser_section, "two_digit_year_base", 2000, "parser")
    if year_base % 100 != 0:
        raise ValueError(
            "Invalid value for 'parser.two_digit_year_base': "
            "expected a century such as 2000."
        )

    return ParserOptions(
        header_synonyms=_parse_header_synonyms(columns_section),
        min_warning_description_length=min_len,
        two_digit_year_base=year_base,
    )


def _parse_upload_settings(raw: Mapping[str, Any]) -> UploadSettings:
    upload_section = _section(raw, "upload")

    max_bytes = _int_option(
        upload_section, "max_bytes", DEFAULT_MAX_UPLOAD_BYTES, "upload"
    )
    if max_bytes <= 0:
        raise ValueError("Invalid value for 'upload.max_bytes': must be > 0.")

    raw_ext = upload_section.get("allowed_extensions", DEFAULT_ALLOWED_EXTENSIONS)
    if isinstance(raw_ext, str) or not all(isinstance(e, str) for e in raw_ext):
        raise ValueError(
            "Invalid value for 'upload.allowed_extensions': "
            "expected a list of strings."
        )

    extensions = []
    for ext in raw_ext:
        ext = ext.strip().lower()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = f".{ext}"
        extensions.append(ext)

    if not extensions:
        raise ValueError("'upload.allowed_extensions' cannot be empty.")

    return UploadSettings(max_bytes=max_bytes, allowed_extensions=tuple(extensions))


def _parse_logging_settings(raw: Mapping[str, Any]) -> LoggingSettings:
    logging_section = _section(raw, "logging")

    level = str(logging_section.get("level", "INFO")).upper()
    if level not in LOG_LEVELS:
        raise ValueError(
            f"Invalid value for 'logging.level': {level!r}. "
            f"Expected one of: {', '.join(LOG_LEVELS)}."
        )

    return LoggingSettings(
        level=level,
        json_output=bool(logging_section.get("json", False)),
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the Cartola Ingest configuration from a TOML file.

    Expected sections in the TOML file (all optional)
    -------------------------------------------------
    [parser]
        ``min_warning_description_length`` and ``two_digit_year_base``.

    [parser.columns]
        Extra header synonyms per logical column (date, description,
        charge, deposit), appended to the built-in ones.

    [upload]
        ``max_bytes`` and ``allowed_extensions`` checked before parsing.

    [logging]
        ``level`` and ``json`` (JSON renderer instead of console output).

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML configuration file. When omitted,
        ``cartola_config.toml`` in the current directory is used if it
        exists, otherwise the built-in defaults are returned.

    Returns
    -------
    AppConfig
        Parsed and validated configuration.

    Raises
    ------
    FileNotFoundError
        If an explicit ``config_path`` does not exist.
    ValueError
        If the file cannot be parsed or holds invalid values.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
        if not config_file.is_file():
            return AppConfig()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)

    return AppConfig(
        parser=_parse_parser_options(raw),
        upload=_parse_upload_settings(raw),
        logging=_parse_logging_settings(raw),
        source=config_file,
    )
