# Project FinSight - Project profitability analytics for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for Project FinSight.

This module is responsible for:
- loading the engine configuration from a TOML file,
- exposing the typed EngineConfig dataclass used by the reporting layer
  (portfolio.py) and by logging setup.

The pure engine functions (credits, monthly, rollup, health, ...) take
their parameters explicitly and never read the configuration themselves.
"""

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

DEFAULT_CONFIG_FILE = "project_finsight_config.toml"


@dataclass(frozen=True)
class EngineConfig:
    """
    Settings for the reporting layer.

    Attributes:
        window_months: Number of months in the monthly breakdowns.
        currency: Presentation currency code (e.g. 'USD', 'EUR').
        margin_decimals: Decimals kept for margins in tabular views.
        log_level: Level name passed to ``configure_logging``.
    """

    window_months: int = 6
    currency: str = "USD"
    margin_decimals: int = 1
    log_level: str = "INFO"


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


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _parse_int(value: Any, key: str, minimum: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{key}' in the configuration. Expected an integer."
        ) from exc
    if isinstance(value, bool) or parsed < minimum:
        raise ValueError(
            f"Invalid value for '{key}' in the configuration. "
            f"Expected an integer >= {minimum}."
        )
    return parsed


def load_engine_config(config_path: Optional[str] = None) -> EngineConfig:
    """
    Load the Project FinSight configuration from a TOML file.

    Expected sections (all optional)
    --------------------------------
    [metrics]
        window_months = 6      # months in the monthly breakdowns

    [display]
        currency = "USD"
        margin_decimals = 1    # rounding of margins in tabular views

    [logging]
        level = "INFO"

    Parameters
    ----------
    config_path :
        Path to the TOML file. When omitted, ``project_finsight_config.toml``
        in the working directory is used if it exists; otherwise the
        built-in defaults are returned.

    Returns
    -------
    EngineConfig

    Raises
    ------
    FileNotFoundError
        If an explicit ``config_path`` does not exist.
    ValueError
        If the file cannot be parsed or a value is invalid.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
        if not config_file.is_file():
            return EngineConfig()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    defaults = EngineConfig()

    # 1) Metrics
    metrics_section = _section(raw, "metrics")
    window_months = defaults.window_months
    if "window_months" in metrics_section:
        window_months = _parse_int(
            metrics_section["window_months"], "metrics.window_months", minimum=1
        )

    # 2) Display
    display_section = _section(raw, "display")
    currency = str(display_section.get("currency") or defaults.currency)
    margin_decimals = defaults.margin_decimals
    if "margin_decimals" in display_section:
        margin_decimals = _parse_int(
            display_section["margin_decimals"], "display.margin_decimals", minimum=0
        )

    # 3) Logging
    logging_section = _section(raw, "logging")
    log_level = str(logging_section.get("level") or defaults.log_level).upper()

    return EngineConfig(
        window_months=window_months,
        currency=currency,
        margin_decimals=margin_decimals,
        log_level=log_level,
    )
