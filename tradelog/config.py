"""
Configuration loading and validation for the tradelog application.

Configuration objects are standard library dataclasses built from YAML by a
small recursive helper, with explicit validation of the raw dictionary
before anything is constructed.
"""
import math
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import List, Literal, Dict, Any, Type, cast

__all__ = ["load_config", "Config"]


# §1. Nested Configuration Dataclasses
# --------------------------------------------------------------------------------------


@dataclass(frozen=True)
class JournalConfig:
    path: Path


@dataclass(frozen=True)
class EquityConfig:
    starting_balance: float = 2200.0


@dataclass(frozen=True)
class PeriodsConfig:
    default: Literal["all", "week", "month", "year"] = "all"
    week_start: Literal["sunday", "monday"] = "sunday"


@dataclass(frozen=True)
class ReportingConfig:
    output_dir: Path
    output_formats: List[Literal["json", "markdown", "csv"]]


# §2. Top-Level Configuration
# --------------------------------------------------------------------------------------


@dataclass(frozen=True)
class Config:
    """The root configuration object, composing all nested sections."""
    journal: JournalConfig
    equity: EquityConfig
    periods: PeriodsConfig
    reporting: ReportingConfig


# §3. Validation and Loading
# --------------------------------------------------------------------------------------

_PERIODS = {"all", "week", "month", "year"}
_WEEK_STARTS = {"sunday", "monday"}
_OUTPUT_FORMATS = {"json", "markdown", "csv"}


def _from_dict(data_class: Type[Any], data: Any) -> Any:
    """Recursively creates nested dataclasses from a dictionary."""
    if isinstance(data, dict):
        field_types = {f.name: f.type for f in data_class.__dataclass_fields__.values()}

        kwargs = {}
        for k, v in data.items():
            field_type = field_types.get(k)
            # Unknown keys pass through; the dataclass constructor raises
            # TypeError for them, which load_config reports.
            kwargs[k] = _from_dict(field_type, v) if field_type else v
        return data_class(**kwargs)

    if isinstance(data, str) and data_class is Path:
        return Path(data)
    if isinstance(data, int) and not isinstance(data, bool) and data_class is float:
        return float(data)
    return data


def _validate_config(cfg: Dict[str, Any]) -> None:
    """
    Performs simple, explicit validation checks on the raw config dictionary.
    Fail fast on any logical inconsistencies.
    """
    if not isinstance(cfg, dict):
        raise ValueError("Configuration must be a YAML object.")

    for section in ("journal", "equity", "periods", "reporting"):
        if not isinstance(cfg.get(section), dict):
            raise ValueError(f"Configuration section '{section}' is missing or not a mapping.")

    if not cfg["journal"].get("path"):
        raise ValueError("journal.path is required")

    balance = cfg["equity"].get("starting_balance", 2200.0)
    if isinstance(balance, bool) or not isinstance(balance, (int, float)) or not math.isfinite(balance):
        raise ValueError("equity.starting_balance must be a finite number")

    if cfg["periods"].get("default", "all") not in _PERIODS:
        raise ValueError(f"periods.default must be one of {sorted(_PERIODS)}")
    if cfg["periods"].get("week_start", "sunday") not in _WEEK_STARTS:
        raise ValueError(f"periods.week_start must be one of {sorted(_WEEK_STARTS)}")

    formats = cfg["reporting"].get("output_formats", [])
    if not isinstance(formats, list) or not set(formats) <= _OUTPUT_FORMATS:
        raise ValueError(f"reporting.output_formats must be a list drawn from {sorted(_OUTPUT_FORMATS)}")


# impure
def load_config(config_path: Path) -> Config:
    """
    Loads and validates a YAML configuration file into a Config object.
    #impure: Reads from the filesystem.
    """
    if not config_path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in {config_path}: {e}") from e

    _validate_config(raw_config)

    try:
        return cast(Config, _from_dict(Config, raw_config))
    except (TypeError, KeyError) as e:
        raise ValueError(f"Configuration validation failed: missing or invalid key. Details: {e}") from e
