"""Configuration loading from CLI args, env vars, and optional YAML file.

Precedence: command line, then environment, then YAML, then defaults.
"""

import logging
import os
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

import yaml

from logmerge.reader import DEFAULT_LABEL_WIDTH

logger = logging.getLogger(__name__)

BOUND_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return _parse_bool(value)
    return bool(value)


@dataclass(frozen=True)
class MergeConfig:
    files: tuple[str, ...] = ()
    start: datetime | None = None
    end: datetime | None = None
    separator: str = " "
    verbose: bool = False
    label_width: int = DEFAULT_LABEL_WIDTH


def parse_bound(value) -> datetime:
    """Parse a window bound ("2006-01-02T15:04:05") into a UTC datetime.

    PyYAML already turns unquoted timestamps into datetime objects, so
    those are accepted as-is. Raises ValueError on anything else.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        parsed = datetime.strptime(str(value).strip(), BOUND_FORMAT)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def load_yaml_config(path: str | None) -> dict:
    """Load defaults from a YAML file. Returns empty dict if no path.

    Raises ValueError when the file is not valid YAML or is not a mapping.
    """
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    logger.info("Loaded YAML config from %s", path)
    return data


def _first(*values):
    for value in values:
        if value is not None:
            return value
    return None


def load_config(cli_args, yaml_data: dict) -> MergeConfig:
    """Build MergeConfig from CLI args, env vars, and parsed YAML data.

    The end bound is widened by one second so the whole named second is
    included. Raises ValueError on malformed bounds or label width.
    """
    env_verbose = os.environ.get("LOGMERGE_VERBOSE")
    env_width = os.environ.get("LOGMERGE_LABEL_WIDTH")

    separator = _first(
        getattr(cli_args, "sep", None),
        os.environ.get("LOGMERGE_SEPARATOR"),
        yaml_data.get("separator"),
        MergeConfig.separator,
    )
    verbose = _first(
        getattr(cli_args, "verbose", None),
        _parse_bool(env_verbose) if env_verbose is not None else None,
        yaml_data.get("verbose"),
        MergeConfig.verbose,
    )
    label_width = int(_first(env_width, yaml_data.get("label_width"), MergeConfig.label_width))
    if label_width < DEFAULT_LABEL_WIDTH:
        raise ValueError(f"label width must be at least {DEFAULT_LABEL_WIDTH}, got {label_width}")

    raw_start = _first(getattr(cli_args, "start", None), yaml_data.get("start"))
    raw_end = _first(getattr(cli_args, "end", None), yaml_data.get("end"))
    start = parse_bound(raw_start) if raw_start else None
    end = parse_bound(raw_end) + timedelta(seconds=1) if raw_end else None

    return MergeConfig(
        files=tuple(getattr(cli_args, "files", None) or ()),
        start=start,
        end=end,
        separator=str(separator),
        verbose=_as_bool(verbose),
        label_width=label_width,
    )
