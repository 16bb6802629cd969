from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml

from .errors import ConfigError
from ..events.selection import STRATEGIES

SEED_ENV_VAR = "HOPEKEEPER_SEED"
LOG_LEVEL_ENV_VAR = "HOPEKEEPER_LOG_LEVEL"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class VariableSpec:
    name: str
    initial: float
    min: float
    max: float


@dataclass
class GameConfig:
    seed: Optional[int] = None
    events: str = "data/events.yaml" # path or http(s) URL
    items: Optional[str] = "data/items.yaml"
    statuses: Optional[str] = "data/statuses.yaml"
    variables: List[VariableSpec] = field(default_factory=list)
    months_per_year: int = 12
    selection: str = "weighted"
    log_level: str = "INFO"


def _variable_spec(v_data: Dict[str, Any], path: Path) -> VariableSpec:
    for key in ("name", "initial", "min", "max"):
        if key not in v_data:
            raise ConfigError(f"Missing key '{key}' in variable '{v_data.get('name', 'N/A')}' in {path}")
    try:
        spec = VariableSpec(
            name=str(v_data["name"]),
            initial=float(v_data["initial"]),
            min=float(v_data["min"]),
            max=float(v_data["max"]),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid number in variable '{v_data['name']}' in {path}: {e}") from e
    if spec.min > spec.max:
        raise ConfigError(f"Variable '{spec.name}' in {path} has min greater than max.")
    return spec


def _int(data: Dict[str, Any], key: str, path: Path) -> int:
    try:
        return int(data[key])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"'{key}' in {path} must be an integer, got {data[key]!r}.") from e


def _str(data: Dict[str, Any], key: str, path: Path) -> str:
    if not isinstance(data[key], str):
        raise ConfigError(f"'{key}' in {path} must be a string, got {data[key]!r}.")
    return data[key]


def load_config(path: Path) -> GameConfig:
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Unable to read config '{path}': {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed config '{path}': {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {path} must be a mapping.")

    config = GameConfig()
    if data.get("seed") is not None:
        config.seed = _int(data, "seed", path)
    if "events" in data:
        config.events = _str(data, "events", path)
    for key in ("items", "statuses"):
        if key in data:
            setattr(config, key, None if data[key] is None else _str(data, key, path))
    if "selection" in data:
        config.selection = _str(data, "selection", path)
        if config.selection not in STRATEGIES:
            raise ConfigError(
                f"Unknown selection '{config.selection}' in {path}. "
                f"Expected one of: {', '.join(sorted(STRATEGIES))}."
            )
    if "months_per_year" in data:
        config.months_per_year = _int(data, "months_per_year", path)
        if config.months_per_year < 1:
            raise ConfigError(f"'months_per_year' in {path} must be at least 1.")
    if "log_level" in data:
        config.log_level = str(data["log_level"]).upper()

    raw_vars = data.get("variables", [])
    if not isinstance(raw_vars, list):
        raise ConfigError(f"'variables' in {path} must be a list.")
    config.variables = [_variable_spec(v, path) for v in raw_vars]
    names = [v.name for v in config.variables]
    if len(names) != len(set(names)):
        raise ConfigError(f"Duplicate variable names found in {path}.")

    apply_env_overrides(config)
    if config.log_level not in LOG_LEVELS:
        raise ConfigError(f"Unknown log level '{config.log_level}'.")
    return config


def apply_env_overrides(config: GameConfig, environ: Optional[Dict[str, str]] = None) -> GameConfig:
    env = os.environ if environ is None else environ
    seed = env.get(SEED_ENV_VAR)
    if seed:
        try:
            config.seed = int(seed)
        except ValueError as e:
            raise ConfigError(f"{SEED_ENV_VAR} must be an integer, got '{seed}'.") from e
    level = env.get(LOG_LEVEL_ENV_VAR)
    if level:
        config.log_level = level.upper()
    return config
