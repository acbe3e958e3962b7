"""
Dashboard settings.

Settings are read from an optional YAML file (``data/dashboard.yaml`` by
default) and then overridden by ``STOCKCORR_*`` environment variables.
"""

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional, Tuple, Union
import yaml
from stockcorr.errors import ConfigError


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "data" / "dashboard.yaml"
ENV_PREFIX = "STOCKCORR_"
PRICE_SOURCES = ("api", "yfinance")


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings for data fetching and display.

    Attributes:
        api_base_url: Base URL of the stock price service
        max_stocks: Maximum number of stocks shown on the heatmap
        default_minutes: Default price window, in minutes
        time_ranges: Selectable price windows, in minutes
        request_timeout: HTTP timeout in seconds
        cache_dir: Directory for the download cache
        cache_ttl_seconds: How long downloaded prices stay fresh
        price_source: "api" for the stock service, "yfinance" for Yahoo Finance

    Representation Invariants:
        - max_stocks > 0
        - default_minutes is one of time_ranges
        - request_timeout > 0, cache_ttl_seconds >= 0
        - price_source is one of PRICE_SOURCES
    """
    api_base_url: str = "http://20.244.56.144/evaluation-service"
    max_stocks: int = 8
    default_minutes: int = 15
    time_ranges: Tuple[int, ...] = field(default=(5, 15, 30, 60))
    request_timeout: float = 10.0
    cache_dir: str = ".cache"
    cache_ttl_seconds: float = 30.0
    price_source: str = "api"

    def __post_init__(self):
        """Validate representation invariants."""
        if self.max_stocks <= 0:
            raise ConfigError("max_stocks must be positive")
        if not self.time_ranges or any(m <= 0 for m in self.time_ranges):
            raise ConfigError("time_ranges must be non-empty positive minutes")
        if self.default_minutes not in self.time_ranges:
            raise ConfigError(
                f"default_minutes ({self.default_minutes}) must be one of {list(self.time_ranges)}"
            )
        if self.request_timeout <= 0:
            raise ConfigError("request_timeout must be positive")
        if self.cache_ttl_seconds < 0:
            raise ConfigError("cache_ttl_seconds cannot be negative")
        if self.price_source not in PRICE_SOURCES:
            raise ConfigError(
                f"price_source must be one of {PRICE_SOURCES}, got {self.price_source!r}"
            )


def _as_int(raw) -> int:
    # int() would truncate 8.5 to 8
    if isinstance(raw, float) and not raw.is_integer():
        raise ValueError(f"not a whole number: {raw}")
    return int(raw)


def _coerce(name: str, raw, current):
    """Convert a raw YAML/env value to the type of the current default."""
    try:
        if isinstance(current, tuple):
            if isinstance(raw, str):
                raw = [part for part in raw.split(",") if part.strip()]
            return tuple(_as_int(v) for v in raw)
        if isinstance(current, int):
            return _as_int(raw)
        if isinstance(current, float):
            return float(raw)
        return str(raw)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from e


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load settings from YAML and the environment.

    Preconditions:
        - If path is given explicitly, the file must exist

    Postconditions:
        - Returns a validated Settings object
        - Environment variables take precedence over the YAML file

    Args:
        path: Optional YAML file (defaults to data/dashboard.yaml if present)

    Returns:
        Settings

    Raises:
        ConfigError: If the file is missing/unreadable or a value is invalid
    """
    settings = Settings()
    known = {f.name for f in fields(Settings)}
    overrides = {}

    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if config_path.exists():
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read config file {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown settings: {', '.join(sorted(unknown))}")
        overrides.update(data)
    elif path is not None:
        raise ConfigError(f"Config file not found: {config_path}")

    for name in known:
        env_value = os.environ.get(ENV_PREFIX + name.upper())
        if env_value is not None:
            overrides[name] = env_value

    coerced = {
        name: _coerce(name, value, getattr(settings, name))
        for name, value in overrides.items()
    }
    return replace(settings, **coerced)
