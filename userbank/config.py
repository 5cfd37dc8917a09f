"""
UserBank configuration.

Sources, lowest to highest precedence:
    1. BankConfig defaults
    2. YAML file            (BankConfig.from_yaml / load_config(path))
    3. Environment          USERBANK_HOME, USERBANK_STATE,
                            USERBANK_DECIMALS, USERBANK_LOG_LEVEL

YAML keys mirror the field names:

    home: .userbank
    state_file: .userbank/state.json
    decimals: 18
    log_level: INFO
"""

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from userbank.core.exceptions import ConfigError
from userbank.core.units import DEFAULT_DECIMALS

_ENV_PREFIX = "USERBANK_"
_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _as_path(name: str, value: Any) -> Path:
    try:
        return Path(value)
    except TypeError as e:
        raise ConfigError(f"{name} must be a path", {name: value}) from e


@dataclass
class BankConfig:
    home:       Path           = Path(".userbank")
    state_file: Optional[Path] = None
    decimals:   int            = DEFAULT_DECIMALS
    log_level:  str            = "WARNING"

    def __post_init__(self) -> None:
        self.home = _as_path("home", self.home)
        if self.state_file is None:
            self.state_file = self.home / "state.json"
        else:
            self.state_file = _as_path("state_file", self.state_file)

        if isinstance(self.decimals, bool) or not isinstance(self.decimals, int) \
                or not 0 <= self.decimals <= 36:
            raise ConfigError("decimals must be an integer in 0..36", {"decimals": self.decimals})

        level = str(self.log_level).upper()
        if level not in _LOG_LEVELS:
            raise ConfigError("Unknown log_level", {"log_level": self.log_level})
        self.log_level = level

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BankConfig":
        known = {"home", "state_file", "decimals", "log_level"}
        unknown = set(data) - known
        if unknown:
            raise ConfigError("Unknown configuration keys", {"keys": sorted(unknown)})
        return cls(**dict(data))

    @classmethod
    def from_yaml(cls, config_file: Path) -> "BankConfig":
        """Load configuration from a YAML file."""
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigError("Config file not found", {"path": config_file}) from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}", {"path": config_file}) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Config file must contain a mapping", {"path": config_file})
        return cls.from_mapping(data)

    def with_env(self, environ: Optional[Mapping[str, str]] = None) -> "BankConfig":
        """Return a copy with USERBANK_* environment overrides applied."""
        env = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}

        if env.get(_ENV_PREFIX + "HOME"):
            overrides["home"] = Path(env[_ENV_PREFIX + "HOME"])
            # state_file follows home unless set explicitly below
            if self.state_file == self.home / "state.json":
                overrides["state_file"] = None
        if env.get(_ENV_PREFIX + "STATE"):
            overrides["state_file"] = Path(env[_ENV_PREFIX + "STATE"])
        if env.get(_ENV_PREFIX + "DECIMALS"):
            try:
                overrides["decimals"] = int(env[_ENV_PREFIX + "DECIMALS"])
            except ValueError as e:
                raise ConfigError(
                    "USERBANK_DECIMALS must be an integer",
                    {"value": env[_ENV_PREFIX + "DECIMALS"]},
                ) from e
        if env.get(_ENV_PREFIX + "LOG_LEVEL"):
            overrides["log_level"] = env[_ENV_PREFIX + "LOG_LEVEL"]

        return replace(self, **overrides)


def load_config(
    config_file: Optional[Path] = None,
    environ:     Optional[Mapping[str, str]] = None,
) -> BankConfig:
    """Defaults, then the YAML file if given, then the environment."""
    config = BankConfig.from_yaml(config_file) if config_file else BankConfig()
    return config.with_env(environ)
