"""
System configuration.

One configuration object for the whole system: logging plus the default
portfolio settings (valuation constants, symbol cap).

Search order for the YAML file used by SystemConfig.load():
1. Explicit path argument
2. LOTLEDGER_CONFIG environment variable
3. config/system.yaml relative to the working directory

A missing file is not an error: defaults are used.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from lotledger.services.portfolio.models import PortfolioConfig
from lotledger.system.log_system import LoggingConfig

CONFIG_ENV_VAR = "LOTLEDGER_CONFIG"
DEFAULT_CONFIG_PATH = Path("config/system.yaml")


class SystemConfig(BaseModel):
    """
    Complete system configuration.

    Attributes:
        logging: Logging configuration
        portfolio: Default configuration for new portfolios

    Example:
        >>> config = SystemConfig.load("config/system.yaml")
        >>> config.portfolio.valuation.share_flat_fee
        Decimal('5.00')
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    portfolio: PortfolioConfig = Field(default_factory=PortfolioConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> "SystemConfig":
        """
        Load configuration from YAML.

        Args:
            path: Optional explicit config path

        Returns:
            Parsed SystemConfig (defaults if no file is found)

        Raises:
            FileNotFoundError: If an explicit path does not exist
            ValueError: If the YAML cannot be parsed or fails validation
        """
        if path is not None:
            config_path = Path(path)
            if not config_path.exists():
                raise FileNotFoundError(f"Config file not found: {config_path}")
        elif os.environ.get(CONFIG_ENV_VAR):
            config_path = Path(os.environ[CONFIG_ENV_VAR])
            if not config_path.exists():
                raise FileNotFoundError(f"Config file from ${CONFIG_ENV_VAR} not found: {config_path}")
        elif DEFAULT_CONFIG_PATH.exists():
            config_path = DEFAULT_CONFIG_PATH
        else:
            return cls()

        try:
            with open(config_path, "r") as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML from {config_path}: {e}") from e

        return cls.from_dict(raw or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SystemConfig":
        """Build config from a plain dict (as parsed from YAML)."""
        if not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping, got {type(data).__name__}")
        return cls.model_validate(data)


_system_config: SystemConfig | None = None


def get_system_config() -> SystemConfig:
    """Get the cached system configuration, loading it on first use."""
    global _system_config
    if _system_config is None:
        _system_config = SystemConfig.load()
    return _system_config


def reload_system_config(path: str | Path | None = None) -> SystemConfig:
    """Force reload of the system configuration."""
    global _system_config
    _system_config = SystemConfig.load(path)
    return _system_config
