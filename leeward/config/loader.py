"""Configuration file loading.

Configuration files are TOML documents (``.toml``) or, for files written by
the example drivers, JSON documents (``.json``) with the same layout::

    utm_zone = 11

    [lever_arm]
    x = 0.0
    y = 0.0
    z = 0.0

    [boresight]
    roll = -1.5707963267948966
    pitch = 0.0
    yaw = -1.5707963267948966

    [error]          # optional; any subset of the Uncertainties fields
    gnss_z = 0.04
    beam_divergence = 0.00025

Angles are radians.
"""

import json
import tomllib
from pathlib import Path
from typing import Any, Dict, Union

from leeward.config.config import Config
from leeward.exceptions import ConfigError


def read_config_document(path: Union[str, Path]) -> Dict[str, Any]:
    """Parse a configuration file into a nested dictionary.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError("configuration file not found", path=str(path))
    try:
        if path.suffix.lower() == ".json":
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"unable to parse configuration: {e}", path=str(path)) from e


def load_config(path: Union[str, Path]) -> Config:
    """Load a ``Config`` from a TOML or JSON file.

    Args:
        path: Path to the configuration file.

    Returns:
        The parsed configuration.

    Raises:
        ConfigError: If the file is missing, unparsable, or incomplete.

    Example:
        >>> config = load_config("data/config.toml")
    """
    document = read_config_document(path)
    try:
        return Config.from_dict(document)
    except ConfigError as e:
        raise ConfigError(str(e), path=str(path)) from e


def save_config(config: Config, path: Union[str, Path]) -> None:
    """Write a configuration as JSON, readable by ``load_config``."""
    path = Path(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)
