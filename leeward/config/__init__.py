"""System calibration configuration.

- Config: UTM zone, lever arm, boresight and error magnitudes
- Uncertainties: per-variable standard deviations used for TPU
- load_config / save_config: TOML and JSON configuration files
"""

from leeward.config.config import Config, Uncertainties
from leeward.config.loader import load_config, read_config_document, save_config

__all__ = [
    "Config",
    "Uncertainties",
    "load_config",
    "read_config_document",
    "save_config",
]
