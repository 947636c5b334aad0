from ._version import __version__
from .config import Config, ConfigFile, ConfigOptions, ConfigError

__all__ = ["__version__", "Config", "ConfigFile", "ConfigOptions", "ConfigError"]
