"""
Utility modules for configuration, logging, and error handling.
"""

from sonicprint.utils.errors import (
    SonicprintError,
    DecodingError,
    UnsupportedFormatError,
    FileTooLargeError,
    AnalysisError,
    IncompatibleAnalysisError,
    ProviderError,
    ConfigurationError,
)
from sonicprint.utils.logging import get_logger, setup_logging, JSONFormatter
from sonicprint.utils.config import ConfigManager, load_config, get_default_config

__all__ = [
    "SonicprintError",
    "DecodingError",
    "UnsupportedFormatError",
    "FileTooLargeError",
    "AnalysisError",
    "IncompatibleAnalysisError",
    "ProviderError",
    "ConfigurationError",
    "get_logger",
    "setup_logging",
    "JSONFormatter",
    "ConfigManager",
    "load_config",
    "get_default_config",
]
