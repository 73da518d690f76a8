"""Core types: configuration, errors, results and logging."""

from .config import CacheConfig, Config, ConfigError, ReleaseConfig, TilesConfig, load_config
from .errors import ErrorCode, FetchError, ParseError
from .log import get_logger, setup_logging
from .result import Err, Ok, Result

__all__ = [
    # config
    "CacheConfig",
    "Config",
    "ConfigError",
    "ReleaseConfig",
    "TilesConfig",
    "load_config",
    # errors
    "ErrorCode",
    "FetchError",
    "ParseError",
    # log
    "get_logger",
    "setup_logging",
    # result
    "Err",
    "Ok",
    "Result",
]
