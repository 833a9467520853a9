"""Core types: results, exit codes, configuration and run settings."""

from .config import ConfigError, ReleaseCategory, ReleaseConfig, load_config
from .errors import ErrorCode
from .inputs import InputError, RunSettings, resolve_settings
from .result import Err, Ok, Result

__all__ = [
    # config
    "ConfigError",
    "ReleaseCategory",
    "ReleaseConfig",
    "load_config",
    # errors
    "ErrorCode",
    # inputs
    "InputError",
    "RunSettings",
    "resolve_settings",
    # result
    "Err",
    "Ok",
    "Result",
]
