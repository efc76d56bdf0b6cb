"""Core module - Configuration, Constants, and Exceptions"""

from .config import Config, ConfigLoader, MergeConfig, RegressionConfig
from .constants import *
from .exceptions import (
    ClubConvergenceError,
    ConfigError,
    InvalidInputError,
    ParameterError,
    AnalysisError,
    InsufficientDataError,
    ComputationError,
)

__all__ = [
    "Config",
    "ConfigLoader",
    "MergeConfig",
    "RegressionConfig",
    "ClubConvergenceError",
    "ConfigError",
    "InvalidInputError",
    "ParameterError",
    "AnalysisError",
    "InsufficientDataError",
    "ComputationError",
]
